"""
Delete chat endpoint.
"""

import logging

from fastapi import APIRouter, HTTPException

from chat import NotFoundError

from ...state import delete_chat

logger = logging.getLogger(__name__)

router = APIRouter()


@router.delete("/chat/{chatID}")
async def delete_chat_route(chatID: str) -> bool:
    """Stop any running turn and delete the chat."""
    try:
        return delete_chat(chatID)
    except NotFoundError:
        logger.debug("Chat not found for deletion: %s", chatID)
        raise HTTPException(status_code=404, detail="Chat not found")
