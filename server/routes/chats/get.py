"""
Get chat endpoint.
"""

import logging

from fastapi import APIRouter, HTTPException

from chat import ChatState, NotFoundError

from ...state import get_chat

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/chat/{chatID}")
async def get_chat_route(chatID: str) -> ChatState:
    """Get the chat transcript and status."""
    try:
        return get_chat(chatID).snapshot()
    except NotFoundError:
        logger.debug("Chat not found: %s", chatID)
        raise HTTPException(status_code=404, detail="Chat not found")
