"""
Create chat endpoint.
"""

import logging

from fastapi import APIRouter, HTTPException

from chat import ChatState
from config import ConfigurationError

from ...requests import CreateChatRequest
from ...state import create_chat

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/chat")
async def create_chat_route(request: CreateChatRequest) -> ChatState:
    """Create a new chat."""
    try:
        chat = create_chat(mode=request.mode, provider=request.provider)
    except ConfigurationError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except RuntimeError as e:
        logger.error("Cannot create chat: %s", e)
        raise HTTPException(status_code=500, detail=str(e))
    return chat.snapshot()
