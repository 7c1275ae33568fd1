"""
Set chat mode endpoint.
"""

from fastapi import APIRouter, HTTPException

from chat import ChatState, NotFoundError
from config import ConfigurationError

from ...requests import SetModeRequest
from ...state import get_chat


router = APIRouter()


@router.put("/chat/{chatID}/mode")
async def set_mode_route(chatID: str, request: SetModeRequest) -> ChatState:
    """Switch the agent mode used by subsequent turns."""
    try:
        chat = get_chat(chatID)
        chat.set_mode(request.mode)
    except NotFoundError:
        raise HTTPException(status_code=404, detail="Chat not found")
    except ConfigurationError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return chat.snapshot()
