"""
Stop chat endpoint.
"""

from fastapi import APIRouter, HTTPException

from chat import NotFoundError

from ...state import get_chat


router = APIRouter()


@router.post("/chat/{chatID}/stop")
async def stop_chat_route(chatID: str) -> bool:
    """Cancel the turn in flight, if any."""
    try:
        chat = get_chat(chatID)
    except NotFoundError:
        raise HTTPException(status_code=404, detail="Chat not found")
    was_loading = chat.is_loading
    chat.stop()
    return was_loading
