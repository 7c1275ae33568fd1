"""Tool confirmation endpoints."""

import logging

from fastapi import APIRouter, HTTPException

from chat import InvalidOperationError, NotFoundError

from ...requests import RejectRequest
from ...state import get_chat

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/chat/{chatID}/confirm")
async def confirm_tool_route(chatID: str) -> dict:
    """
    Approve the chat's pending tool confirmation.

    Args:
        chatID: The chat ID

    Returns:
        Success confirmation
    """
    try:
        chat = get_chat(chatID)
        pending = chat.pending_confirmation
        chat.confirm_tool()
    except NotFoundError:
        raise HTTPException(status_code=404, detail="Chat not found")
    except InvalidOperationError as e:
        raise HTTPException(status_code=409, detail=str(e))

    logger.info("Confirmed tool call %s in chat %s", pending.toolCallId, chatID)
    return {"success": True, "toolCallId": pending.toolCallId}


@router.post("/chat/{chatID}/reject")
async def reject_tool_route(chatID: str, request: RejectRequest) -> dict:
    """
    Reject the chat's pending tool confirmation.

    Args:
        chatID: The chat ID
        request: Rejection reason

    Returns:
        Success confirmation
    """
    try:
        chat = get_chat(chatID)
        pending = chat.pending_confirmation
        chat.reject_tool(request.reason)
    except NotFoundError:
        raise HTTPException(status_code=404, detail="Chat not found")
    except InvalidOperationError as e:
        raise HTTPException(status_code=409, detail=str(e))

    logger.info("Rejected tool call %s in chat %s", pending.toolCallId, chatID)
    return {"success": True, "toolCallId": pending.toolCallId}
