"""Serializable view of an orchestrator's observable state."""

from pydantic import BaseModel

from .message import Message
from .pending import PendingConfirmation


class ChatState(BaseModel):
    id: str
    mode: str
    messages: list[Message]
    isLoading: bool
    error: str | None = None
    pendingConfirmation: PendingConfirmation | None = None
