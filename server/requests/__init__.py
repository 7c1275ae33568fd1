"""
HTTP request models for the API.

These are Pydantic models for validating and parsing API requests.
"""

from .create_chat_request import CreateChatRequest
from .reject_request import RejectRequest
from .send_message_request import SendMessageRequest
from .set_mode_request import SetModeRequest

__all__ = [
    # Chat requests
    "CreateChatRequest",
    "SetModeRequest",
    # Message requests
    "SendMessageRequest",
    # Confirmation requests
    "RejectRequest",
]
