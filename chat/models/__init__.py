"""
Domain models for the chat engine.

These are the core data structures used throughout the application.
"""

from .chat_state import ChatState
from .chunk import (
    DoneChunk,
    ErrorChunk,
    ReasoningChunk,
    StreamChunk,
    TextDeltaChunk,
    ToolCallChunk,
)
from .message import Message, Role
from .message_time import MessageTime
from .outbound import OutboundMessage, OutboundToolCall, ToolCallFunction, ToolResultRecord
from .part import Part, ReasoningPart, TextPart, ToolInvocationPart
from .part_time import PartTime
from .pending import PendingConfirmation, PendingToolCall
from .tool_status import ToolStatus, can_transition, is_terminal
from .utils import gen_id

__all__ = [
    # Utils
    "gen_id",
    # Time models
    "MessageTime",
    "PartTime",
    # Message models
    "Role",
    "Message",
    "ChatState",
    # Part models
    "TextPart",
    "ReasoningPart",
    "ToolInvocationPart",
    "Part",
    "ToolStatus",
    "can_transition",
    "is_terminal",
    # Stream chunks
    "TextDeltaChunk",
    "ReasoningChunk",
    "ToolCallChunk",
    "DoneChunk",
    "ErrorChunk",
    "StreamChunk",
    # Tool call records
    "PendingToolCall",
    "PendingConfirmation",
    "OutboundMessage",
    "OutboundToolCall",
    "ToolCallFunction",
    "ToolResultRecord",
]
