"""
Chat engine package.

This package contains the transport-agnostic orchestration logic of the
database assistant. The server package provides HTTP bindings around it and
the agent package supplies the model transport and database tools.
"""

from .confirmation import ConfirmationGate, is_sql_mutation, requires_confirmation
from .events import (
    CHAT_STATUS,
    CONFIRMATION_REQUESTED,
    CONFIRMATION_RESOLVED,
    MESSAGE_REMOVED,
    MESSAGE_UPDATED,
    Event,
    EventBus,
    NullEventBus,
    RecordingEventBus,
)
from .exceptions import (
    ConfirmationPendingError,
    ConfirmationRejectedError,
    CoreError,
    InvalidOperationError,
    NotFoundError,
    RoundInProgressError,
    ToolArgumentError,
    ToolError,
    TransportError,
    UnknownToolError,
)
from .models import (
    ChatState,
    Message,
    PendingConfirmation,
    PendingToolCall,
    Role,
    StreamChunk,
    ToolInvocationPart,
    ToolResultRecord,
    ToolStatus,
)
from .orchestrator import ChatOrchestrator
from .pipeline import ToolExecutionPipeline
from .registry import NoArguments, ToolEntry, ToolRegistry, ToolSpec
from .stream import StreamMerger, parse_tool_arguments
from .transport import ChatRequest, Transport

__all__ = [
    # Exceptions
    "CoreError",
    "NotFoundError",
    "InvalidOperationError",
    "RoundInProgressError",
    "ConfirmationPendingError",
    "TransportError",
    "ToolError",
    "UnknownToolError",
    "ToolArgumentError",
    "ConfirmationRejectedError",
    # Events
    "Event",
    "EventBus",
    "NullEventBus",
    "RecordingEventBus",
    "MESSAGE_UPDATED",
    "MESSAGE_REMOVED",
    "CHAT_STATUS",
    "CONFIRMATION_REQUESTED",
    "CONFIRMATION_RESOLVED",
    # Models
    "ChatState",
    "Message",
    "Role",
    "ToolInvocationPart",
    "ToolStatus",
    "StreamChunk",
    "PendingToolCall",
    "PendingConfirmation",
    "ToolResultRecord",
    # Components
    "ChatOrchestrator",
    "ConfirmationGate",
    "StreamMerger",
    "ToolExecutionPipeline",
    "ToolRegistry",
    "ToolEntry",
    "ToolSpec",
    "NoArguments",
    "ChatRequest",
    "Transport",
    # Helpers
    "is_sql_mutation",
    "requires_confirmation",
    "parse_tool_arguments",
]
