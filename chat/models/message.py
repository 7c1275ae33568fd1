"""Message models."""

import time
from enum import Enum

from pydantic import BaseModel, Field

from .message_time import MessageTime
from .part import Part, ReasoningPart, TextPart, ToolInvocationPart
from .tool_status import is_terminal
from .utils import gen_id


class Role(str, Enum):
    """Transcript entry author."""

    USER = "user"
    ASSISTANT = "assistant"
    SYSTEM = "system"


class Message(BaseModel):
    """
    One transcript entry.

    ``content`` is the flattened text of the message and mirrors the single
    text part for consumers that do not understand parts.
    """

    id: str = Field(default_factory=lambda: gen_id("msg_"))
    role: Role
    content: str = ""
    parts: list[Part] = Field(default_factory=list)
    time: MessageTime = Field(default_factory=lambda: MessageTime(created=time.time()))

    @classmethod
    def user(cls, text: str) -> "Message":
        """Create a user message with a single text part."""
        return cls(role=Role.USER, content=text, parts=[TextPart(text=text)])

    @classmethod
    def assistant_placeholder(cls) -> "Message":
        """Create the empty assistant message a round streams into."""
        return cls(role=Role.ASSISTANT)

    @property
    def text_part(self) -> TextPart | None:
        for part in self.parts:
            if isinstance(part, TextPart):
                return part
        return None

    @property
    def reasoning_part(self) -> ReasoningPart | None:
        for part in self.parts:
            if isinstance(part, ReasoningPart):
                return part
        return None

    @property
    def tool_parts(self) -> list[ToolInvocationPart]:
        return [p for p in self.parts if isinstance(p, ToolInvocationPart)]

    def find_tool_part(self, tool_call_id: str) -> ToolInvocationPart | None:
        """Find the tool invocation part for a tool call ID."""
        for part in self.tool_parts:
            if part.toolCallId == tool_call_id:
                return part
        return None

    def open_tool_part(self, tool_call_id: str) -> ToolInvocationPart | None:
        """Find the earliest unsettled part for a tool call ID (some providers reuse IDs across rounds)."""
        for part in self.tool_parts:
            if part.toolCallId == tool_call_id and not is_terminal(part.status):
                return part
        return None

    @property
    def is_completed(self) -> bool:
        return self.time.completed is not None

    def complete(self) -> None:
        """Mark the message settled."""
        self.time.completed = time.time()
