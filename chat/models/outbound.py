"""Request-side message shapes sent to the model provider."""

import json
from typing import Literal

from pydantic import BaseModel

from .pending import PendingToolCall


class ToolCallFunction(BaseModel):
    name: str
    arguments: str


class OutboundToolCall(BaseModel):
    id: str
    type: Literal["function"] = "function"
    function: ToolCallFunction

    @classmethod
    def from_pending(cls, call: PendingToolCall) -> "OutboundToolCall":
        return cls(
            id=call.id,
            function=ToolCallFunction(name=call.name, arguments=json.dumps(call.args)),
        )


class OutboundMessage(BaseModel):
    """A flattened transcript entry, tool-call request or tool result."""

    role: Literal["system", "user", "assistant", "tool"]
    content: str = ""
    tool_calls: list[OutboundToolCall] | None = None
    tool_call_id: str | None = None


class ToolResultRecord(OutboundMessage):
    """Result of one tool call, fed back to the model in the follow-up round."""

    role: Literal["tool"] = "tool"
    tool_call_id: str
    is_error: bool = False
