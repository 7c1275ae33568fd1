"""Transient records that live between chunk arrival and tool execution."""

from typing import Any

from pydantic import BaseModel, Field


class PendingToolCall(BaseModel):
    """A tool call queued during a stream round, drained by the tool phase."""

    id: str
    name: str
    args: dict[str, Any] = Field(default_factory=dict)


class PendingConfirmation(BaseModel):
    """A mutating tool call waiting for the user's decision."""

    toolCallId: str
    toolName: str
    sql: str
    isMutation: bool = True
