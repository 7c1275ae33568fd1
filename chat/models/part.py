"""Part models."""

import time
from typing import Annotated, Any, Literal

from pydantic import BaseModel, Field

from ..exceptions import InvalidOperationError
from .part_time import PartTime
from .tool_status import ToolStatus, can_transition


class TextPart(BaseModel):
    type: Literal["text"] = "text"
    text: str = ""


class ReasoningPart(BaseModel):
    type: Literal["reasoning"] = "reasoning"
    text: str = ""


class ToolInvocationPart(BaseModel):
    """A model-requested tool call and its execution outcome."""

    type: Literal["tool-invocation"] = "tool-invocation"
    toolCallId: str
    toolName: str
    args: dict[str, Any] = Field(default_factory=dict)
    status: ToolStatus = ToolStatus.PENDING
    result: Any = None
    error: str | None = None
    time: PartTime | None = None

    def _move_to(self, target: ToolStatus) -> None:
        if not can_transition(self.status, target):
            raise InvalidOperationError(
                f"Tool call {self.toolCallId} cannot move from "
                f"{self.status.value} to {target.value}"
            )
        self.status = target

    def mark_executing(self) -> None:
        self._move_to(ToolStatus.EXECUTING)
        self.time = PartTime(start=time.time())

    def mark_success(self, result: Any) -> None:
        self._move_to(ToolStatus.SUCCESS)
        self.result = result
        self._close_time()

    def mark_error(self, error: str) -> None:
        self._move_to(ToolStatus.ERROR)
        self.error = error
        self._close_time()

    def _close_time(self) -> None:
        now = time.time()
        if self.time is None:
            self.time = PartTime(start=now)
        self.time.end = now


Part = Annotated[
    TextPart | ReasoningPart | ToolInvocationPart,
    Field(discriminator="type"),
]
