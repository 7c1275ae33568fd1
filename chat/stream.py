"""
Stream merging.

Folds an ordered sequence of protocol chunks into the last message of a
transcript. Chunks are applied synchronously in arrival order on the task that
owns the transcript, which is what lets text and reasoning use plain append.
"""

import json
import logging
from typing import Any

from .models import (
    DoneChunk,
    ErrorChunk,
    Message,
    PendingToolCall,
    ReasoningChunk,
    ReasoningPart,
    StreamChunk,
    TextDeltaChunk,
    TextPart,
    ToolCallChunk,
    ToolInvocationPart,
    gen_id,
)

logger = logging.getLogger(__name__)

UNKNOWN_TOOL_NAME = "unknown"


def parse_tool_arguments(raw: str | None) -> dict[str, Any]:
    """
    Parse the JSON argument text of a tool call.

    Args:
        raw: JSON object text, or None/blank for a call without arguments

    Returns:
        The decoded argument mapping

    Raises:
        ValueError: If the text is not valid JSON or not a JSON object
    """
    if raw is None or not raw.strip():
        return {}
    try:
        value = json.loads(raw)
    except json.JSONDecodeError as e:
        raise ValueError(f"Invalid tool arguments: {e.msg} at position {e.pos}") from e
    if not isinstance(value, dict):
        raise ValueError(
            f"Invalid tool arguments: expected a JSON object, got {type(value).__name__}"
        )
    return value


class StreamMerger:
    """
    Applies stream chunks to the in-progress (last) message of a transcript.

    Tool calls are queued in ``pending_tool_calls`` for the execution phase.
    After a ``done`` or ``error`` chunk the merger is terminated and ignores
    anything else the stream delivers.
    """

    def __init__(self, messages: list[Message]):
        self._messages = messages
        self.pending_tool_calls: list[PendingToolCall] = []
        self.round_text = ""
        self.error: str | None = None
        self.finish_reason: str | None = None
        self.terminated = False

    @property
    def message(self) -> Message:
        return self._messages[-1]

    @property
    def failed(self) -> bool:
        return self.error is not None

    def apply(self, chunk: StreamChunk) -> bool:
        """
        Apply one chunk.

        Args:
            chunk: The next chunk in arrival order

        Returns:
            True if further chunks should be applied, False once the stream
            has terminated
        """
        if self.terminated:
            logger.debug("Ignoring %s chunk after stream termination", chunk.type)
            return False

        if isinstance(chunk, TextDeltaChunk):
            self._append_text(chunk.text)
        elif isinstance(chunk, ReasoningChunk):
            self._append_reasoning(chunk.text)
        elif isinstance(chunk, ToolCallChunk):
            self._add_tool_call(chunk)
        elif isinstance(chunk, DoneChunk):
            self.finish_reason = chunk.finishReason
            self.terminated = True
        elif isinstance(chunk, ErrorChunk):
            self.error = chunk.message or "Unknown error"
            self.terminated = True
            logger.warning("Stream reported error: %s", self.error)

        return not self.terminated

    def drain_tool_calls(self) -> list[PendingToolCall]:
        """Hand the queued tool calls to the execution phase and clear the queue."""
        calls = self.pending_tool_calls
        self.pending_tool_calls = []
        return calls

    def _append_text(self, text: str) -> None:
        message = self.message
        part = message.text_part
        if part is None:
            part = TextPart()
            message.parts.append(part)
        part.text += text
        message.content = part.text
        self.round_text += text

    def _append_reasoning(self, text: str) -> None:
        message = self.message
        part = message.reasoning_part
        if part is None:
            # Reasoning renders ahead of the text it preceded
            part = ReasoningPart()
            message.parts.insert(0, part)
        part.text += text

    def _add_tool_call(self, chunk: ToolCallChunk) -> None:
        call_id = chunk.id or gen_id("call_")
        name = chunk.name or UNKNOWN_TOOL_NAME
        part = ToolInvocationPart(toolCallId=call_id, toolName=name)
        self.message.parts.append(part)

        try:
            args = parse_tool_arguments(chunk.arguments)
        except ValueError as e:
            logger.warning("Tool call %s (%s) rejected: %s", call_id, name, e)
            part.mark_error(str(e))
            return

        part.args = args
        self.pending_tool_calls.append(PendingToolCall(id=call_id, name=name, args=args))
        logger.debug("Queued tool call %s: %s", call_id, name)
