"""
Tool execution pipeline.

Drains the tool calls queued during a stream round strictly in arrival order:
each call is looked up, validated, passed through the confirmation gate and
executed before the next one starts. Every failure is recorded on the part and
returned as a tool result; nothing is raised past the pipeline.
"""

import json
import logging
from typing import Any, Awaitable, Callable

from pydantic_core import to_jsonable_python

from .confirmation import ConfirmationGate
from .exceptions import ToolError
from .models import Message, PendingToolCall, ToolInvocationPart, ToolResultRecord
from .registry import ToolRegistry

logger = logging.getLogger(__name__)

CANCELLED_BEFORE_EXECUTION = "Cancelled before execution"

ChangeCallback = Callable[[Message], Awaitable[None]]


async def _no_change_callback(message: Message) -> None:
    pass


def encode_tool_content(value: Any) -> str:
    """JSON-encode a tool result for the follow-up round."""
    return json.dumps(to_jsonable_python(value, fallback=str))


class ToolExecutionPipeline:
    """Sequential tool dispatcher for one round's queued calls."""

    def __init__(
        self,
        registry: ToolRegistry,
        gate: ConfirmationGate,
        on_change: ChangeCallback | None = None,
        is_cancelled: Callable[[], bool] = lambda: False,
    ):
        """
        Initialize the pipeline.

        Args:
            registry: Tool registry used for lookup, validation and dispatch
            gate: Confirmation gate consulted before each dispatch
            on_change: Awaited after every tool part state change
            is_cancelled: Cancellation flag, consulted before each dispatch
        """
        self.registry = registry
        self.gate = gate
        self.on_change = on_change or _no_change_callback
        self.is_cancelled = is_cancelled

    async def run(
        self, message: Message, calls: list[PendingToolCall]
    ) -> list[ToolResultRecord]:
        """
        Execute queued tool calls one after another.

        Args:
            message: Assistant message holding the calls' tool-invocation parts
            calls: Calls in arrival order

        Returns:
            One result record per dispatched call, in the same order
        """
        results: list[ToolResultRecord] = []

        for call in calls:
            part = message.open_tool_part(call.id)
            if part is None:
                # Parts are created together with the queue entry; keep the
                # record consistent even if the transcript was replaced
                part = ToolInvocationPart(toolCallId=call.id, toolName=call.name, args=call.args)
                message.parts.append(part)

            if self.is_cancelled():
                part.mark_error(CANCELLED_BEFORE_EXECUTION)
                await self.on_change(message)
                continue

            part.mark_executing()
            await self.on_change(message)

            record = await self._execute(call, part)
            results.append(record)
            await self.on_change(message)

        return results

    async def _execute(self, call: PendingToolCall, part: ToolInvocationPart) -> ToolResultRecord:
        try:
            validated = self.registry.validate(call.name, call.args)
            entry = self.registry.get(call.name)
            await self.gate.check_confirmation(call.id, call.name, call.args)
            logger.info("Executing tool %s (%s)", call.name, call.id)
            result = await entry.execute(validated)
        except ToolError as e:
            logger.warning("Tool %s (%s) failed: %s", call.name, call.id, e)
            return self._record_error(part, str(e))
        except Exception as e:
            logger.exception("Tool %s (%s) raised", call.name, call.id)
            return self._record_error(part, str(e) or type(e).__name__)

        part.mark_success(result)
        logger.info("Tool %s (%s) completed (%.1fms)", call.name, call.id, part.time.duration_ms)
        return ToolResultRecord(tool_call_id=call.id, content=encode_tool_content(result))

    @staticmethod
    def _record_error(part: ToolInvocationPart, error: str) -> ToolResultRecord:
        part.mark_error(error)
        return ToolResultRecord(
            tool_call_id=part.toolCallId,
            content=encode_tool_content({"error": error}),
            is_error=True,
        )
