"""
Chat orchestration.

ChatOrchestrator owns one conversation transcript and drives its turns: each
turn streams one or more model rounds into a single assistant message, runs
the tool calls a round requested and feeds their results into the next round
until the model answers without calling tools.
"""

import asyncio
import logging
import time

from config import ChatSettings, ConfigurationError, ProviderRegistry, provider_registry
from config.agent_config import AgentConfig, get_mode_config, resolve_agent_config

from .confirmation import ConfirmationGate
from .events import CHAT_STATUS, MESSAGE_REMOVED, MESSAGE_UPDATED, Event, EventBus, NullEventBus
from .exceptions import (
    ConfirmationPendingError,
    InvalidOperationError,
    RoundInProgressError,
)
from .models import (
    ChatState,
    ErrorChunk,
    Message,
    OutboundMessage,
    OutboundToolCall,
    PendingConfirmation,
    PendingToolCall,
    Role,
    gen_id,
)
from .pipeline import CANCELLED_BEFORE_EXECUTION, ToolExecutionPipeline
from .registry import ToolRegistry
from .stream import StreamMerger
from .transport import ChatRequest, Transport

logger = logging.getLogger(__name__)

STOPPED_BY_USER = "Stopped by user"
STREAM_FAILED_BEFORE_EXECUTION = "Not executed: the response stream failed"


class ChatOrchestrator:
    """
    State machine for one chat.

    Only one turn runs at a time. The transcript, loading flag, error and
    pending confirmation are observable between suspensions; every change is
    also published on the event bus.
    """

    def __init__(
        self,
        transport: Transport,
        registry: ToolRegistry,
        settings: ChatSettings | None = None,
        event_bus: EventBus | None = None,
        mode: str | None = None,
        provider: str | None = None,
        chat_id: str | None = None,
        providers: ProviderRegistry = provider_registry,
    ):
        """
        Initialize the orchestrator.

        Args:
            transport: Model transport
            registry: Tools the model may call
            settings: User chat settings
            event_bus: Event bus for state change events
            mode: Agent mode (defaults to the settings' default mode)
            provider: Provider ID; None picks the best available one per turn
            chat_id: Chat identifier
            providers: Provider registry used to resolve the agent config

        Raises:
            ConfigurationError: If the mode is unknown
        """
        self.id = chat_id or gen_id("chat_")
        self.transport = transport
        self.registry = registry
        self.settings = settings or ChatSettings()
        self.event_bus = event_bus or NullEventBus()
        self.provider = provider
        self.providers = providers
        self.mode = mode or self.settings.default_mode
        get_mode_config(self.mode)

        self.gate = ConfirmationGate(
            auto_accept=self.settings.auto_accept_sql,
            event_bus=self.event_bus,
            timeout_seconds=self.settings.confirmation_timeout_seconds,
        )

        self._messages: list[Message] = []
        self._loading = False
        self._error: str | None = None
        self._cancelled = False
        self._stream_task: asyncio.Task[None] | None = None

    # =========================================================================
    # Observables
    # =========================================================================

    @property
    def messages(self) -> list[Message]:
        return self._messages

    @property
    def is_loading(self) -> bool:
        return self._loading

    @property
    def error(self) -> str | None:
        return self._error

    @property
    def pending_confirmation(self) -> PendingConfirmation | None:
        return self.gate.pending

    def snapshot(self) -> ChatState:
        """Return a serialisable copy of the observable state."""
        return ChatState(
            id=self.id,
            mode=self.mode,
            messages=[m.model_copy(deep=True) for m in self._messages],
            isLoading=self._loading,
            error=self._error,
            pendingConfirmation=self.gate.pending,
        )

    # =========================================================================
    # Operations
    # =========================================================================

    async def send(self, text: str) -> None:
        """
        Send a user message and run the turn until it settles.

        Args:
            text: User input

        Raises:
            ConfirmationPendingError: If a tool confirmation is outstanding
            RoundInProgressError: If a turn is already in flight
            InvalidOperationError: If the text is blank
        """
        self.ensure_idle()
        if not text.strip():
            raise InvalidOperationError("Message is empty")
        # Set before the first suspension so a concurrent send sees it
        self._loading = True
        await self._run_turn(text)

    async def reload(self) -> None:
        """
        Regenerate the answer to the last user message.

        Removes the last user message and everything after it, then sends its
        text again. Does nothing when the transcript has no user message.

        Raises:
            ConfirmationPendingError: If a tool confirmation is outstanding
            RoundInProgressError: If a turn is already in flight
        """
        self.ensure_idle()
        index = self._last_user_index()
        if index is None:
            return

        text = self._messages[index].content
        removed = self._messages[index:]
        del self._messages[index:]
        logger.info("Reloading chat %s (%d messages removed)", self.id, len(removed))

        self._loading = True
        await self._run_turn(text, removed=removed)

    def stop(self) -> None:
        """
        Cancel the turn in flight.

        Everything merged so far stays in the transcript. A tool that is
        already executing finishes, but no follow-up round starts. Does
        nothing when idle.
        """
        if not self._loading:
            return

        logger.info("Stopping chat %s", self.id)
        self._cancelled = True
        if self._stream_task is not None and not self._stream_task.done():
            self._stream_task.cancel()
        if self.gate.pending is not None:
            self.gate.reject(STOPPED_BY_USER)

    def confirm_tool(self) -> None:
        """
        Approve the outstanding confirmation.

        Raises:
            InvalidOperationError: If no confirmation is pending
        """
        if self.gate.pending is None or not self.gate.confirm():
            raise InvalidOperationError("No confirmation pending")

    def reject_tool(self, reason: str = "") -> None:
        """
        Reject the outstanding confirmation.

        Args:
            reason: Reason recorded as the tool's error and shown to the model

        Raises:
            InvalidOperationError: If no confirmation is pending
        """
        if self.gate.pending is None or not self.gate.reject(reason):
            raise InvalidOperationError("No confirmation pending")

    def clear(self) -> None:
        """
        Start over with an empty transcript.

        Raises:
            RoundInProgressError: If a turn is in flight
        """
        if self._loading:
            raise RoundInProgressError()
        self._messages.clear()
        self._error = None

    def set_mode(self, mode: str) -> None:
        """
        Switch the agent mode for subsequent turns.

        Raises:
            ConfigurationError: If the mode is unknown
        """
        get_mode_config(mode)
        self.mode = mode

    # =========================================================================
    # Turn execution
    # =========================================================================

    def ensure_idle(self) -> None:
        """
        Check that a new turn may start.

        Raises:
            ConfirmationPendingError: If a tool confirmation is outstanding
            RoundInProgressError: If a turn is already in flight
        """
        pending = self.gate.pending
        if pending is not None:
            raise ConfirmationPendingError(pending.toolCallId)
        if self._loading:
            raise RoundInProgressError()

    def _last_user_index(self) -> int | None:
        for index in range(len(self._messages) - 1, -1, -1):
            if self._messages[index].role == Role.USER:
                return index
        return None

    def _build_outbound(self) -> list[OutboundMessage]:
        return [
            OutboundMessage(role=m.role.value, content=m.content)
            for m in self._messages
            if m.role != Role.SYSTEM
        ]

    async def _run_turn(self, text: str, removed: list[Message] | None = None) -> None:
        start = time.perf_counter()
        self._error = None
        self._cancelled = False
        self.gate.auto_accept = self.settings.auto_accept_sql

        user_message = Message.user(text)
        self._messages.append(user_message)
        outbound = self._build_outbound()
        assistant = Message.assistant_placeholder()
        self._messages.append(assistant)
        logger.info("Turn started in chat %s (%s mode)", self.id, self.mode)

        rounds = 0
        try:
            if removed:
                await self.event_bus.publish(
                    Event(
                        type=MESSAGE_REMOVED,
                        properties={"chatId": self.id, "messageIds": [m.id for m in removed]},
                    )
                )
            await self._publish_status()
            await self._publish_message(user_message)
            await self._publish_message(assistant)

            config = resolve_agent_config(self.settings, self.mode, self.provider, self.providers)
            rounds = await self._run_rounds(config, outbound, assistant)
        except ConfigurationError as e:
            logger.warning("Cannot start turn in chat %s: %s", self.id, e)
            self._error = str(e)
        finally:
            assistant.complete()
            self._loading = False
            self._stream_task = None
            duration_ms = (time.perf_counter() - start) * 1000
            logger.info(
                "Turn finished in chat %s (%d rounds, %.1fms%s)",
                self.id,
                rounds,
                duration_ms,
                ", cancelled" if self._cancelled else "",
            )

        await self._publish_message(assistant)
        await self._publish_status()

    async def _run_rounds(
        self, config: AgentConfig, outbound: list[OutboundMessage], assistant: Message
    ) -> int:
        """Run stream rounds until the model stops calling tools. Returns the round count."""
        pipeline = ToolExecutionPipeline(
            self.registry,
            self.gate,
            on_change=self._publish_message,
            is_cancelled=lambda: self._cancelled,
        )

        for step in range(1, config.max_steps + 1):
            merger = StreamMerger(self._messages)
            request = ChatRequest(
                messages=list(outbound),
                model=config.model,
                provider=config.provider,
                systemPrompt=config.system_prompt,
                maxTokens=config.max_tokens,
                temperature=config.temperature,
                tools=self.registry.definitions(),
            )
            logger.debug("Round %d: %d outbound messages", step, len(outbound))
            await self._consume_stream(request, merger)
            calls = merger.drain_tool_calls()

            if merger.failed:
                self._error = merger.error
                await self._abandon(assistant, calls, STREAM_FAILED_BEFORE_EXECUTION)
                return step
            if self._cancelled:
                await self._abandon(assistant, calls, CANCELLED_BEFORE_EXECUTION)
                return step
            if not calls:
                return step

            results = await pipeline.run(assistant, calls)
            if not results or self._cancelled:
                return step

            answered = {r.tool_call_id for r in results}
            outbound.append(
                OutboundMessage(
                    role="assistant",
                    content=merger.round_text,
                    tool_calls=[OutboundToolCall.from_pending(c) for c in calls if c.id in answered],
                )
            )
            outbound.extend(results)

        logger.warning("Chat %s reached the %d round limit", self.id, config.max_steps)
        return config.max_steps

    async def _consume_stream(self, request: ChatRequest, merger: StreamMerger) -> None:
        """Feed the transport's chunks to the merger on a task stop() can cancel."""

        async def consume() -> None:
            stream = self.transport.stream(request)
            try:
                async for chunk in stream:
                    if self._cancelled:
                        break
                    more = merger.apply(chunk)
                    await self._publish_message(merger.message)
                    if not more:
                        break
            finally:
                aclose = getattr(stream, "aclose", None)
                if aclose is not None:
                    await aclose()

        task = asyncio.create_task(consume())
        self._stream_task = task
        try:
            await task
        except asyncio.CancelledError:
            if not self._cancelled:
                task.cancel()
                raise
            logger.info("Stream cancelled in chat %s", self.id)
        except Exception as e:
            logger.warning("Stream failed in chat %s: %s", self.id, e, exc_info=True)
            merger.apply(ErrorChunk(message=str(e) or type(e).__name__))
            await self._publish_message(merger.message)
        finally:
            self._stream_task = None

    async def _abandon(self, assistant: Message, calls: list[PendingToolCall], reason: str) -> None:
        for call in calls:
            part = assistant.open_tool_part(call.id)
            if part is not None:
                part.mark_error(reason)
        if calls:
            logger.info("Abandoned %d queued tool calls: %s", len(calls), reason)
            await self._publish_message(assistant)

    # =========================================================================
    # Publishing
    # =========================================================================

    async def _publish_message(self, message: Message) -> None:
        await self.event_bus.publish(
            Event(
                type=MESSAGE_UPDATED,
                properties={"chatId": self.id, "message": message.model_dump(mode="json")},
            )
        )

    async def _publish_status(self) -> None:
        await self.event_bus.publish(
            Event(
                type=CHAT_STATUS,
                properties={
                    "chatId": self.id,
                    "isLoading": self._loading,
                    "error": self._error,
                },
            )
        )
