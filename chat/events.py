"""
Event types and EventBus protocol.

The EventBus is an abstract interface that the orchestrator uses to publish
state changes. The server layer provides an SSE-based implementation.
"""

from typing import Any, Protocol

from pydantic import BaseModel


# Event types published by the chat engine
MESSAGE_UPDATED = "message.updated"
MESSAGE_REMOVED = "message.removed"
CHAT_STATUS = "chat.status"
CONFIRMATION_REQUESTED = "confirmation.requested"
CONFIRMATION_RESOLVED = "confirmation.resolved"


class Event(BaseModel):
    """Domain event that can be published to subscribers."""

    type: str
    properties: dict[str, Any]


class EventBus(Protocol):
    """Abstract interface for publishing events."""

    async def publish(self, event: Event) -> None:
        """Publish an event to all subscribers."""
        ...


class NullEventBus:
    """No-op EventBus implementation for testing."""

    async def publish(self, event: Event) -> None:
        """Discard the event."""
        pass


class RecordingEventBus:
    """EventBus that keeps every published event in memory."""

    def __init__(self) -> None:
        self.events: list[Event] = []

    async def publish(self, event: Event) -> None:
        self.events.append(event)

    def of_type(self, event_type: str) -> list[Event]:
        """Return the recorded events with the given type."""
        return [e for e in self.events if e.type == event_type]
