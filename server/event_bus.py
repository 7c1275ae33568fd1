"""
SSE-based EventBus implementation.

Each chat gets its own bus; the streaming endpoints subscribe to it for the
duration of a turn and forward every event to the client.
"""

import asyncio
from typing import Any

from chat import Event


class SSEEventBus:
    """
    EventBus implementation that broadcasts events to SSE subscribers.

    Each subscriber gets a queue that receives events as plain dictionaries.
    """

    def __init__(self) -> None:
        self.subscribers: list[asyncio.Queue[dict[str, Any]]] = []

    async def publish(self, event: Event) -> None:
        """Publish an event to all subscribers."""
        data = event.model_dump(mode="json")
        for queue in list(self.subscribers):
            await queue.put(data)

    def subscribe(self) -> asyncio.Queue[dict[str, Any]]:
        """
        Create a new subscription queue.

        Returns:
            A queue that will receive all published events
        """
        queue: asyncio.Queue[dict[str, Any]] = asyncio.Queue()
        self.subscribers.append(queue)
        return queue

    def unsubscribe(self, queue: asyncio.Queue[dict[str, Any]]) -> None:
        """
        Remove a subscription queue.

        Args:
            queue: The queue to unsubscribe
        """
        if queue in self.subscribers:
            self.subscribers.remove(queue)
