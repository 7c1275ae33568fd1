"""
Server-side state management.

Holds the chat runtime (transport, tool registry, settings) configured at
startup and the in-memory store of open chats.
"""

import asyncio
import logging

from chat import ChatOrchestrator, NotFoundError, ToolRegistry, Transport
from config import ChatSettings

from .event_bus import SSEEventBus

logger = logging.getLogger(__name__)


# =============================================================================
# Runtime
# =============================================================================

_transport: Transport | None = None
_registry: ToolRegistry = ToolRegistry()
_settings: ChatSettings = ChatSettings()


def configure(
    transport: Transport,
    registry: ToolRegistry,
    settings: ChatSettings | None = None,
) -> None:
    """Set the runtime new chats are created with. Called at startup."""
    global _transport, _registry, _settings
    _transport = transport
    _registry = registry
    _settings = settings or ChatSettings()


def get_transport() -> Transport | None:
    return _transport


def get_registry() -> ToolRegistry:
    return _registry


def get_settings() -> ChatSettings:
    return _settings


# =============================================================================
# Chat Storage
# =============================================================================

chats: dict[str, ChatOrchestrator] = {}
chat_event_buses: dict[str, SSEEventBus] = {}
# Running turns, kept so they survive a client disconnecting from the stream
turn_tasks: dict[str, asyncio.Task[None]] = {}


def create_chat(mode: str | None = None, provider: str | None = None) -> ChatOrchestrator:
    """
    Create and store a new chat.

    Raises:
        RuntimeError: If no transport has been configured
        ConfigurationError: If the mode is unknown
    """
    if _transport is None:
        raise RuntimeError("Chat transport not initialized")

    event_bus = SSEEventBus()
    chat = ChatOrchestrator(
        transport=_transport,
        registry=_registry,
        settings=_settings,
        event_bus=event_bus,
        mode=mode,
        provider=provider,
    )
    chats[chat.id] = chat
    chat_event_buses[chat.id] = event_bus
    logger.info("Created chat %s (%s mode)", chat.id, chat.mode)
    return chat


def get_chat(chat_id: str) -> ChatOrchestrator:
    """
    Get a chat by ID.

    Raises:
        NotFoundError: If the chat does not exist
    """
    chat = chats.get(chat_id)
    if chat is None:
        raise NotFoundError("Chat", chat_id)
    return chat


def get_chat_event_bus(chat_id: str) -> SSEEventBus:
    get_chat(chat_id)
    return chat_event_buses[chat_id]


def delete_chat(chat_id: str) -> bool:
    """
    Stop and remove a chat.

    Raises:
        NotFoundError: If the chat does not exist
    """
    chat = get_chat(chat_id)
    chat.stop()
    del chats[chat_id]
    chat_event_buses.pop(chat_id, None)
    logger.info("Deleted chat %s", chat_id)
    return True


def reset() -> None:
    """Drop all chats and runtime configuration."""
    global _transport, _registry, _settings
    chats.clear()
    chat_event_buses.clear()
    turn_tasks.clear()
    _transport = None
    _registry = ToolRegistry()
    _settings = ChatSettings()
