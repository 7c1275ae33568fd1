"""
Send message and reload endpoints with streaming.

Both endpoints start a turn and stream the chat's events via SSE until the
turn settles. The final event carries the settled chat state.
"""

import asyncio
import json
import logging
from typing import AsyncGenerator, Awaitable, Callable

from fastapi import APIRouter, HTTPException
from sse_starlette.sse import EventSourceResponse

from chat import ChatOrchestrator, InvalidOperationError, NotFoundError, RoundInProgressError

from ...event_bus import SSEEventBus
from ...logging_config import log_timing
from ...requests import SendMessageRequest
from ...state import get_chat, get_chat_event_bus, turn_tasks

logger = logging.getLogger(__name__)

# Final SSE event of a turn
TURN_SETTLED = "chat.settled"


router = APIRouter()


def stream_turn(
    chat: ChatOrchestrator,
    event_bus: SSEEventBus,
    run: Callable[[], Awaitable[None]],
) -> AsyncGenerator[dict, None]:
    """
    Start a turn and return a generator of its events as SSE messages.

    The turn task is created and registered before this returns, so a second
    request arriving before the stream is consumed already sees the chat as
    busy. The task is independent of the stream, so a client disconnecting
    does not cancel it.

    Args:
        chat: The chat the turn belongs to
        event_bus: The chat's event bus
        run: Starts the turn (``chat.send`` or ``chat.reload``)

    Returns:
        Generator of SSE message dictionaries, ending with the settled chat state
    """
    queue = event_bus.subscribe()
    task = asyncio.create_task(run())
    turn_tasks[chat.id] = task

    def forget(finished: asyncio.Task[None]) -> None:
        if turn_tasks.get(chat.id) is finished:
            del turn_tasks[chat.id]

    task.add_done_callback(forget)
    return _forward_events(chat, event_bus, queue, task)


async def _forward_events(
    chat: ChatOrchestrator,
    event_bus: SSEEventBus,
    queue: asyncio.Queue,
    task: asyncio.Task[None],
) -> AsyncGenerator[dict, None]:
    getter: asyncio.Future | None = None

    try:
        with log_timing(logger, f"Turn stream for chat {chat.id}", logging.INFO):
            while True:
                getter = asyncio.ensure_future(queue.get())
                done, _ = await asyncio.wait({getter, task}, return_when=asyncio.FIRST_COMPLETED)
                if getter not in done:
                    getter.cancel()
                    break
                event = getter.result()
                yield {"event": event["type"], "data": json.dumps(event)}

            while not queue.empty():
                event = queue.get_nowait()
                yield {"event": event["type"], "data": json.dumps(event)}

        error = None if task.cancelled() else task.exception()
        if error is not None:
            logger.error("Turn failed in chat %s: %s", chat.id, error)
            yield {"event": "error", "data": json.dumps({"error": str(error)})}

        yield {
            "event": TURN_SETTLED,
            "data": chat.snapshot().model_dump_json(),
        }
    finally:
        if getter is not None and not getter.done():
            getter.cancel()
        event_bus.unsubscribe(queue)


def _prepare_turn(chatID: str) -> tuple[ChatOrchestrator, SSEEventBus]:
    try:
        chat = get_chat(chatID)
        chat.ensure_idle()
        if chatID in turn_tasks:
            raise RoundInProgressError()
    except NotFoundError:
        raise HTTPException(status_code=404, detail="Chat not found")
    except InvalidOperationError as e:
        raise HTTPException(status_code=409, detail=str(e))
    return chat, get_chat_event_bus(chatID)


@router.post("/chat/{chatID}/message")
async def send_message_route(chatID: str, request: SendMessageRequest) -> EventSourceResponse:
    """Send a user message and stream the turn via SSE."""
    chat, event_bus = _prepare_turn(chatID)
    logger.info("Processing message for chat %s (%s mode)", chatID, chat.mode)
    return EventSourceResponse(stream_turn(chat, event_bus, lambda: chat.send(request.text)))


@router.post("/chat/{chatID}/reload")
async def reload_route(chatID: str) -> EventSourceResponse:
    """Regenerate the last answer and stream the turn via SSE."""
    chat, event_bus = _prepare_turn(chatID)
    logger.info("Reloading last answer in chat %s", chatID)
    return EventSourceResponse(stream_turn(chat, event_bus, chat.reload))
