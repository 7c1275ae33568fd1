"""
Chat server entry point.
"""
import logging
import os
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI

from agent import PydanticAITransport, register_database_tools
from agent.tools.postgres import PostgresBackend
from chat import ToolRegistry
from config import get_config
from server import app, configure
from server.logging_config import setup_logging
from server.state import chats

# Initialize logging before anything else
setup_logging()
logger = logging.getLogger(__name__)

# Constants
DEFAULT_HOST = "0.0.0.0"
DEFAULT_PORT = 8000


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Wire the chat runtime at startup and stop running turns on shutdown."""
    config = get_config()
    settings = config.chat

    logger.info("Starting chat server")
    logger.info("Default mode: %s", settings.default_mode)
    logger.info("Provider: %s", settings.best_provider() or "none configured")
    logger.info("Auto-accept SQL: %s", settings.auto_accept_sql)

    backend = PostgresBackend(os.environ.get("DATABASE_URL"))
    registry = register_database_tools(ToolRegistry(), backend)
    logger.info("Registered tools: %s", ", ".join(registry.names()))

    configure(PydanticAITransport(settings), registry, settings)

    yield

    for chat in list(chats.values()):
        chat.stop()
    logger.info("Chat server stopped")


app.router.lifespan_context = lifespan


def main() -> None:
    """Start the chat server."""
    host = os.environ.get("HOST", DEFAULT_HOST)
    port = int(os.environ.get("PORT", str(DEFAULT_PORT)))

    logger.info("Server listening on %s:%d", host, port)
    uvicorn.run(app, host=host, port=port)


if __name__ == "__main__":
    main()
