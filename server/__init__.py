"""
Chat API server.

Exposes the chat engine over HTTP: chats are created and inspected with
plain JSON endpoints, and turns are streamed to the client via SSE.
"""

from .app import app
from .routes import register_routes
from .state import configure, create_chat, delete_chat, get_chat

# Register all routes with the app
register_routes(app)

__all__ = ["app", "configure", "create_chat", "get_chat", "delete_chat"]
