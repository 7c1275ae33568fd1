"""
Route registration for the chat API.
"""

from fastapi import FastAPI

from . import chats, health


def register_routes(app: FastAPI) -> None:
    """Register all routes with the FastAPI application."""
    app.include_router(health.router)
    chats.register_routes(app)
