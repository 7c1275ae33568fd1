"""
Chat route registration.
"""

from fastapi import FastAPI

from . import confirm, create, delete, get, mode, send, stop


def register_routes(app: FastAPI) -> None:
    """Register all chat routes."""
    app.include_router(create.router)
    app.include_router(get.router)
    app.include_router(delete.router)
    app.include_router(mode.router)
    app.include_router(send.router)
    app.include_router(stop.router)
    app.include_router(confirm.router)
