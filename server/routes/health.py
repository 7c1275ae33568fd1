"""
Health check endpoint.
"""

from fastapi import APIRouter

from ..state import chats, get_registry, get_settings, get_transport


router = APIRouter()


@router.get("/health")
async def health() -> dict:
    """Health check endpoint."""
    return {
        "status": "ok",
        "transport_configured": get_transport() is not None,
        "provider_available": get_settings().has_any_provider(),
        "tools": get_registry().names(),
        "chats": len(chats),
    }
