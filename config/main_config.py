"""Main Config model."""

from typing import Any

from pydantic import BaseModel, Field

from .chat_settings import ChatSettings


class Config(BaseModel):
    """Main configuration model."""

    chat: ChatSettings = Field(
        default_factory=ChatSettings,
        description="Assistant preferences and API key overrides",
    )
    model_providers: dict[str, dict[str, Any]] = Field(
        default_factory=dict,
        description="Custom or overridden model providers by ID",
    )
