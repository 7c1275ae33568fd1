"""CreateChatRequest model."""

from pydantic import BaseModel, Field


class CreateChatRequest(BaseModel):
    mode: str | None = Field(
        default=None,
        description="Agent mode (fast or deep); defaults to the configured mode",
    )
    provider: str | None = Field(
        default=None,
        description="Provider ID; defaults to the best provider with an API key",
    )
