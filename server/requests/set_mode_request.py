"""SetModeRequest model."""

from pydantic import BaseModel


class SetModeRequest(BaseModel):
    mode: str
