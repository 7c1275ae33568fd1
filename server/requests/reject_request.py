"""RejectRequest model."""

from pydantic import BaseModel, Field


class RejectRequest(BaseModel):
    reason: str = Field(
        default="",
        description="Why the tool call was rejected; fed back to the model",
    )
