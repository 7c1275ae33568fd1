"""Streaming protocol chunk models."""

from typing import Annotated, Literal

from pydantic import BaseModel, Field


class TextDeltaChunk(BaseModel):
    type: Literal["textDelta"] = "textDelta"
    text: str = ""


class ReasoningChunk(BaseModel):
    type: Literal["reasoning"] = "reasoning"
    text: str = ""


class ToolCallChunk(BaseModel):
    type: Literal["toolCall"] = "toolCall"
    id: str | None = None
    name: str | None = None
    arguments: str | None = None  # raw JSON text as produced by the model


class DoneChunk(BaseModel):
    type: Literal["done"] = "done"
    finishReason: str | None = None


class ErrorChunk(BaseModel):
    type: Literal["error"] = "error"
    message: str | None = None


StreamChunk = Annotated[
    TextDeltaChunk | ReasoningChunk | ToolCallChunk | DoneChunk | ErrorChunk,
    Field(discriminator="type"),
]

