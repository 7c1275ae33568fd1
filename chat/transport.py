"""
Transport protocol.

The orchestrator talks to the model provider only through this interface: a
request goes in, an async iterator of protocol chunks comes out. The server
layer wires in the pydantic-ai implementation; tests use a scripted one.
"""

from typing import AsyncIterator, Protocol

from pydantic import BaseModel, Field

from .models import OutboundMessage, StreamChunk
from .registry import ToolSpec


class ChatRequest(BaseModel):
    """Everything needed to open one stream round."""

    messages: list[OutboundMessage]
    model: str
    provider: str
    systemPrompt: str = ""
    maxTokens: int = 4096
    temperature: float = 0.7
    tools: list[ToolSpec] = Field(default_factory=list)


class Transport(Protocol):
    """Streams a model response as protocol chunks."""

    def stream(self, request: ChatRequest) -> AsyncIterator[StreamChunk]:
        """
        Open a stream for a request.

        Implementations end the stream with a ``done`` or ``error`` chunk and
        may also raise; the orchestrator treats both as termination.
        """
        ...
