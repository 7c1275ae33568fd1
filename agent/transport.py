"""
Pydantic AI transport.

Streams chat rounds from OpenAI-compatible provider endpoints through
pydantic-ai's direct model request API and converts the model events into
chat protocol chunks.
"""
import logging
from typing import AsyncIterator

from openai import AsyncOpenAI
from pydantic_ai.direct import model_request_stream
from pydantic_ai.messages import (
    ModelMessage,
    ModelRequest,
    ModelRequestPart,
    ModelResponse,
    PartDeltaEvent,
    PartStartEvent,
    SystemPromptPart,
    TextPart,
    TextPartDelta,
    ThinkingPart,
    ThinkingPartDelta,
    ToolCallPart,
    ToolReturnPart,
    UserPromptPart,
)
from pydantic_ai.models import ModelRequestParameters
from pydantic_ai.models.openai import OpenAIChatModel
from pydantic_ai.providers.openai import OpenAIProvider
from pydantic_ai.settings import ModelSettings
from pydantic_ai.tools import ToolDefinition

from chat.exceptions import TransportError
from chat.models import (
    DoneChunk,
    ErrorChunk,
    OutboundMessage,
    ReasoningChunk,
    StreamChunk,
    TextDeltaChunk,
    ToolCallChunk,
)
from chat.registry import ToolSpec
from chat.transport import ChatRequest
from config import ChatSettings, ProviderRegistry, provider_registry

logger = logging.getLogger(__name__)


def build_model_messages(
    messages: list[OutboundMessage], system_prompt: str = ""
) -> list[ModelMessage]:
    """
    Convert flattened outbound messages into pydantic-ai message history.

    User and tool entries become request parts; consecutive request parts are
    grouped into one ModelRequest. Assistant entries become ModelResponses
    carrying their text and tool calls. The system prompt leads the first
    request.

    Args:
        messages: Outbound messages in conversation order
        system_prompt: System prompt for the round

    Returns:
        Message history for a model request
    """
    history: list[ModelMessage] = []
    pending: list[ModelRequestPart] = []
    tool_names: dict[str, str] = {}

    if system_prompt:
        pending.append(SystemPromptPart(content=system_prompt))

    def flush() -> None:
        if pending:
            history.append(ModelRequest(parts=list(pending)))
            pending.clear()

    for message in messages:
        if message.role == "assistant":
            flush()
            parts: list[TextPart | ToolCallPart] = []
            if message.content:
                parts.append(TextPart(content=message.content))
            for call in message.tool_calls or []:
                tool_names[call.id] = call.function.name
                parts.append(
                    ToolCallPart(
                        tool_name=call.function.name,
                        args=call.function.arguments,
                        tool_call_id=call.id,
                    )
                )
            history.append(ModelResponse(parts=parts))
        elif message.role == "tool":
            call_id = message.tool_call_id or ""
            pending.append(
                ToolReturnPart(
                    tool_name=tool_names.get(call_id, "unknown"),
                    content=message.content,
                    tool_call_id=call_id,
                )
            )
        elif message.role == "system":
            pending.append(SystemPromptPart(content=message.content))
        else:
            pending.append(UserPromptPart(content=message.content))

    flush()
    return history


def build_tool_definitions(tools: list[ToolSpec]) -> list[ToolDefinition]:
    return [
        ToolDefinition(
            name=tool.name,
            description=tool.description,
            parameters_json_schema=tool.parameters,
        )
        for tool in tools
    ]


class PydanticAITransport:
    """Transport backed by pydantic-ai's OpenAI-compatible chat models."""

    def __init__(
        self,
        settings: ChatSettings | None = None,
        providers: ProviderRegistry = provider_registry,
    ):
        """
        Initialize the transport.

        Args:
            settings: Chat settings holding user-provided API keys
            providers: Provider registry with base URLs and key variables
        """
        self.settings = settings or ChatSettings()
        self.providers = providers

    def build_model(self, provider_id: str, model_name: str) -> OpenAIChatModel:
        """
        Create the chat model for a provider.

        Raises:
            TransportError: If the provider is unknown or has no API key
        """
        provider = self.providers.get(provider_id)
        if provider is None:
            raise TransportError(f"Unknown provider: {provider_id}")

        override = self.settings.api_keys.get(provider_id)
        if not provider.is_available(override):
            raise TransportError(f"No API key configured for {provider.name}")

        client = AsyncOpenAI(**provider.get_client_kwargs(override))
        return OpenAIChatModel(model_name, provider=OpenAIProvider(openai_client=client))

    async def stream(self, request: ChatRequest) -> AsyncIterator[StreamChunk]:
        """
        Stream one round.

        Text and reasoning are yielded as they arrive. Tool calls are yielded
        once the response is complete, when their arguments are final. Any
        failure is reported as a trailing error chunk.

        Args:
            request: The round's request

        Yields:
            Protocol chunks ending with ``done`` or ``error``
        """
        logger.debug(
            "Opening stream: provider=%s model=%s messages=%d tools=%d",
            request.provider,
            request.model,
            len(request.messages),
            len(request.tools),
        )

        try:
            model = self.build_model(request.provider, request.model)
            model_settings: ModelSettings = {
                "max_tokens": request.maxTokens,
                "temperature": request.temperature,
            }
            parameters = ModelRequestParameters(
                function_tools=build_tool_definitions(request.tools),
                allow_text_output=True,
            )
            history = build_model_messages(request.messages, request.systemPrompt)

            async with model_request_stream(
                model,
                history,
                model_settings=model_settings,
                model_request_parameters=parameters,
            ) as response_stream:
                async for event in response_stream:
                    if isinstance(event, PartStartEvent):
                        # First fragment of a part arrives with its start event
                        if isinstance(event.part, TextPart) and event.part.content:
                            yield TextDeltaChunk(text=event.part.content)
                        elif isinstance(event.part, ThinkingPart) and event.part.content:
                            yield ReasoningChunk(text=event.part.content)

                    elif isinstance(event, PartDeltaEvent):
                        if isinstance(event.delta, TextPartDelta):
                            if event.delta.content_delta:
                                yield TextDeltaChunk(text=event.delta.content_delta)
                        elif isinstance(event.delta, ThinkingPartDelta):
                            if event.delta.content_delta:
                                yield ReasoningChunk(text=event.delta.content_delta)

                response = response_stream.get()

            tool_call_count = 0
            for part in response.parts:
                if isinstance(part, ToolCallPart):
                    tool_call_count += 1
                    yield ToolCallChunk(
                        id=part.tool_call_id,
                        name=part.tool_name,
                        arguments=part.args_as_json_str(),
                    )

            logger.debug(
                "Stream complete: finish_reason=%s tool_calls=%d",
                response.finish_reason,
                tool_call_count,
            )
            yield DoneChunk(finishReason=response.finish_reason)

        except TransportError as e:
            logger.warning("Transport unavailable: %s", e)
            yield ErrorChunk(message=str(e))
        except Exception as e:
            logger.exception("Model stream failed")
            yield ErrorChunk(message=str(e) or type(e).__name__)
