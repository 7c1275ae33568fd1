"""Tests for the pydantic-ai transport."""

import json

import pytest
from pydantic_ai.messages import (
    ModelRequest,
    ModelResponse,
    SystemPromptPart,
    TextPart,
    ToolCallPart,
    ToolReturnPart,
    UserPromptPart,
)
from pydantic_ai.models.function import AgentInfo, DeltaToolCall, FunctionModel
from pydantic_ai.models.openai import OpenAIChatModel

from agent import PydanticAITransport, build_model_messages, build_tool_definitions
from chat import ChatRequest, ToolRegistry
from chat.exceptions import TransportError
from chat.models import (
    DoneChunk,
    ErrorChunk,
    OutboundMessage,
    OutboundToolCall,
    PendingToolCall,
    TextDeltaChunk,
    ToolCallChunk,
    ToolResultRecord,
)
from config import ChatSettings


def make_request(**overrides) -> ChatRequest:
    fields = {
        "messages": [OutboundMessage(role="user", content="List the tables")],
        "model": "grok-4-1-fast-non-reasoning",
        "provider": "grok",
        "systemPrompt": "You are a database assistant.",
    }
    fields.update(overrides)
    return ChatRequest(**fields)


async def collect(transport: PydanticAITransport, request: ChatRequest) -> list:
    return [chunk async for chunk in transport.stream(request)]


class TestBuildModelMessages:
    """Tests for outbound message conversion."""

    def test_system_prompt_leads_first_request(self):
        """Test that the system prompt and user text form one request."""
        history = build_model_messages([OutboundMessage(role="user", content="hi")], "Be brief.")

        assert len(history) == 1
        request = history[0]
        assert isinstance(request, ModelRequest)
        assert isinstance(request.parts[0], SystemPromptPart)
        assert request.parts[0].content == "Be brief."
        assert isinstance(request.parts[1], UserPromptPart)
        assert request.parts[1].content == "hi"

    def test_tool_round_trip(self):
        """Test an assistant tool call followed by its result."""
        call = PendingToolCall(id="call_1", name="list_tables", args={})
        messages = [
            OutboundMessage(role="user", content="tables?"),
            OutboundMessage(
                role="assistant",
                content="Checking.",
                tool_calls=[OutboundToolCall.from_pending(call)],
            ),
            ToolResultRecord(tool_call_id="call_1", content='["users"]'),
        ]

        history = build_model_messages(messages)

        assert [type(m) for m in history] == [ModelRequest, ModelResponse, ModelRequest]
        response = history[1]
        assert isinstance(response.parts[0], TextPart)
        assert isinstance(response.parts[1], ToolCallPart)
        assert response.parts[1].tool_name == "list_tables"
        assert response.parts[1].tool_call_id == "call_1"
        tool_return = history[2].parts[0]
        assert isinstance(tool_return, ToolReturnPart)
        assert tool_return.tool_name == "list_tables"
        assert tool_return.content == '["users"]'

    def test_orphan_tool_result(self):
        """Test that a result without a matching call keeps a placeholder name."""
        history = build_model_messages([ToolResultRecord(tool_call_id="call_x", content="{}")])
        assert history[0].parts[0].tool_name == "unknown"


class TestBuildToolDefinitions:
    """Tests for tool definition conversion."""

    def test_definitions_follow_registry(self, registry: ToolRegistry):
        """Test that every registered tool is advertised with its schema."""
        definitions = build_tool_definitions(registry.definitions())

        assert [d.name for d in definitions] == registry.names()
        sql = next(d for d in definitions if d.name == "run_sql_query")
        assert sql.parameters_json_schema["required"] == ["sql"]
        assert sql.description


class TestBuildModel:
    """Tests for provider model construction."""

    def test_user_key(self):
        """Test building a model with a user-provided key."""
        transport = PydanticAITransport(ChatSettings(api_keys={"grok": "xai-key"}))
        model = transport.build_model("grok", "grok-3-mini-beta")
        assert isinstance(model, OpenAIChatModel)
        assert model.model_name == "grok-3-mini-beta"

    def test_unknown_provider(self):
        """Test that unknown providers are rejected."""
        with pytest.raises(TransportError, match="Unknown provider: nope"):
            PydanticAITransport().build_model("nope", "m")

    def test_missing_key(self):
        """Test that cloud providers need a key."""
        with pytest.raises(TransportError, match="No API key configured for OpenAI"):
            PydanticAITransport().build_model("openai", "gpt-4o-mini")


class TestStream:
    """Tests for stream event conversion."""

    @pytest.mark.asyncio
    async def test_text_stream(self, monkeypatch):
        """Test that text arrives as deltas followed by done."""
        seen_history = []

        async def stream_function(messages, info: AgentInfo):
            seen_history.extend(messages)
            yield "There are "
            yield "two tables."

        transport = PydanticAITransport(ChatSettings(api_keys={"grok": "k"}))
        monkeypatch.setattr(transport, "build_model", lambda provider, model: FunctionModel(stream_function=stream_function))

        chunks = await collect(transport, make_request())

        deltas = [c.text for c in chunks if isinstance(c, TextDeltaChunk)]
        assert "".join(deltas) == "There are two tables."
        assert isinstance(chunks[-1], DoneChunk)
        assert isinstance(seen_history[0].parts[0], SystemPromptPart)

    @pytest.mark.asyncio
    async def test_tool_calls_follow_text(self, monkeypatch, registry: ToolRegistry):
        """Test that tool calls are emitted with complete arguments after the text."""

        async def stream_function(messages, info: AgentInfo):
            assert "run_sql_query" in [t.name for t in info.function_tools]
            yield "Let me count. "
            yield {0: DeltaToolCall(name="run_sql_query", json_args='{"sql": "SELECT ', tool_call_id="call_1")}
            yield {0: DeltaToolCall(json_args='count(*) FROM users"}')}

        transport = PydanticAITransport(ChatSettings(api_keys={"grok": "k"}))
        monkeypatch.setattr(transport, "build_model", lambda provider, model: FunctionModel(stream_function=stream_function))

        chunks = await collect(transport, make_request(tools=registry.definitions()))

        kinds = [type(c) for c in chunks]
        assert kinds.index(ToolCallChunk) > kinds.index(TextDeltaChunk)
        call = next(c for c in chunks if isinstance(c, ToolCallChunk))
        assert call.id == "call_1"
        assert call.name == "run_sql_query"
        assert json.loads(call.arguments) == {"sql": "SELECT count(*) FROM users"}
        assert isinstance(chunks[-1], DoneChunk)

    @pytest.mark.asyncio
    async def test_model_failure_becomes_error_chunk(self, monkeypatch):
        """Test that exceptions inside the stream end with an error chunk."""

        async def stream_function(messages, info: AgentInfo):
            yield "partial"
            raise RuntimeError("upstream reset")

        transport = PydanticAITransport(ChatSettings(api_keys={"grok": "k"}))
        monkeypatch.setattr(transport, "build_model", lambda provider, model: FunctionModel(stream_function=stream_function))

        chunks = await collect(transport, make_request())

        assert isinstance(chunks[-1], ErrorChunk)
        assert chunks[-1].message == "upstream reset"

    @pytest.mark.asyncio
    async def test_unavailable_provider_becomes_error_chunk(self):
        """Test that a missing key is reported in-band."""
        chunks = await collect(PydanticAITransport(), make_request(provider="openai"))
        assert chunks == [ErrorChunk(message="No API key configured for OpenAI")]
