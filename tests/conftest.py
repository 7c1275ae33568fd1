"""
Shared pytest fixtures for all tests.
"""
import asyncio
import json
from typing import Any, AsyncIterator, Callable

import pytest

from agent.tools import (
    ColumnInfo,
    DatabaseSchemaInfo,
    DdlResult,
    ExplainResult,
    ForeignKeyInfo,
    IndexInfo,
    QueryResult,
    TableSchemaInfo,
    register_database_tools,
)
from chat import ChatOrchestrator, ChatRequest, RecordingEventBus, ToolRegistry
from chat.models import DoneChunk, StreamChunk, TextDeltaChunk, ToolCallChunk
from config import ChatSettings


PROVIDER_ENV_KEYS = ("GROK_API_KEY", "OPENAI_API_KEY", "GEMINI_API_KEY")


# =============================================================================
# Chunk Helpers
# =============================================================================

def text(*deltas: str) -> list[TextDeltaChunk]:
    """Text delta chunks, one per argument."""
    return [TextDeltaChunk(text=delta) for delta in deltas]


def tool_call(call_id: str, name: str, args: dict[str, Any] | None = None) -> ToolCallChunk:
    """A tool call chunk with JSON-encoded arguments."""
    return ToolCallChunk(id=call_id, name=name, arguments=json.dumps(args or {}))


def done(reason: str = "stop") -> DoneChunk:
    return DoneChunk(finishReason=reason)


# =============================================================================
# Fakes
# =============================================================================

class ScriptedTransport:
    """
    Transport that replays one scripted round per stream() call.

    A script item is a chunk (yielded), an exception (raised) or a plain
    callable (called between chunks, e.g. to stop the chat mid-stream).
    Rounds beyond the script answer with an empty ``done``.
    """

    def __init__(self, *rounds: list[Any]):
        self.rounds = list(rounds)
        self.requests: list[ChatRequest] = []

    async def stream(self, request: ChatRequest) -> AsyncIterator[StreamChunk]:
        self.requests.append(request.model_copy(deep=True))
        script = self.rounds.pop(0) if self.rounds else [done()]
        for item in script:
            # Let other tasks run between chunks, like a network stream
            await asyncio.sleep(0)
            if isinstance(item, BaseException):
                raise item
            if callable(item):
                item()
                continue
            yield item


class FakeDatabaseBackend:
    """In-memory DatabaseBackend that records every call."""

    def __init__(self) -> None:
        self.tables: dict[str, list[dict[str, Any]]] = {
            "users": [
                {"id": 1, "name": "Ada"},
                {"id": 2, "name": "Grace"},
            ],
            "orders": [{"id": 10, "user_id": 1}],
        }
        self.calls: list[tuple[str, Any]] = []
        self.failures: dict[str, Exception] = {}

    def _record(self, operation: str, argument: Any = None) -> None:
        self.calls.append((operation, argument))
        if operation in self.failures:
            raise self.failures[operation]

    async def list_tables(self) -> list[str]:
        self._record("list_tables")
        return sorted(self.tables)

    async def get_table_schema(self, table_name: str) -> TableSchemaInfo:
        self._record("get_table_schema", table_name)
        rows = self.tables.get(table_name, [])
        columns = list(rows[0]) if rows else []
        return TableSchemaInfo(
            name=table_name,
            columns=[
                ColumnInfo(name=c, dataType="integer" if c.endswith("id") else "text", isPrimaryKey=c == "id")
                for c in columns
            ],
        )

    async def get_database_schema(self) -> DatabaseSchemaInfo:
        self._record("get_database_schema")
        return DatabaseSchemaInfo(
            tables=[TableSchemaInfo(name=name) for name in sorted(self.tables)],
        )

    async def execute_query(self, sql: str) -> QueryResult:
        self._record("execute_query", sql)
        return QueryResult(columns=["count"], rows=[[len(self.tables)]], rowCount=1)

    async def execute_ddl(self, sql: str) -> DdlResult:
        self._record("execute_ddl", sql)
        return DdlResult(success=True, message="OK")

    async def explain_query(self, sql: str) -> ExplainResult:
        self._record("explain_query", sql)
        return ExplainResult(plan=["Seq Scan on users"])

    async def get_table_data(self, table_name: str, limit: int, offset: int = 0) -> QueryResult:
        self._record("get_table_data", (table_name, limit, offset))
        rows = self.tables.get(table_name, [])[offset:offset + limit]
        columns = list(rows[0]) if rows else []
        return QueryResult(
            columns=columns,
            rows=[[row[c] for c in columns] for row in rows],
            rowCount=len(rows),
        )

    async def get_table_indexes(self, table_name: str) -> list[IndexInfo]:
        self._record("get_table_indexes", table_name)
        return [IndexInfo(name=f"{table_name}_pkey", columns=["id"], unique=True)]

    async def get_table_foreign_keys(self, table_name: str) -> list[ForeignKeyInfo]:
        self._record("get_table_foreign_keys", table_name)
        if table_name != "orders":
            return []
        return [
            ForeignKeyInfo(
                constraintName="orders_user_id_fkey",
                columnName="user_id",
                referencedTable="users",
                referencedColumn="id",
            )
        ]


# =============================================================================
# Fixtures
# =============================================================================

@pytest.fixture(autouse=True)
def isolate_provider_env(monkeypatch):
    """Keep real API keys in the environment out of the tests."""
    for key in PROVIDER_ENV_KEYS:
        monkeypatch.delenv(key, raising=False)
    return monkeypatch


@pytest.fixture
def settings() -> ChatSettings:
    """Settings with a user-provided Grok key."""
    return ChatSettings(api_keys={"grok": "test-key"})


@pytest.fixture
def event_bus() -> RecordingEventBus:
    return RecordingEventBus()


@pytest.fixture
def backend() -> FakeDatabaseBackend:
    return FakeDatabaseBackend()


@pytest.fixture
def registry(backend: FakeDatabaseBackend) -> ToolRegistry:
    """Registry with the database tools bound to the fake backend."""
    return register_database_tools(ToolRegistry(), backend)


@pytest.fixture
def make_chat(
    registry: ToolRegistry, settings: ChatSettings, event_bus: RecordingEventBus
) -> Callable[..., ChatOrchestrator]:
    """Factory for orchestrators over a scripted transport."""

    def factory(transport: ScriptedTransport, **kwargs: Any) -> ChatOrchestrator:
        kwargs.setdefault("settings", settings)
        kwargs.setdefault("event_bus", event_bus)
        return ChatOrchestrator(transport, registry, **kwargs)

    return factory
