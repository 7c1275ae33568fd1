"""Tests for the database tools."""

import pytest

from agent.tools import DEFAULT_PREVIEW_LIMIT, MAX_PREVIEW_LIMIT, QueryResult
from agent.tools.postgres import PostgresBackend
from chat.exceptions import ToolArgumentError

DATABASE_TOOLS = [
    "get_database_schema",
    "list_tables",
    "get_table_schema",
    "run_sql_query",
    "execute_ddl",
    "explain_query",
    "get_table_preview",
    "get_table_indexes",
    "get_table_foreign_keys",
]


async def call(registry, name: str, args: dict):
    validated = registry.validate(name, args)
    return await registry.get(name).execute(validated)


class TestRegistration:
    """Tests for the registered tool set."""

    def test_all_tools_registered(self, registry):
        """Test that every database tool is available by name."""
        assert registry.names() == DATABASE_TOOLS

    def test_every_tool_has_a_description(self, registry):
        """Test that the model gets a description for each tool."""
        for spec in registry.definitions():
            assert spec.description, spec.name

    def test_sql_tools_require_sql(self, registry):
        """Test that SQL tools reject missing or empty SQL."""
        for name in ("run_sql_query", "execute_ddl", "explain_query"):
            with pytest.raises(ToolArgumentError):
                registry.validate(name, {})
            with pytest.raises(ToolArgumentError):
                registry.validate(name, {"sql": ""})

    def test_table_tools_require_table_name(self, registry):
        """Test that table tools reject a missing table name."""
        for name in ("get_table_schema", "get_table_preview", "get_table_indexes", "get_table_foreign_keys"):
            with pytest.raises(ToolArgumentError, match="table_name"):
                registry.validate(name, {})


class TestPreview:
    """Tests for get_table_preview limits."""

    def test_default_limit(self, registry):
        """Test that the preview limit defaults to ten rows."""
        args = registry.validate("get_table_preview", {"table_name": "users"})
        assert args.limit == DEFAULT_PREVIEW_LIMIT == 10

    @pytest.mark.parametrize("limit", [0, -1, MAX_PREVIEW_LIMIT + 1])
    def test_limit_bounds(self, registry, limit):
        """Test that limits outside 1..1000 are rejected."""
        with pytest.raises(ToolArgumentError, match="limit"):
            registry.validate("get_table_preview", {"table_name": "users", "limit": limit})

    @pytest.mark.asyncio
    async def test_preview_delegates_with_offset_zero(self, registry, backend):
        """Test that previews read from the start of the table."""
        result = await call(registry, "get_table_preview", {"table_name": "users", "limit": 1})

        assert backend.calls == [("get_table_data", ("users", 1, 0))]
        assert isinstance(result, QueryResult)
        assert result.rows == [[1, "Ada"]]
        assert result.rowCount == 1


class TestDelegation:
    """Tests for backend delegation."""

    @pytest.mark.asyncio
    async def test_sql_tools_pass_sql_through(self, registry, backend):
        """Test that SQL reaches the backend unchanged."""
        await call(registry, "run_sql_query", {"sql": "SELECT count(*) FROM users"})
        await call(registry, "execute_ddl", {"sql": "CREATE INDEX ON users (name)"})
        await call(registry, "explain_query", {"sql": "SELECT * FROM users"})

        assert backend.calls == [
            ("execute_query", "SELECT count(*) FROM users"),
            ("execute_ddl", "CREATE INDEX ON users (name)"),
            ("explain_query", "SELECT * FROM users"),
        ]

    @pytest.mark.asyncio
    async def test_schema_tools(self, registry):
        """Test schema introspection results."""
        schema = await call(registry, "get_database_schema", {})
        assert [t.name for t in schema.tables] == ["orders", "users"]

        table = await call(registry, "get_table_schema", {"table_name": "users"})
        assert [c.name for c in table.columns] == ["id", "name"]
        assert table.columns[0].isPrimaryKey

        assert await call(registry, "list_tables", {}) == ["orders", "users"]

    @pytest.mark.asyncio
    async def test_relationship_tools(self, registry):
        """Test indexes and foreign keys."""
        indexes = await call(registry, "get_table_indexes", {"table_name": "users"})
        assert indexes[0].unique

        keys = await call(registry, "get_table_foreign_keys", {"table_name": "orders"})
        assert keys[0].referencedTable == "users"
        assert await call(registry, "get_table_foreign_keys", {"table_name": "users"}) == []

    def test_results_serialize_with_wire_names(self):
        """Test that result models dump with camelCase field names."""
        dumped = QueryResult(columns=["id"], rows=[[1]], rowCount=1).model_dump()
        assert dumped == {"columns": ["id"], "rows": [[1]], "rowCount": 1}


class FakeCursor:
    def __init__(self, executed: list[str]):
        self.executed = executed

    def __enter__(self):
        return self

    def __exit__(self, *exc_info):
        return False

    def execute(self, query, params=None):
        self.executed.append(query)

    def fetchall(self):
        return [("Seq Scan on users",)]


class FakeConnection:
    def __init__(self):
        self.executed: list[str] = []
        self.closed = False

    def cursor(self):
        return FakeCursor(self.executed)

    def commit(self):
        pass

    def rollback(self):
        pass

    def close(self):
        self.closed = True


class TestPostgresExplain:
    """Tests for PostgresBackend.explain_query."""

    @pytest.fixture
    def connection(self, monkeypatch):
        conn = FakeConnection()
        monkeypatch.setattr(PostgresBackend, "_connect", lambda self: conn)
        return conn

    @pytest.mark.asyncio
    async def test_read_only_sql_is_analyzed(self, connection):
        """Test that read-only SQL is explained with ANALYZE."""
        result = await PostgresBackend().explain_query("SELECT * FROM users")

        assert connection.executed == ["EXPLAIN ANALYZE SELECT * FROM users"]
        assert result.plan == ["Seq Scan on users"]
        assert connection.closed

    @pytest.mark.asyncio
    async def test_mutating_sql_is_not_analyzed(self, connection):
        """Test that DML is only planned, never executed."""
        await PostgresBackend().explain_query("DELETE FROM users")
        assert connection.executed == ["EXPLAIN DELETE FROM users"]

    @pytest.mark.asyncio
    async def test_trailing_statement_is_refused(self, connection):
        """Test that a second statement never reaches the database."""
        with pytest.raises(ValueError, match="single statement"):
            await PostgresBackend().explain_query("SELECT 1; DROP TABLE users")
        assert connection.executed == []
