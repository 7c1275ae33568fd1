"""Tests for mutation classification and the confirmation gate."""

import asyncio

import pytest

from chat import (
    CONFIRMATION_REQUESTED,
    CONFIRMATION_RESOLVED,
    ConfirmationGate,
    ConfirmationRejectedError,
    RecordingEventBus,
)
from chat.confirmation import (
    DEFAULT_REJECTION_REASON,
    TIMEOUT_REJECTION_REASON,
    is_sql_mutation,
    requires_confirmation,
    strip_sql_comments,
)


async def wait_for_pending(gate: ConfirmationGate) -> None:
    for _ in range(100):
        if gate.pending is not None:
            return
        await asyncio.sleep(0)
    raise AssertionError("confirmation was never requested")


class TestSqlClassification:
    """Tests for is_sql_mutation."""

    @pytest.mark.parametrize(
        "sql",
        [
            "SELECT * FROM users",
            "  select 1",
            "(SELECT 1) UNION (SELECT 2)",
            "SHOW search_path",
            "EXPLAIN SELECT * FROM users",
            "EXPLAIN (FORMAT JSON) SELECT 1",
            "EXPLAIN ANALYZE SELECT 1",
            "WITH recent AS (SELECT * FROM orders) SELECT * FROM recent",
            "-- count them\nSELECT count(*) FROM users",
            "SELECT 1; SELECT 2;",
        ],
    )
    def test_read_only(self, sql):
        """Test statements that cannot change persisted state."""
        assert not is_sql_mutation(sql)

    @pytest.mark.parametrize(
        "sql",
        [
            "INSERT INTO users (name) VALUES ('Linus')",
            "update users set name = 'x'",
            "DELETE FROM users",
            "DROP TABLE users",
            "TRUNCATE users",
            "CREATE TABLE t (id int)",
            "SELECT 1; DELETE FROM users",
            "WITH gone AS (DELETE FROM users RETURNING *) SELECT * FROM gone",
            "EXPLAIN ANALYZE DELETE FROM users",
            "SELECT * INTO archived_users FROM users",
            "with recent AS (SELECT * FROM orders) select * into snapshot FROM recent",
            "EXPLAIN ANALYZE SELECT * INTO t FROM users",
            "/* SELECT */ DELETE FROM users",
            "",
            "   ;  ",
        ],
    )
    def test_mutating(self, sql):
        """Test statements that may change persisted state."""
        assert is_sql_mutation(sql)

    def test_strip_comments(self):
        """Test removing line and block comments."""
        assert strip_sql_comments("SELECT 1 -- one\n/* two */SELECT 2").split() == [
            "SELECT", "1", "SELECT", "2"
        ]


class TestRequiresConfirmation:
    """Tests for tool-level classification."""

    def test_ddl_always_requires_confirmation(self):
        """Test that execute_ddl is mutating regardless of its SQL."""
        assert requires_confirmation("execute_ddl", {"sql": "SELECT 1"})

    def test_sql_query_depends_on_sql(self):
        """Test that run_sql_query follows the SQL classification."""
        assert not requires_confirmation("run_sql_query", {"sql": "SELECT 1"})
        assert requires_confirmation("run_sql_query", {"sql": "DELETE FROM users"})

    def test_read_only_tools(self):
        """Test that introspection tools never require confirmation."""
        for name in ("list_tables", "get_table_schema", "explain_query", "get_table_preview"):
            assert not requires_confirmation(name, {"sql": "DROP TABLE users"})

    def test_explain_with_trailing_statement(self):
        """Test that explain_query asks when SQL carries more than one statement."""
        assert not requires_confirmation("explain_query", {"sql": "SELECT * FROM users;"})
        assert requires_confirmation("explain_query", {"sql": "SELECT 1; DROP TABLE users"})
        assert requires_confirmation("explain_query", {"sql": "SELECT 1 -- plan\n; SELECT 2"})


class TestConfirmationGate:
    """Tests for the suspend-and-resume behavior of the gate."""

    @pytest.mark.asyncio
    async def test_read_only_call_passes_through(self):
        """Test that non-mutating calls never suspend."""
        bus = RecordingEventBus()
        gate = ConfirmationGate(event_bus=bus)
        await gate.check_confirmation("c1", "run_sql_query", {"sql": "SELECT 1"})
        assert gate.pending is None
        assert bus.events == []

    @pytest.mark.asyncio
    async def test_confirm_resumes(self):
        """Test that confirming lets the call proceed."""
        bus = RecordingEventBus()
        gate = ConfirmationGate(event_bus=bus)
        task = asyncio.create_task(
            gate.check_confirmation("c1", "run_sql_query", {"sql": "DELETE FROM users"})
        )
        await wait_for_pending(gate)

        pending = gate.pending
        assert pending.toolCallId == "c1"
        assert pending.toolName == "run_sql_query"
        assert pending.sql == "DELETE FROM users"
        assert pending.isMutation

        assert gate.confirm()
        await task
        assert gate.pending is None

        requested = bus.of_type(CONFIRMATION_REQUESTED)
        assert requested[0].properties["confirmation"]["toolCallId"] == "c1"
        resolved = bus.of_type(CONFIRMATION_RESOLVED)[0]
        assert resolved.properties == {"toolCallId": "c1", "approved": True, "reason": None}

    @pytest.mark.asyncio
    async def test_reject_raises_with_reason(self):
        """Test that rejection surfaces the user's reason."""
        gate = ConfirmationGate()
        task = asyncio.create_task(gate.check_confirmation("c1", "execute_ddl", {"sql": "DROP TABLE t"}))
        await wait_for_pending(gate)

        assert gate.reject("too risky")
        with pytest.raises(ConfirmationRejectedError, match="User rejected execution: too risky"):
            await task

    @pytest.mark.asyncio
    async def test_blank_reason_uses_default(self):
        """Test that an empty rejection reason is replaced."""
        gate = ConfirmationGate()
        task = asyncio.create_task(gate.check_confirmation("c1", "execute_ddl", {"sql": "DROP TABLE t"}))
        await wait_for_pending(gate)

        gate.reject("   ")
        with pytest.raises(ConfirmationRejectedError) as exc_info:
            await task
        assert exc_info.value.reason == DEFAULT_REJECTION_REASON

    @pytest.mark.asyncio
    async def test_auto_accept_skips_suspension(self):
        """Test that auto-accept never publishes a request."""
        bus = RecordingEventBus()
        gate = ConfirmationGate(auto_accept=True, event_bus=bus)
        await gate.check_confirmation("c1", "execute_ddl", {"sql": "DROP TABLE t"})
        assert bus.events == []

    @pytest.mark.asyncio
    async def test_timeout_rejects(self):
        """Test that an unanswered confirmation is rejected after the timeout."""
        gate = ConfirmationGate(timeout_seconds=0.01)
        with pytest.raises(ConfirmationRejectedError) as exc_info:
            await gate.check_confirmation("c1", "execute_ddl", {"sql": "DROP TABLE t"})
        assert exc_info.value.reason == TIMEOUT_REJECTION_REASON
        assert gate.pending is None

    def test_resolve_without_pending(self):
        """Test that confirm and reject report when nothing is pending."""
        gate = ConfirmationGate()
        assert not gate.confirm()
        assert not gate.reject("no")

    @pytest.mark.asyncio
    async def test_one_confirmation_at_a_time(self):
        """Test that a second mutating call waits behind the first."""
        gate = ConfirmationGate()
        first = asyncio.create_task(gate.check_confirmation("c1", "execute_ddl", {"sql": "DROP TABLE a"}))
        await wait_for_pending(gate)
        second = asyncio.create_task(gate.check_confirmation("c2", "execute_ddl", {"sql": "DROP TABLE b"}))
        await asyncio.sleep(0)
        assert gate.pending.toolCallId == "c1"

        gate.confirm()
        await first
        await wait_for_pending(gate)
        assert gate.pending.toolCallId == "c2"

        gate.confirm()
        await second
