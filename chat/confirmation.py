"""
Confirmation gate for mutating tool calls.

Decides per tool invocation whether execution must pause for explicit human
approval, and suspends the calling task until the user confirms or rejects.
"""

import asyncio
import logging
import re
from typing import Any

from .events import CONFIRMATION_REQUESTED, CONFIRMATION_RESOLVED, Event, EventBus, NullEventBus
from .exceptions import ConfirmationRejectedError
from .models import PendingConfirmation

logger = logging.getLogger(__name__)


# Tools that always change persisted state
ALWAYS_MUTATING_TOOLS = frozenset({"execute_ddl"})

# Tools whose effect depends on the SQL they carry
SQL_TOOLS = frozenset({"run_sql_query"})

# Tools that explain a single statement; anything after it would run as-is
EXPLAIN_TOOLS = frozenset({"explain_query"})

READ_ONLY_KEYWORDS = frozenset({"SELECT", "SHOW", "DESCRIBE", "DESC", "EXPLAIN", "WITH"})

DEFAULT_REJECTION_REASON = "Rejected by user"
TIMEOUT_REJECTION_REASON = "Confirmation timed out"

_LINE_COMMENT = re.compile(r"--[^\n]*")
_BLOCK_COMMENT = re.compile(r"/\*.*?\*/", re.DOTALL)
_FIRST_WORD = re.compile(r"^[\s(]*([A-Za-z]+)")
_DML_WORD = re.compile(r"\b(INSERT|UPDATE|DELETE|MERGE|UPSERT|REPLACE)\b", re.IGNORECASE)
_SELECT_INTO = re.compile(r"\bINTO\b", re.IGNORECASE)
_EXPLAIN_PREFIX = re.compile(
    r"^\s*EXPLAIN\b((\s*\([^)]*\))|(\s+(ANALYZE|ANALYSE|VERBOSE)\b))*",
    re.IGNORECASE,
)


def strip_sql_comments(sql: str) -> str:
    """Remove ``--`` and ``/* */`` comments from SQL text."""
    return _LINE_COMMENT.sub("", _BLOCK_COMMENT.sub(" ", sql))


def _is_read_only_statement(statement: str) -> bool:
    match = _FIRST_WORD.match(statement)
    if not match:
        return False
    keyword = match.group(1).upper()
    if keyword not in READ_ONLY_KEYWORDS:
        return False

    if keyword == "WITH":
        # Data-modifying CTEs: WITH gone AS (DELETE ...) SELECT ...
        return _DML_WORD.search(statement) is None and _SELECT_INTO.search(statement) is None

    if keyword == "SELECT":
        # SELECT ... INTO new_table creates a table
        return _SELECT_INTO.search(statement) is None

    if keyword == "EXPLAIN":
        prefix = _EXPLAIN_PREFIX.match(statement)
        if prefix and re.search(r"ANALY[SZ]E", prefix.group(0), re.IGNORECASE):
            # EXPLAIN ANALYZE runs the statement it explains
            return _is_read_only_statement(statement[prefix.end():])

    return True


def is_sql_mutation(sql: str) -> bool:
    """
    Check whether SQL may change persisted state.

    Every ``;``-separated statement must be read-only for the SQL to count as
    non-mutating. Splitting ignores string literals, so a semicolon inside a
    literal can only make the classification stricter.

    Args:
        sql: SQL text supplied by the model

    Returns:
        True unless every statement is a read-only statement
    """
    statements = split_sql_statements(sql)
    if not statements:
        return True
    return not all(_is_read_only_statement(s) for s in statements)


def split_sql_statements(sql: str) -> list[str]:
    """Split SQL on ``;`` after removing comments, dropping empty statements."""
    statements = [s.strip() for s in strip_sql_comments(sql).split(";")]
    return [s for s in statements if s]


def requires_confirmation(tool_name: str, args: dict[str, Any]) -> bool:
    """
    Classify a tool invocation as mutating.

    Args:
        tool_name: Name of the tool being called
        args: Tool arguments

    Returns:
        True for ``execute_ddl``, for ``run_sql_query`` with non-read-only SQL,
        and for ``explain_query`` carrying more than one statement
    """
    if tool_name in ALWAYS_MUTATING_TOOLS:
        return True
    if tool_name in SQL_TOOLS:
        return is_sql_mutation(str(args.get("sql", "")))
    if tool_name in EXPLAIN_TOOLS:
        return len(split_sql_statements(str(args.get("sql", "")))) > 1
    return False


class ConfirmationGate:
    """
    Suspends mutating tool calls until the user decides.

    At most one confirmation is outstanding at a time; further mutating calls
    wait behind it. ``auto_accept`` bypasses the suspension entirely.
    """

    def __init__(
        self,
        auto_accept: bool = False,
        event_bus: EventBus | None = None,
        timeout_seconds: float | None = None,
    ):
        """
        Initialize the gate.

        Args:
            auto_accept: Skip confirmation for mutating calls
            event_bus: Event bus for publishing confirmation events
            timeout_seconds: Treat an unanswered confirmation as rejected after
                this many seconds (None waits indefinitely)
        """
        self.auto_accept = auto_accept
        self.event_bus = event_bus or NullEventBus()
        self.timeout_seconds = timeout_seconds
        self._pending: PendingConfirmation | None = None
        # Resolves to None on confirm, or to the rejection reason
        self._decision: asyncio.Future[str | None] | None = None
        self._slot = asyncio.Lock()

    @property
    def pending(self) -> PendingConfirmation | None:
        return self._pending

    async def check_confirmation(
        self, tool_call_id: str, tool_name: str, args: dict[str, Any]
    ) -> None:
        """
        Wait for approval if the call is mutating.

        Args:
            tool_call_id: ID of the tool call being gated
            tool_name: Tool name
            args: Validated tool arguments

        Raises:
            ConfirmationRejectedError: If the user rejects the call or the
                confirmation times out
        """
        if not requires_confirmation(tool_name, args):
            return

        if self.auto_accept:
            logger.info("Auto-accepting %s for tool call %s", tool_name, tool_call_id)
            return

        async with self._slot:
            confirmation = PendingConfirmation(
                toolCallId=tool_call_id,
                toolName=tool_name,
                sql=str(args.get("sql", "")),
            )
            decision: asyncio.Future[str | None] = asyncio.get_running_loop().create_future()
            self._pending = confirmation
            self._decision = decision

            logger.info("Confirmation requested for %s (%s)", tool_call_id, tool_name)
            await self.event_bus.publish(
                Event(
                    type=CONFIRMATION_REQUESTED,
                    properties={"confirmation": confirmation.model_dump()},
                )
            )

            try:
                if self.timeout_seconds is None:
                    reason = await decision
                else:
                    reason = await asyncio.wait_for(decision, timeout=self.timeout_seconds)
            except asyncio.TimeoutError:
                logger.warning("Confirmation timed out: %s", tool_call_id)
                reason = TIMEOUT_REJECTION_REASON
            finally:
                self._pending = None
                self._decision = None

            approved = reason is None
            await self.event_bus.publish(
                Event(
                    type=CONFIRMATION_RESOLVED,
                    properties={
                        "toolCallId": tool_call_id,
                        "approved": approved,
                        "reason": reason,
                    },
                )
            )

            if not approved:
                logger.info("Tool call %s rejected: %s", tool_call_id, reason)
                raise ConfirmationRejectedError(reason)

            logger.info("Tool call %s confirmed", tool_call_id)

    def confirm(self) -> bool:
        """
        Approve the outstanding confirmation.

        Returns:
            True if a confirmation was resolved, False if none was pending
        """
        return self._resolve(None)

    def reject(self, reason: str) -> bool:
        """
        Reject the outstanding confirmation.

        Args:
            reason: User-supplied reason, fed back to the model

        Returns:
            True if a confirmation was resolved, False if none was pending
        """
        return self._resolve(reason.strip() or DEFAULT_REJECTION_REASON)

    def _resolve(self, outcome: str | None) -> bool:
        decision = self._decision
        if decision is None or decision.done():
            logger.warning("No confirmation pending")
            return False
        decision.set_result(outcome)
        self._pending = None
        return True
