"""Tool invocation status and its allowed transitions."""

from enum import Enum


class ToolStatus(str, Enum):
    """Lifecycle of a tool invocation part."""

    PENDING = "pending"
    EXECUTING = "executing"
    SUCCESS = "success"
    ERROR = "error"


# pending -> error covers calls that never reach execution
# (unparseable arguments, abandoned after a failed or cancelled stream)
ALLOWED_TRANSITIONS: dict[ToolStatus, frozenset[ToolStatus]] = {
    ToolStatus.PENDING: frozenset({ToolStatus.EXECUTING, ToolStatus.ERROR}),
    ToolStatus.EXECUTING: frozenset({ToolStatus.SUCCESS, ToolStatus.ERROR}),
    ToolStatus.SUCCESS: frozenset(),
    ToolStatus.ERROR: frozenset(),
}


def can_transition(current: ToolStatus, target: ToolStatus) -> bool:
    """Check whether a tool invocation may move from current to target."""
    return target in ALLOWED_TRANSITIONS[current]


def is_terminal(status: ToolStatus) -> bool:
    """Success and error are final; nothing is retried automatically."""
    return not ALLOWED_TRANSITIONS[status]
