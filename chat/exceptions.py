"""
Chat domain exceptions.

These exceptions are transport-agnostic and should be caught by the server
layer to convert into appropriate HTTP responses.
"""


class CoreError(Exception):
    """Base exception for all chat errors."""

    pass


class NotFoundError(CoreError):
    """Raised when a requested resource is not found."""

    def __init__(self, resource: str, identifier: str):
        self.resource = resource
        self.identifier = identifier
        super().__init__(f"{resource} not found: {identifier}")


class InvalidOperationError(CoreError):
    """Raised when an operation cannot be performed in the current state."""

    pass


class RoundInProgressError(InvalidOperationError):
    """Raised when a turn is started while another one is still in flight."""

    def __init__(self) -> None:
        super().__init__("A response is already being generated")


class ConfirmationPendingError(InvalidOperationError):
    """Raised when user input arrives while a tool confirmation is outstanding."""

    def __init__(self, tool_call_id: str):
        self.tool_call_id = tool_call_id
        super().__init__(f"Confirmation pending for tool call {tool_call_id}")


class TransportError(CoreError):
    """Raised (or recorded) when the model stream fails."""

    pass


class ToolError(CoreError):
    """Base class for failures that are fed back to the model as tool results."""

    pass


class UnknownToolError(ToolError):
    """Raised when the model calls a tool that is not registered."""

    def __init__(self, tool_name: str):
        self.tool_name = tool_name
        super().__init__(f"Unknown tool: {tool_name}")


class ToolArgumentError(ToolError):
    """Raised when tool arguments fail to parse or validate."""

    pass


class ConfirmationRejectedError(ToolError):
    """Raised when the user rejects a mutating tool call."""

    def __init__(self, reason: str):
        self.reason = reason
        super().__init__(f"User rejected execution: {reason}")
