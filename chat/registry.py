"""
Tool registry.

Maps a tool name to its description, argument schema and executor. The
registry has no dependency on orchestration state.
"""

import logging
from dataclasses import dataclass
from typing import Any, Awaitable, Callable

from pydantic import BaseModel, ConfigDict, ValidationError

from .exceptions import InvalidOperationError, ToolArgumentError, UnknownToolError

logger = logging.getLogger(__name__)


ToolExecutor = Callable[[Any], Awaitable[Any]]


class NoArguments(BaseModel):
    """Argument schema for tools that take no input."""

    model_config = ConfigDict(extra="ignore")


class ToolSpec(BaseModel):
    """Tool definition advertised to the model."""

    name: str
    description: str
    parameters: dict[str, Any]


@dataclass(frozen=True)
class ToolEntry:
    """A registered tool.

    Attributes:
        name: Tool name the model uses to call it
        description: Natural-language description for the model
        argument_schema: Pydantic model the arguments are validated against
        execute: Coroutine function receiving the validated arguments model
    """

    name: str
    description: str
    argument_schema: type[BaseModel]
    execute: ToolExecutor

    def spec(self) -> ToolSpec:
        return ToolSpec(
            name=self.name,
            description=self.description,
            parameters=self.argument_schema.model_json_schema(),
        )


class ToolRegistry:
    """Name -> executor dispatch table with argument validation."""

    def __init__(self) -> None:
        self._tools: dict[str, ToolEntry] = {}

    def register(
        self,
        name: str,
        execute: ToolExecutor,
        description: str = "",
        argument_schema: type[BaseModel] = NoArguments,
    ) -> ToolEntry:
        """
        Register a tool.

        Args:
            name: Tool name
            execute: Coroutine function called with the validated arguments
            description: Description shown to the model
            argument_schema: Pydantic model for the arguments

        Returns:
            The registered entry

        Raises:
            InvalidOperationError: If a tool with the same name exists
        """
        if name in self._tools:
            raise InvalidOperationError(f"Tool already registered: {name}")
        entry = ToolEntry(
            name=name,
            description=description,
            argument_schema=argument_schema,
            execute=execute,
        )
        self._tools[name] = entry
        logger.debug("Registered tool: %s", name)
        return entry

    def tool(
        self,
        name: str,
        description: str = "",
        argument_schema: type[BaseModel] = NoArguments,
    ) -> Callable[[ToolExecutor], ToolExecutor]:
        """Decorator form of :meth:`register`."""

        def decorator(func: ToolExecutor) -> ToolExecutor:
            self.register(name, func, description=description, argument_schema=argument_schema)
            return func

        return decorator

    def get(self, name: str) -> ToolEntry | None:
        return self._tools.get(name)

    def __contains__(self, name: object) -> bool:
        return name in self._tools

    def __len__(self) -> int:
        return len(self._tools)

    def names(self) -> list[str]:
        return list(self._tools)

    def validate(self, name: str, args: dict[str, Any]) -> BaseModel:
        """
        Validate arguments for a tool.

        Args:
            name: Tool name
            args: Arguments supplied by the model

        Returns:
            The validated arguments model

        Raises:
            UnknownToolError: If the tool is not registered
            ToolArgumentError: If the arguments do not match the schema
        """
        entry = self._tools.get(name)
        if entry is None:
            raise UnknownToolError(name)
        try:
            return entry.argument_schema.model_validate(args)
        except ValidationError as e:
            problems = "; ".join(
                f"{'.'.join(str(loc) for loc in err['loc']) or 'arguments'}: {err['msg']}"
                for err in e.errors()
            )
            raise ToolArgumentError(f"Invalid arguments for {name}: {problems}") from e

    def definitions(self) -> list[ToolSpec]:
        """Tool definitions to advertise to the model, in registration order."""
        return [entry.spec() for entry in self._tools.values()]
