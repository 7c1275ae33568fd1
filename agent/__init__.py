"""
Model transport and database tools for the chat engine.
Exports the pydantic-ai transport and the tool registration helpers.
"""
from .tools import DatabaseBackend, register_database_tools
from .transport import PydanticAITransport, build_model_messages, build_tool_definitions

__all__ = [
    # Transport
    "PydanticAITransport",
    "build_model_messages",
    "build_tool_definitions",
    # Tools
    "DatabaseBackend",
    "register_database_tools",
]
