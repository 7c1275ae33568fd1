"""Tools for the agent."""

from .backend import (
    ColumnInfo,
    DatabaseBackend,
    DatabaseSchemaInfo,
    DdlResult,
    ExplainResult,
    ForeignKeyInfo,
    IndexInfo,
    QueryResult,
    TableSchemaInfo,
)
from .database import (
    DEFAULT_PREVIEW_LIMIT,
    MAX_PREVIEW_LIMIT,
    SqlArgs,
    TableArgs,
    TablePreviewArgs,
    register_database_tools,
)

__all__ = [
    # Backend interface
    "DatabaseBackend",
    "ColumnInfo",
    "TableSchemaInfo",
    "DatabaseSchemaInfo",
    "QueryResult",
    "DdlResult",
    "ExplainResult",
    "IndexInfo",
    "ForeignKeyInfo",
    # Database tools
    "register_database_tools",
    "DEFAULT_PREVIEW_LIMIT",
    "MAX_PREVIEW_LIMIT",
    "SqlArgs",
    "TableArgs",
    "TablePreviewArgs",
]
