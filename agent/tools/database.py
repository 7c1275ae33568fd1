"""
Database tools exposed to the model.

Each tool validates its arguments with a pydantic schema and delegates to a
DatabaseBackend. Which calls need the user's confirmation is decided by the
confirmation gate, not here.
"""
import logging

from pydantic import BaseModel, Field

from chat.registry import NoArguments, ToolRegistry

from .backend import (
    DatabaseBackend,
    DatabaseSchemaInfo,
    DdlResult,
    ExplainResult,
    ForeignKeyInfo,
    IndexInfo,
    QueryResult,
    TableSchemaInfo,
)

logger = logging.getLogger(__name__)

DEFAULT_PREVIEW_LIMIT = 10
MAX_PREVIEW_LIMIT = 1000


class SqlArgs(BaseModel):
    sql: str = Field(
        min_length=1,
        description="The SQL to execute. Use proper SQL syntax for the connected database type.",
    )


class TableArgs(BaseModel):
    table_name: str = Field(min_length=1, description="Name of the table")


class TablePreviewArgs(TableArgs):
    limit: int = Field(
        default=DEFAULT_PREVIEW_LIMIT,
        ge=1,
        le=MAX_PREVIEW_LIMIT,
        description="Maximum number of rows to return",
    )


def register_database_tools(registry: ToolRegistry, backend: DatabaseBackend) -> ToolRegistry:
    """
    Register the database tools against a backend.

    Args:
        registry: Registry to add the tools to
        backend: Database the tools operate on

    Returns:
        The same registry, for chaining
    """

    @registry.tool(
        "get_database_schema",
        description=(
            "Get the complete database schema including all tables, their columns with "
            "data types, views, and functions. Use this tool first to understand the "
            "database structure before writing queries."
        ),
        argument_schema=NoArguments,
    )
    async def get_database_schema(args: NoArguments) -> DatabaseSchemaInfo:
        return await backend.get_database_schema()

    @registry.tool(
        "list_tables",
        description="List the names of all tables in the database.",
        argument_schema=NoArguments,
    )
    async def list_tables(args: NoArguments) -> list[str]:
        return await backend.list_tables()

    @registry.tool(
        "get_table_schema",
        description="Get the columns of a table with their data types, nullability and keys.",
        argument_schema=TableArgs,
    )
    async def get_table_schema(args: TableArgs) -> TableSchemaInfo:
        return await backend.get_table_schema(args.table_name)

    @registry.tool(
        "run_sql_query",
        description=(
            "Execute a SQL query against the connected database. Returns structured "
            "results with columns, rows, and row count. For SELECT queries, results are "
            "returned directly. For INSERT/UPDATE/DELETE, returns the number of affected rows."
        ),
        argument_schema=SqlArgs,
    )
    async def run_sql_query(args: SqlArgs) -> QueryResult:
        return await backend.execute_query(args.sql)

    @registry.tool(
        "execute_ddl",
        description=(
            "Execute a schema change (CREATE, ALTER, DROP). Pass exactly ONE statement per call."
        ),
        argument_schema=SqlArgs,
    )
    async def execute_ddl(args: SqlArgs) -> DdlResult:
        return await backend.execute_ddl(args.sql)

    @registry.tool(
        "explain_query",
        description=(
            "Get the execution plan for a SQL query to understand performance "
            "characteristics. Use this to analyze slow queries and suggest optimizations "
            "like indexes."
        ),
        argument_schema=SqlArgs,
    )
    async def explain_query(args: SqlArgs) -> ExplainResult:
        return await backend.explain_query(args.sql)

    @registry.tool(
        "get_table_preview",
        description="Preview the first rows of a table.",
        argument_schema=TablePreviewArgs,
    )
    async def get_table_preview(args: TablePreviewArgs) -> QueryResult:
        return await backend.get_table_data(args.table_name, limit=args.limit, offset=0)

    @registry.tool(
        "get_table_indexes",
        description="Get the indexes defined on a table.",
        argument_schema=TableArgs,
    )
    async def get_table_indexes(args: TableArgs) -> list[IndexInfo]:
        return await backend.get_table_indexes(args.table_name)

    @registry.tool(
        "get_table_foreign_keys",
        description="Get the foreign key relationships of a table.",
        argument_schema=TableArgs,
    )
    async def get_table_foreign_keys(args: TableArgs) -> list[ForeignKeyInfo]:
        return await backend.get_table_foreign_keys(args.table_name)

    logger.debug("Registered %d database tools", len(registry))
    return registry
