"""
Database backend interface used by the database tools.

Result models use the camelCase field names the client renders.
"""
from typing import Any, Protocol

from pydantic import BaseModel, Field


class ColumnInfo(BaseModel):
    name: str
    dataType: str
    isNullable: bool = True
    isPrimaryKey: bool = False
    defaultValue: str | None = None


class TableSchemaInfo(BaseModel):
    name: str
    columns: list[ColumnInfo] = Field(default_factory=list)


class DatabaseSchemaInfo(BaseModel):
    tables: list[TableSchemaInfo] = Field(default_factory=list)
    views: list[str] = Field(default_factory=list)
    functions: list[str] = Field(default_factory=list)


class QueryResult(BaseModel):
    """Rows returned by a statement, or the affected row count for DML."""

    columns: list[str] = Field(default_factory=list)
    rows: list[list[Any]] = Field(default_factory=list)
    rowCount: int = 0


class DdlResult(BaseModel):
    success: bool = True
    message: str = ""


class ExplainResult(BaseModel):
    plan: list[str] = Field(default_factory=list)


class IndexInfo(BaseModel):
    name: str
    columns: list[str] = Field(default_factory=list)
    unique: bool = False


class ForeignKeyInfo(BaseModel):
    constraintName: str
    columnName: str
    referencedTable: str
    referencedColumn: str


class DatabaseBackend(Protocol):
    """Database operations the assistant's tools call into.

    Implementations raise on failure; the tool pipeline records the error
    and reports it to the model.
    """

    async def get_database_schema(self) -> DatabaseSchemaInfo:
        ...

    async def list_tables(self) -> list[str]:
        ...

    async def get_table_schema(self, table_name: str) -> TableSchemaInfo:
        ...

    async def execute_query(self, sql: str) -> QueryResult:
        ...

    async def execute_ddl(self, sql: str) -> DdlResult:
        ...

    async def explain_query(self, sql: str) -> ExplainResult:
        ...

    async def get_table_data(self, table_name: str, limit: int, offset: int = 0) -> QueryResult:
        ...

    async def get_table_indexes(self, table_name: str) -> list[IndexInfo]:
        ...

    async def get_table_foreign_keys(self, table_name: str) -> list[ForeignKeyInfo]:
        ...
