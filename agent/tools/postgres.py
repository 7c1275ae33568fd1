"""
PostgreSQL backend for the database tools.

psycopg2 is blocking, so every operation opens a connection and runs in a
worker thread.
"""
import asyncio
import logging
import os
from typing import Any, Callable, TypeVar

import psycopg2
from psycopg2 import sql as pgsql
from psycopg2.extensions import ISOLATION_LEVEL_AUTOCOMMIT

from chat.confirmation import is_sql_mutation, split_sql_statements

from .backend import (
    ColumnInfo,
    DatabaseSchemaInfo,
    DdlResult,
    ExplainResult,
    ForeignKeyInfo,
    IndexInfo,
    QueryResult,
    TableSchemaInfo,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")

SCHEMA = "public"

_LIST_TABLES = "SELECT tablename FROM pg_tables WHERE schemaname = %s ORDER BY tablename"
_LIST_VIEWS = "SELECT viewname FROM pg_views WHERE schemaname = %s ORDER BY viewname"
_LIST_FUNCTIONS = (
    "SELECT routine_name FROM information_schema.routines "
    "WHERE routine_schema = %s ORDER BY routine_name"
)
_TABLE_COLUMNS = """
    SELECT c.column_name, c.data_type, c.is_nullable = 'YES', c.column_default,
           EXISTS (
               SELECT 1
               FROM information_schema.table_constraints tc
               JOIN information_schema.key_column_usage kcu
                 ON tc.constraint_name = kcu.constraint_name
                AND tc.table_schema = kcu.table_schema
               WHERE tc.constraint_type = 'PRIMARY KEY'
                 AND tc.table_schema = c.table_schema
                 AND tc.table_name = c.table_name
                 AND kcu.column_name = c.column_name
           )
    FROM information_schema.columns c
    WHERE c.table_name = %s AND c.table_schema = %s
    ORDER BY c.ordinal_position
"""
_TABLE_INDEXES = """
    SELECT indexname, array_to_string(array_agg(a.attname), ','), i.indisunique
    FROM pg_indexes
    JOIN pg_class c ON c.relname = indexname
    JOIN pg_index i ON i.indexrelid = c.oid
    JOIN pg_attribute a ON a.attrelid = i.indrelid AND a.attnum = ANY(i.indkey)
    WHERE tablename = %s AND schemaname = %s
    GROUP BY indexname, i.indisunique
    ORDER BY indexname
"""
_TABLE_FOREIGN_KEYS = """
    SELECT tc.constraint_name, kcu.column_name,
           ccu.table_name AS referenced_table, ccu.column_name AS referenced_column
    FROM information_schema.table_constraints AS tc
    JOIN information_schema.key_column_usage AS kcu
      ON tc.constraint_name = kcu.constraint_name
     AND tc.table_schema = kcu.table_schema
    JOIN information_schema.constraint_column_usage AS ccu
      ON ccu.constraint_name = tc.constraint_name
     AND ccu.table_schema = tc.table_schema
    WHERE tc.constraint_type = 'FOREIGN KEY'
      AND tc.table_name = %s
      AND tc.table_schema = %s
    ORDER BY tc.constraint_name
"""


def get_connection_params() -> dict[str, Any]:
    """Get database connection parameters from environment variables."""
    return {
        "host": os.getenv("POSTGRES_HOST", "localhost"),
        "port": int(os.getenv("POSTGRES_PORT", "5432")),
        "user": os.getenv("POSTGRES_USER", "postgres"),
        "password": os.getenv("POSTGRES_PASSWORD", ""),
        "database": os.getenv("POSTGRES_DB", "postgres"),
    }


class PostgresBackend:
    """DatabaseBackend for a PostgreSQL database."""

    def __init__(self, dsn: str | None = None):
        """
        Initialize the backend.

        Args:
            dsn: libpq connection string; defaults to the POSTGRES_* variables
        """
        self.dsn = dsn

    def _connect(self):
        if self.dsn:
            return psycopg2.connect(self.dsn)
        return psycopg2.connect(**get_connection_params())

    async def _run(self, operation: Callable[[Any], T], autocommit: bool = False) -> T:
        def work() -> T:
            conn = self._connect()
            try:
                if autocommit:
                    conn.set_isolation_level(ISOLATION_LEVEL_AUTOCOMMIT)
                with conn.cursor() as cursor:
                    result = operation(cursor)
                if not autocommit:
                    conn.commit()
                return result
            except psycopg2.Error:
                if not autocommit:
                    conn.rollback()
                raise
            finally:
                conn.close()

        return await asyncio.to_thread(work)

    async def list_tables(self) -> list[str]:
        def op(cursor) -> list[str]:
            cursor.execute(_LIST_TABLES, (SCHEMA,))
            return [row[0] for row in cursor.fetchall()]

        return await self._run(op)

    async def get_table_schema(self, table_name: str) -> TableSchemaInfo:
        return await self._run(lambda cursor: self._table_schema(cursor, table_name))

    async def get_database_schema(self) -> DatabaseSchemaInfo:
        def op(cursor) -> DatabaseSchemaInfo:
            cursor.execute(_LIST_TABLES, (SCHEMA,))
            tables = [row[0] for row in cursor.fetchall()]
            cursor.execute(_LIST_VIEWS, (SCHEMA,))
            views = [row[0] for row in cursor.fetchall()]
            cursor.execute(_LIST_FUNCTIONS, (SCHEMA,))
            functions = [row[0] for row in cursor.fetchall()]
            return DatabaseSchemaInfo(
                tables=[self._table_schema(cursor, name) for name in tables],
                views=views,
                functions=functions,
            )

        return await self._run(op)

    async def execute_query(self, sql: str) -> QueryResult:
        def op(cursor) -> QueryResult:
            cursor.execute(sql)
            return _query_result(cursor)

        logger.debug("Executing query: %s", sql)
        return await self._run(op)

    async def execute_ddl(self, sql: str) -> DdlResult:
        def op(cursor) -> DdlResult:
            cursor.execute(sql)
            return DdlResult(success=True, message=cursor.statusmessage or "OK")

        logger.info("Executing DDL: %s", sql)
        return await self._run(op, autocommit=True)

    async def explain_query(self, sql: str) -> ExplainResult:
        if len(split_sql_statements(sql)) > 1:
            raise ValueError("explain_query accepts a single statement")
        # ANALYZE executes the statement, so only read-only SQL gets it
        prefix = "EXPLAIN ANALYZE " if not is_sql_mutation(sql) else "EXPLAIN "

        def op(cursor) -> ExplainResult:
            cursor.execute(prefix + sql)
            return ExplainResult(plan=[str(row[0]) for row in cursor.fetchall()])

        return await self._run(op)

    async def get_table_data(self, table_name: str, limit: int, offset: int = 0) -> QueryResult:
        def op(cursor) -> QueryResult:
            query = pgsql.SQL("SELECT * FROM {} LIMIT %s OFFSET %s").format(
                pgsql.Identifier(SCHEMA, table_name)
            )
            cursor.execute(query, (limit, offset))
            return _query_result(cursor)

        return await self._run(op)

    async def get_table_indexes(self, table_name: str) -> list[IndexInfo]:
        def op(cursor) -> list[IndexInfo]:
            cursor.execute(_TABLE_INDEXES, (table_name, SCHEMA))
            return [
                IndexInfo(name=name, columns=columns.split(","), unique=unique)
                for name, columns, unique in cursor.fetchall()
            ]

        return await self._run(op)

    async def get_table_foreign_keys(self, table_name: str) -> list[ForeignKeyInfo]:
        def op(cursor) -> list[ForeignKeyInfo]:
            cursor.execute(_TABLE_FOREIGN_KEYS, (table_name, SCHEMA))
            return [
                ForeignKeyInfo(
                    constraintName=constraint,
                    columnName=column,
                    referencedTable=referenced_table,
                    referencedColumn=referenced_column,
                )
                for constraint, column, referenced_table, referenced_column in cursor.fetchall()
            ]

        return await self._run(op)

    @staticmethod
    def _table_schema(cursor, table_name: str) -> TableSchemaInfo:
        cursor.execute(_TABLE_COLUMNS, (table_name, SCHEMA))
        return TableSchemaInfo(
            name=table_name,
            columns=[
                ColumnInfo(
                    name=name,
                    dataType=data_type,
                    isNullable=nullable,
                    isPrimaryKey=primary_key,
                    defaultValue=default,
                )
                for name, data_type, nullable, default, primary_key in cursor.fetchall()
            ],
        )


def _query_result(cursor) -> QueryResult:
    if cursor.description is None:
        return QueryResult(rowCount=max(cursor.rowcount, 0))
    rows = [list(row) for row in cursor.fetchall()]
    return QueryResult(
        columns=[column.name for column in cursor.description],
        rows=rows,
        rowCount=len(rows),
    )
