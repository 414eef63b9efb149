"""PostgreSQL adapter — psycopg async, labels via SQL comments + application_name."""

from __future__ import annotations

import asyncio
import time

import psycopg

from agentproxy.adapters._base import (
    ColumnInfo,
    ConnectionConfig,
    DatabaseType,
    ExecutionResult,
    IntrospectionLevel,
    SchemaMetadata,
    TableInfo,
    label_comment,
)
from agentproxy.errors import BackendExecutionError


class PostgresAdapter:
    """PostgreSQL adapter using psycopg (async).

    One physical connection; statements are serialized through a lock.
    """

    def __init__(self) -> None:
        self._conn: psycopg.AsyncConnection | None = None
        self._lock = asyncio.Lock()

    async def connect(self, config: ConnectionConfig) -> None:
        dsn = config.params.get("dsn")
        if not dsn:
            raise BackendExecutionError("PostgreSQL requires 'dsn' in connection params")
        try:
            self._conn = await psycopg.AsyncConnection.connect(
                dsn, autocommit=True, application_name="agentproxy"
            )
        except Exception as e:
            raise BackendExecutionError(f"PostgreSQL connection failed: {e}") from e

    async def close(self) -> None:
        if self._conn is not None:
            await self._conn.close()
            self._conn = None

    def _ensure_conn(self) -> psycopg.AsyncConnection:
        if self._conn is None:
            raise BackendExecutionError("Not connected. Call connect() first.")
        return self._conn

    async def execute(
        self, sql: str, *, labels: dict[str, str] | None = None
    ) -> ExecutionResult:
        conn = self._ensure_conn()

        t0 = time.monotonic()
        try:
            async with self._lock, conn.cursor() as cur:
                await cur.execute(label_comment(sql, labels))
                if cur.description:
                    columns = [desc.name for desc in cur.description]
                    rows_raw = await cur.fetchall()
                else:
                    columns, rows_raw = [], []
                rowcount = cur.rowcount
        except Exception as e:
            raise BackendExecutionError(f"PostgreSQL execution failed: {e}") from e
        duration_ms = (time.monotonic() - t0) * 1000

        if not columns:
            return ExecutionResult(rows_affected=max(rowcount, 0), duration_ms=duration_ms)

        rows = [dict(zip(columns, row, strict=True)) for row in rows_raw]
        return ExecutionResult(
            rows_affected=len(rows),
            columns=columns,
            rows=rows,
            duration_ms=duration_ms,
        )

    async def introspect(self, level: IntrospectionLevel) -> SchemaMetadata:
        conn = self._ensure_conn()
        tables: list[TableInfo] = []

        try:
            async with self._lock, conn.cursor() as cur:
                await cur.execute(
                    "SELECT table_schema, table_name "
                    "FROM information_schema.tables "
                    "WHERE table_schema NOT IN ('pg_catalog', 'information_schema') "
                    "ORDER BY table_schema, table_name"
                )
                table_rows = await cur.fetchall()

                for schema, table_name in table_rows:
                    if level == IntrospectionLevel.CATALOG:
                        tables.append(TableInfo(schema=schema, name=table_name))
                        continue

                    await cur.execute(
                        "SELECT column_name, data_type, is_nullable "
                        "FROM information_schema.columns "
                        "WHERE table_schema = %s AND table_name = %s "
                        "ORDER BY ordinal_position",
                        (schema, table_name),
                    )
                    col_rows = await cur.fetchall()
                    columns = [
                        ColumnInfo(
                            name=col_name,
                            data_type=data_type,
                            is_nullable=(nullable == "YES"),
                        )
                        for col_name, data_type, nullable in col_rows
                    ]
                    tables.append(TableInfo(schema=schema, name=table_name, columns=columns))
        except Exception as e:
            raise BackendExecutionError(f"PostgreSQL introspection failed: {e}") from e

        return SchemaMetadata(tables=tables)

    def db_type(self) -> DatabaseType:
        return DatabaseType.POSTGRES

    def dialect(self) -> str:
        return "postgres"
