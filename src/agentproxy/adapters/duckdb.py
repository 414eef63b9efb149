"""DuckDB adapter — local/in-memory, great for testing and local analytics."""

from __future__ import annotations

import time

import duckdb as _duckdb
import sqlglot
from sqlglot import exp

from agentproxy import __version__
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

# DuckDB reports INSERT/UPDATE/DELETE as a one-row result with a "Count" column.
_WRITE_TYPES = (exp.Insert, exp.Update, exp.Delete, exp.Merge)


def _is_write(sql: str) -> bool:
    """Classify from the parsed statement; leading comments are not part of it."""
    try:
        statements = [s for s in sqlglot.parse(sql, dialect="duckdb") if s is not None]
    except sqlglot.errors.SqlglotError as e:
        raise BackendExecutionError(f"DuckDB could not classify statement: {e}") from e
    return bool(statements) and isinstance(statements[-1], _WRITE_TYPES)


class DuckDBAdapter:
    """DuckDB adapter — in-process, no server needed."""

    def __init__(self) -> None:
        self._conn: _duckdb.DuckDBPyConnection | None = None

    async def connect(self, config: ConnectionConfig) -> None:
        path = config.params.get("path", ":memory:")
        try:
            self._conn = _duckdb.connect(
                path, config={"custom_user_agent": f"agentproxy/{__version__}"}
            )
        except Exception as e:
            raise BackendExecutionError(f"DuckDB connection failed: {e}") from e

    async def close(self) -> None:
        if self._conn is not None:
            self._conn.close()
            self._conn = None

    def _ensure_conn(self) -> _duckdb.DuckDBPyConnection:
        if self._conn is None:
            raise BackendExecutionError("Not connected. Call connect() first.")
        return self._conn

    async def execute(
        self, sql: str, *, labels: dict[str, str] | None = None
    ) -> ExecutionResult:
        conn = self._ensure_conn()
        is_write = _is_write(sql)

        t0 = time.monotonic()
        try:
            result = conn.execute(label_comment(sql, labels))
            columns = [desc[0] for desc in result.description] if result.description else []
            rows_raw = result.fetchall() if columns else []
        except Exception as e:
            raise BackendExecutionError(f"DuckDB execution failed: {e}") from e
        duration_ms = (time.monotonic() - t0) * 1000

        if is_write and columns == ["Count"]:
            count = rows_raw[0][0] if rows_raw else 0
            return ExecutionResult(rows_affected=int(count), duration_ms=duration_ms)

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
            table_rows = conn.execute(
                "SELECT table_schema, table_name "
                "FROM information_schema.tables "
                "WHERE table_schema NOT IN ('pg_catalog', 'information_schema') "
                "ORDER BY table_schema, table_name"
            ).fetchall()

            for schema, table_name in table_rows:
                if level == IntrospectionLevel.CATALOG:
                    tables.append(TableInfo(schema=schema, name=table_name))
                    continue

                col_rows = conn.execute(
                    "SELECT column_name, data_type, is_nullable "
                    "FROM information_schema.columns "
                    "WHERE table_schema = ? AND table_name = ? "
                    "ORDER BY ordinal_position",
                    [schema, table_name],
                ).fetchall()
                columns = [
                    ColumnInfo(name=col_name, data_type=data_type, is_nullable=(nullable == "YES"))
                    for col_name, data_type, nullable in col_rows
                ]
                tables.append(TableInfo(schema=schema, name=table_name, columns=columns))
        except Exception as e:
            raise BackendExecutionError(f"DuckDB introspection failed: {e}") from e

        return SchemaMetadata(tables=tables)

    def db_type(self) -> DatabaseType:
        return DatabaseType.DUCKDB

    def dialect(self) -> str:
        return "duckdb"
