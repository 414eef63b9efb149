"""SQLite adapter — single file database, autocommit, one serialized connection."""

from __future__ import annotations

import asyncio
import sqlite3
import time

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


class SQLiteAdapter:
    def __init__(self) -> None:
        self._conn: sqlite3.Connection | None = None
        self._lock = asyncio.Lock()

    async def connect(self, config: ConnectionConfig) -> None:
        path = config.params.get("path", ":memory:")
        try:
            self._conn = sqlite3.connect(path, isolation_level=None, check_same_thread=False)
        except sqlite3.Error as e:
            raise BackendExecutionError(f"SQLite connection failed: {e}") from e

    async def close(self) -> None:
        if self._conn is not None:
            self._conn.close()
            self._conn = None

    def _ensure_conn(self) -> sqlite3.Connection:
        if self._conn is None:
            raise BackendExecutionError("Not connected. Call connect() first.")
        return self._conn

    async def execute(
        self, sql: str, *, labels: dict[str, str] | None = None
    ) -> ExecutionResult:
        conn = self._ensure_conn()

        t0 = time.monotonic()
        try:
            async with self._lock:
                # cursor.rowcount stays -1 for DML behind a leading comment.
                before = conn.total_changes
                cur = conn.execute(label_comment(sql, labels))
                columns = [desc[0] for desc in cur.description] if cur.description else []
                rows_raw = cur.fetchall() if columns else []
                changes = conn.total_changes - before
        except sqlite3.Error as e:
            raise BackendExecutionError(f"SQLite execution failed: {e}") from e
        duration_ms = (time.monotonic() - t0) * 1000

        if not columns:
            return ExecutionResult(rows_affected=changes, duration_ms=duration_ms)

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
            async with self._lock:
                names = [
                    row[0]
                    for row in conn.execute(
                        "SELECT name FROM sqlite_master "
                        "WHERE type = 'table' AND name NOT LIKE 'sqlite_%' ORDER BY name"
                    )
                ]
                for name in names:
                    if level == IntrospectionLevel.CATALOG:
                        tables.append(TableInfo(schema="main", name=name))
                        continue
                    # PRAGMA table_info: cid, name, type, notnull, dflt_value, pk
                    col_rows = conn.execute(
                        "SELECT name, type, \"notnull\" FROM pragma_table_info(?)", (name,)
                    ).fetchall()
                    columns = [
                        ColumnInfo(name=col, data_type=col_type, is_nullable=not notnull)
                        for col, col_type, notnull in col_rows
                    ]
                    tables.append(TableInfo(schema="main", name=name, columns=columns))
        except sqlite3.Error as e:
            raise BackendExecutionError(f"SQLite introspection failed: {e}") from e

        return SchemaMetadata(tables=tables)

    def db_type(self) -> DatabaseType:
        return DatabaseType.SQLITE

    def dialect(self) -> str:
        return "sqlite"
