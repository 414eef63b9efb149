"""Execution adapter protocol — the boundary between the executor and drivers."""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from typing import Protocol, runtime_checkable


class DatabaseType(enum.Enum):
    DUCKDB = "duckdb"
    POSTGRES = "postgres"
    SQLITE = "sqlite"


@dataclass
class ConnectionConfig:
    name: str
    db_type: DatabaseType
    params: dict[str, str] = field(default_factory=dict)


@dataclass
class ExecutionResult:
    """Statement execution result.

    ``rows_affected`` is the backend's count for INSERT/UPDATE/DELETE and the
    number of returned rows for queries.
    """

    rows_affected: int
    columns: list[str] = field(default_factory=list)
    rows: list[dict[str, object]] = field(default_factory=list)
    duration_ms: float | None = None

    @property
    def returns_rows(self) -> bool:
        return bool(self.columns)


class IntrospectionLevel(enum.Enum):
    CATALOG = "catalog"
    STRUCTURE = "structure"


@dataclass
class ColumnInfo:
    name: str
    data_type: str
    is_nullable: bool = True


@dataclass
class TableInfo:
    schema: str | None
    name: str
    columns: list[ColumnInfo] = field(default_factory=list)

    def to_dict(self) -> dict[str, object]:
        return {
            "schema": self.schema,
            "table": self.name,
            "columns": [
                {"name": c.name, "type": c.data_type, "nullable": c.is_nullable}
                for c in self.columns
            ],
        }


@dataclass
class SchemaMetadata:
    tables: list[TableInfo] = field(default_factory=list)

    def to_dict(self) -> dict[str, object]:
        return {"tables": [t.to_dict() for t in self.tables]}


@runtime_checkable
class ExecutionAdapter(Protocol):
    async def connect(self, config: ConnectionConfig) -> None: ...
    async def close(self) -> None: ...
    async def execute(
        self, sql: str, *, labels: dict[str, str] | None = None
    ) -> ExecutionResult: ...
    async def introspect(self, level: IntrospectionLevel) -> SchemaMetadata: ...
    def db_type(self) -> DatabaseType: ...
    def dialect(self) -> str: ...


def label_comment(sql: str, labels: dict[str, str] | None) -> str:
    """Prefix SQL with a label comment so backend logs show who ran it."""
    if not labels:
        return sql
    label_str = ", ".join(f"{k}={v}" for k, v in labels.items())
    return f"/* agentproxy: {label_str} */ {sql}"
