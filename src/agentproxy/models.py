"""Request, record and response types of the preview/commit pipeline."""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from datetime import datetime


class RecordStatus(enum.Enum):
    PREVIEWED = "previewed"
    COMMITTED = "committed"


@dataclass(frozen=True)
class QueryContext:
    """Caller identity, accepted as given. tenant_id '*' disables tenant enforcement."""

    actor: str
    tenant_id: str


@dataclass(frozen=True)
class SqlRequest:
    sql: str
    context: QueryContext
    preview_id: str | None = None


@dataclass
class QueryRecord:
    id: str
    actor: str
    tenant_id: str
    sql: str
    operation: str
    tables: list[str]
    status: RecordStatus
    created_at: datetime
    committed_at: datetime | None = None
    rows_affected: int | None = None

    def to_dict(self) -> dict[str, object]:
        return {
            "id": self.id,
            "actor": self.actor,
            "tenant_id": self.tenant_id,
            "sql": self.sql,
            "operation": self.operation,
            "tables": list(self.tables),
            "status": self.status.value,
            "created_at": self.created_at.isoformat(),
            "committed_at": self.committed_at.isoformat() if self.committed_at else None,
            "rows_affected": self.rows_affected,
        }


@dataclass(frozen=True)
class PreviewResponse:
    preview_id: str
    operation: str
    tables: list[str]
    rows_affected: int = 0
    warnings: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, object]:
        return {
            "ok": True,
            "preview_id": self.preview_id,
            "operation": self.operation,
            "tables": list(self.tables),
            "rows_affected": self.rows_affected,
            "warnings": list(self.warnings),
        }


@dataclass(frozen=True)
class CommitResponse:
    preview_id: str
    committed_at: datetime
    rows_affected: int
    warnings: list[str] = field(default_factory=list)
    columns: list[str] | None = None
    rows: list[dict[str, object]] | None = None

    def to_dict(self) -> dict[str, object]:
        doc: dict[str, object] = {
            "ok": True,
            "preview_id": self.preview_id,
            "committed_at": self.committed_at.isoformat(),
            "rows_affected": self.rows_affected,
            "warnings": list(self.warnings),
        }
        if self.columns is not None:
            doc["columns"] = self.columns
            doc["rows"] = self.rows or []
        return doc
