"""Query executor: analyze -> evaluate -> record, and the preview/commit split.

Commit always re-validates the submitted request against the current policy;
a prior preview is never trusted blindly. When the request names a
``preview_id`` the commit is bound to that record (which must exist, still be
previewed, and describe the same statement). Without one, commit builds a
fresh record and stores it, already committed, once execution succeeds.
"""

from __future__ import annotations

import asyncio
import time
import uuid
from datetime import UTC, datetime

from agentproxy.adapters._base import ExecutionAdapter, ExecutionResult
from agentproxy.errors import (
    AgentProxyError,
    PreviewAlreadyCommittedError,
    PreviewMismatchError,
)
from agentproxy.models import (
    CommitResponse,
    PreviewResponse,
    QueryRecord,
    RecordStatus,
    SqlRequest,
)
from agentproxy.policy import DEFAULT_DIALECT, ParsedQuery, PolicyConfig, run_policy
from agentproxy.querylog import log_decision
from agentproxy.store import QueryStore

DRY_RUN_WARNING = "Preview executed in dry-run mode; no database configured"
AUTO_LABELS = {"tool": "agentproxy"}


class QueryExecutor:
    def __init__(
        self,
        policy: PolicyConfig,
        *,
        store: QueryStore | None = None,
        adapter: ExecutionAdapter | None = None,
        dialect: str | None = DEFAULT_DIALECT,
        log: bool = True,
    ) -> None:
        self.policy = policy
        self.store = store if store is not None else QueryStore()
        self.adapter = adapter
        self.dialect = dialect
        self.log = log
        # Check-execute-flip of one commit must not interleave with another.
        self._commit_lock = asyncio.Lock()

    @property
    def dry_run(self) -> bool:
        return self.adapter is None

    def _warnings(self) -> list[str]:
        return [DRY_RUN_WARNING] if self.dry_run else []

    def evaluate(self, request: SqlRequest) -> ParsedQuery:
        """Run analyzer and evaluator. Pure: touches neither store nor adapter."""
        return run_policy(request.sql, request.context, self.policy, dialect=self.dialect)

    async def preview(self, request: SqlRequest) -> PreviewResponse:
        """Validate a statement and record it for a later commit."""
        t0 = time.monotonic()
        try:
            parsed = self.evaluate(request)
        except AgentProxyError as e:
            self._log_rejection("preview", request, e, t0)
            raise

        record = await self._record(request, parsed)
        self._log_allowed("preview", request, record, t0, rows_affected=0)
        return PreviewResponse(
            preview_id=record.id,
            operation=record.operation,
            tables=list(record.tables),
            rows_affected=0,
            warnings=self._warnings(),
        )

    async def commit(self, request: SqlRequest) -> CommitResponse:
        """Re-validate, execute through the adapter (if any), mark committed."""
        t0 = time.monotonic()
        try:
            parsed = self.evaluate(request)
            async with self._commit_lock:
                if request.preview_id is None:
                    record = self._new_record(request, parsed)
                else:
                    record = await self._claim(request)
                result: ExecutionResult | None = None
                if self.adapter is not None:
                    result = await self.adapter.execute(
                        record.sql, labels={**AUTO_LABELS, "preview_id": record.id}
                    )
                rows_affected = result.rows_affected if result is not None else 0
                if request.preview_id is None:
                    committed = await self._store_committed(record, rows_affected)
                else:
                    committed = await self.store.update_status(
                        record.id, RecordStatus.COMMITTED, rows_affected=rows_affected
                    )
        except AgentProxyError as e:
            self._log_rejection("commit", request, e, t0)
            raise

        self._log_allowed("commit", request, committed, t0, rows_affected=rows_affected)
        returns_rows = result is not None and result.returns_rows
        return CommitResponse(
            preview_id=committed.id,
            committed_at=committed.committed_at or datetime.now(UTC),
            rows_affected=rows_affected,
            warnings=self._warnings(),
            columns=result.columns if returns_rows else None,
            rows=result.rows if returns_rows else None,
        )

    async def get(self, record_id: str) -> QueryRecord:
        """Fetch a stored record. Unknown ids raise PreviewNotFoundError."""
        return await self.store.get(record_id)

    # -- internals --------------------------------------------------------------

    def _new_record(self, request: SqlRequest, parsed: ParsedQuery) -> QueryRecord:
        return QueryRecord(
            id=str(uuid.uuid4()),
            actor=request.context.actor,
            tenant_id=request.context.tenant_id,
            sql=request.sql.strip(),
            operation=parsed.operation.value,
            tables=list(parsed.tables),
            status=RecordStatus.PREVIEWED,
            created_at=datetime.now(UTC),
        )

    async def _record(self, request: SqlRequest, parsed: ParsedQuery) -> QueryRecord:
        record = self._new_record(request, parsed)
        await self.store.insert(record)
        return record

    async def _store_committed(self, record: QueryRecord, rows_affected: int) -> QueryRecord:
        # An id-less commit's record first enters the store already committed.
        record.status = RecordStatus.COMMITTED
        record.committed_at = datetime.now(UTC)
        record.rows_affected = rows_affected
        await self.store.insert(record)
        return record

    async def _claim(self, request: SqlRequest) -> QueryRecord:
        record = await self.store.get(request.preview_id)
        if record.status != RecordStatus.PREVIEWED:
            raise PreviewAlreadyCommittedError(
                f"Preview {record.id} was already committed"
            )
        mismatched = [
            name
            for name, stored, given in (
                ("sql", record.sql, request.sql.strip()),
                ("actor", record.actor, request.context.actor),
                ("tenant_id", record.tenant_id, request.context.tenant_id),
            )
            if stored != given
        ]
        if mismatched:
            raise PreviewMismatchError(
                f"Commit does not match preview {record.id} ({', '.join(mismatched)} differ)"
            )
        return record

    def _log_allowed(
        self,
        action: str,
        request: SqlRequest,
        record: QueryRecord,
        t0: float,
        *,
        rows_affected: int,
    ) -> None:
        if not self.log:
            return
        log_decision(
            action=action,
            sql=request.sql,
            actor=request.context.actor,
            tenant_id=request.context.tenant_id,
            allowed=True,
            operation=record.operation,
            tables=record.tables,
            preview_id=record.id,
            rows_affected=rows_affected,
            duration_ms=(time.monotonic() - t0) * 1000,
            dry_run=self.dry_run,
        )

    def _log_rejection(
        self, action: str, request: SqlRequest, error: AgentProxyError, t0: float
    ) -> None:
        if not self.log:
            return
        log_decision(
            action=action,
            sql=request.sql,
            actor=request.context.actor,
            tenant_id=request.context.tenant_id,
            allowed=False,
            preview_id=request.preview_id,
            code=str(error.diagnostic.code),
            error=error.message,
            duration_ms=(time.monotonic() - t0) * 1000,
            dry_run=self.dry_run,
        )
