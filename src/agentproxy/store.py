"""Query record store — process-lifetime registry of preview decisions.

A single map from preview id to QueryRecord behind an asyncio reader-writer
lock: any number of concurrent readers, one writer at a time, and every
mutation applied as one critical section. Callers only ever receive copies.

No persistence and no eviction: records live as long as the process.
"""

from __future__ import annotations

import asyncio
import contextlib
import dataclasses
from collections.abc import AsyncIterator
from datetime import UTC, datetime

from agentproxy.errors import PreviewAlreadyCommittedError, PreviewNotFoundError
from agentproxy.models import QueryRecord, RecordStatus


class ReadWriteLock:
    """Writer-preferring reader-writer lock for asyncio tasks."""

    def __init__(self) -> None:
        self._cond = asyncio.Condition()
        self._readers = 0
        self._writer = False
        self._waiting_writers = 0

    @contextlib.asynccontextmanager
    async def read(self) -> AsyncIterator[None]:
        async with self._cond:
            await self._cond.wait_for(lambda: not self._writer and not self._waiting_writers)
            self._readers += 1
        try:
            yield
        finally:
            async with self._cond:
                self._readers -= 1
                if self._readers == 0:
                    self._cond.notify_all()

    @contextlib.asynccontextmanager
    async def write(self) -> AsyncIterator[None]:
        async with self._cond:
            self._waiting_writers += 1
            try:
                await self._cond.wait_for(lambda: not self._writer and self._readers == 0)
            finally:
                self._waiting_writers -= 1
            self._writer = True
        try:
            yield
        finally:
            async with self._cond:
                self._writer = False
                self._cond.notify_all()


class QueryStore:
    def __init__(self) -> None:
        self._entries: dict[str, QueryRecord] = {}
        self._lock = ReadWriteLock()

    async def insert(self, record: QueryRecord) -> None:
        """Add a record. Ids are never overwritten."""
        async with self._lock.write():
            if record.id in self._entries:
                raise ValueError(f"query record {record.id} already exists")
            self._entries[record.id] = dataclasses.replace(record, tables=list(record.tables))

    async def get(self, record_id: str) -> QueryRecord:
        async with self._lock.read():
            record = self._entries.get(record_id)
            if record is None:
                raise PreviewNotFoundError(f"Query not found: {record_id}")
            return dataclasses.replace(record, tables=list(record.tables))

    async def update_status(
        self,
        record_id: str,
        status: RecordStatus,
        *,
        rows_affected: int | None = None,
    ) -> QueryRecord:
        """Move a record previewed -> committed. Any other transition fails."""
        async with self._lock.write():
            record = self._entries.get(record_id)
            if record is None:
                raise PreviewNotFoundError(f"Preview not found: {record_id}")
            if record.status != RecordStatus.PREVIEWED or status != RecordStatus.COMMITTED:
                raise PreviewAlreadyCommittedError(
                    f"Preview {record_id} cannot move from "
                    f"{record.status.value} to {status.value}"
                )
            record.status = status
            record.committed_at = datetime.now(UTC)
            record.rows_affected = rows_affected
            return dataclasses.replace(record, tables=list(record.tables))

    async def count(self) -> int:
        async with self._lock.read():
            return len(self._entries)
