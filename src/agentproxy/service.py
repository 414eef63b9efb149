"""ProxyService — the operations the transport bindings expose.

Each operation returns a JSON-ready document on success and raises an
``AgentProxyError`` on rejection. ``error_document`` and ``status_for`` turn
those errors into the wire shape and response class.
"""

from __future__ import annotations

import asyncio

from agentproxy.adapters import (
    ConnectionConfig,
    ExecutionAdapter,
    IntrospectionLevel,
    connect_adapter,
)
from agentproxy.diagnostics.render import render_json
from agentproxy.errors import AgentProxyError, BackendUnavailableError, ErrorCategory
from agentproxy.executor import QueryExecutor
from agentproxy.models import SqlRequest
from agentproxy.policy import DEFAULT_DIALECT, PolicyConfig

_STATUS_FOR_CATEGORY = {
    ErrorCategory.CLIENT: 400,
    ErrorCategory.NOT_FOUND: 404,
    ErrorCategory.SERVER: 502,
    ErrorCategory.CONFIG: 500,
}


def error_document(error: AgentProxyError) -> dict[str, object]:
    rendered = render_json(error.diagnostic)
    doc: dict[str, object] = {"ok": False, "error": error.message, "code": rendered["code"]}
    if rendered["notes"]:
        doc["notes"] = list(rendered["notes"])
    if "help" in rendered:
        doc["help"] = rendered["help"]
    return doc


def status_for(error: AgentProxyError) -> int:
    if isinstance(error, BackendUnavailableError):
        return 503
    return _STATUS_FOR_CATEGORY[error.category]


class ProxyService:
    """Owns the executor, its store and (optionally) a database connection.

    The adapter is connected on ``start()``, inside the serving event loop.
    Operations call ``start()`` themselves, so an unstarted service works too.
    """

    def __init__(
        self,
        policy: PolicyConfig,
        *,
        db: ConnectionConfig | None = None,
        adapter: ExecutionAdapter | None = None,
        dialect: str | None = None,
        log: bool = True,
    ) -> None:
        self.policy = policy
        self._db = db
        self._dialect = dialect
        self._started = adapter is not None
        self._start_lock = asyncio.Lock()
        self.executor = QueryExecutor(
            policy,
            adapter=adapter,
            dialect=dialect or (adapter.dialect() if adapter else DEFAULT_DIALECT),
            log=log,
        )

    async def start(self) -> None:
        if self._started or self._db is None:
            return
        async with self._start_lock:
            if self._started:
                return
            adapter = await connect_adapter(self._db)
            self.executor.adapter = adapter
            if self._dialect is None:
                self.executor.dialect = adapter.dialect()
            self._started = True

    async def close(self) -> None:
        adapter = self.executor.adapter
        if adapter is not None:
            await adapter.close()

    async def preview(self, request: SqlRequest) -> dict[str, object]:
        await self.start()
        response = await self.executor.preview(request)
        return response.to_dict()

    async def commit(self, request: SqlRequest) -> dict[str, object]:
        await self.start()
        response = await self.executor.commit(request)
        return response.to_dict()

    async def get_query(self, record_id: str) -> dict[str, object]:
        record = await self.executor.get(record_id)
        return record.to_dict()

    def describe_policy(self) -> dict[str, object]:
        return self.policy.to_dict()

    async def describe_schema(self) -> dict[str, object]:
        await self.start()
        adapter = self.executor.adapter
        if adapter is None:
            raise BackendUnavailableError("Schema introspection needs a configured database")
        metadata = await adapter.introspect(IntrospectionLevel.STRUCTURE)
        return metadata.to_dict()
