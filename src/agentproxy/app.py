"""HTTP binding for ProxyService (FastAPI).

Routes:
    POST /sql/preview     validate + record
    POST /sql/commit      re-validate + execute + mark committed
    GET  /queries/{id}    fetch a stored record
    GET  /policy          the loaded policy, verbatim
    GET  /schema          database introspection
"""

from __future__ import annotations

from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from agentproxy import __version__
from agentproxy.errors import AgentProxyError
from agentproxy.schemas import SqlBody
from agentproxy.service import ProxyService, error_document, status_for


def create_app(service: ProxyService) -> FastAPI:
    @asynccontextmanager
    async def lifespan(app: FastAPI):
        await service.start()
        yield
        await service.close()

    app = FastAPI(title="agentproxy", version=__version__, lifespan=lifespan)
    app.state.service = service

    @app.exception_handler(AgentProxyError)
    async def handle_agentproxy_error(request: Request, exc: AgentProxyError) -> JSONResponse:
        return JSONResponse(status_code=status_for(exc), content=error_document(exc))

    @app.post("/sql/preview")
    async def preview_sql(body: SqlBody) -> dict:
        return await service.preview(body.to_request())

    @app.post("/sql/commit")
    async def commit_sql(body: SqlBody) -> dict:
        return await service.commit(body.to_request())

    @app.get("/queries/{query_id}")
    async def get_query(query_id: str) -> dict:
        return await service.get_query(query_id)

    @app.get("/policy")
    async def describe_policy() -> dict:
        return service.describe_policy()

    @app.get("/schema")
    async def describe_schema() -> dict:
        return await service.describe_schema()

    return app
