"""Agent-tool binding for ProxyService (MCP via FastMCP).

Tools return the same documents as the HTTP routes; rejections come back as
``{"ok": false, "error": ..., "code": ...}`` instead of raising, so agents
can read the reason and correct the statement.
"""

from __future__ import annotations

from mcp.server.fastmcp import FastMCP

from agentproxy.errors import AgentProxyError
from agentproxy.schemas import QueryIdBody, SqlBody
from agentproxy.service import ProxyService, error_document

INSTRUCTIONS = (
    "agentproxy exposes SQL preview/commit with policy enforcement. "
    "Call sql_preview first; commit the same statement (optionally with its "
    "preview_id) through sql_commit."
)


def create_mcp(service: ProxyService) -> FastMCP:
    mcp = FastMCP("agentproxy", instructions=INSTRUCTIONS)

    @mcp.tool(
        name="sql_preview",
        annotations={"title": "Preview SQL", "readOnlyHint": True},
    )
    async def sql_preview(params: SqlBody) -> dict:
        """Preview SQL with policy enforcement. Nothing is executed."""
        try:
            return await service.preview(params.to_request())
        except AgentProxyError as e:
            return error_document(e)

    @mcp.tool(
        name="sql_commit",
        annotations={"title": "Commit SQL", "readOnlyHint": False, "destructiveHint": True},
    )
    async def sql_commit(params: SqlBody) -> dict:
        """Re-validate and execute SQL, marking its preview committed."""
        try:
            return await service.commit(params.to_request())
        except AgentProxyError as e:
            return error_document(e)

    @mcp.tool(name="queries_get", annotations={"title": "Get query record", "readOnlyHint": True})
    async def queries_get(params: QueryIdBody) -> dict:
        """Get stored query metadata by preview id."""
        try:
            return await service.get_query(params.id)
        except AgentProxyError as e:
            return error_document(e)

    @mcp.tool(
        name="policy_describe", annotations={"title": "Describe policy", "readOnlyHint": True}
    )
    async def policy_describe() -> dict:
        """Describe the active policy config."""
        return service.describe_policy()

    @mcp.tool(
        name="schema_describe", annotations={"title": "Describe schema", "readOnlyHint": True}
    )
    async def schema_describe() -> dict:
        """Describe database tables and columns."""
        try:
            return await service.describe_schema()
        except AgentProxyError as e:
            return error_document(e)

    return mcp
