"""Wire schemas shared by the HTTP and agent-tool bindings."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from agentproxy.models import QueryContext, SqlRequest


class ContextBody(BaseModel):
    actor: str = Field(..., description="Free-form identity of the calling agent")
    tenant_id: str = Field(
        ..., description="Tenant the statement must be scoped to; '*' disables tenant checks"
    )


class SqlBody(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    sql: str = Field(..., min_length=1, description="Exactly one SQL statement")
    context: ContextBody
    preview_id: str | None = Field(
        default=None, description="Bind a commit to this earlier preview"
    )

    def to_request(self) -> SqlRequest:
        return SqlRequest(
            sql=self.sql,
            context=QueryContext(actor=self.context.actor, tenant_id=self.context.tenant_id),
            preview_id=self.preview_id,
        )


class QueryIdBody(BaseModel):
    id: str = Field(..., min_length=1, description="Preview id returned by sql_preview")
