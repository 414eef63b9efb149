"""Global safety rules, applied whatever the table policies say."""

from __future__ import annotations

from agentproxy.diagnostics import Diagnostic, codes
from agentproxy.policy._types import Operation, ParsedQuery
from agentproxy.policy.predicates import filtered_columns, inserted_columns

TENANT_BYPASS = "*"


def check_mutation_without_where(parsed: ParsedQuery) -> Diagnostic | None:
    """Block UPDATE/DELETE statements that have no WHERE clause."""
    if not parsed.is_mutation or parsed.has_where:
        return None

    keyword = parsed.operation.value.upper()
    template = (
        "DELETE FROM ... WHERE <condition>"
        if parsed.operation == Operation.DELETE
        else "UPDATE ... SET ... WHERE <condition>"
    )
    return (
        Diagnostic.error(codes.MISSING_WHERE, f"UPDATE/DELETE requires a WHERE clause ({keyword})")
        .note("this would affect all rows in the table")
        .suggest(f"add a WHERE clause: {template}")
    )


def check_tenant_filter(
    parsed: ParsedQuery,
    *,
    tenant_id: str,
    tenant_column: str,
) -> Diagnostic | None:
    """Require a filter on the tenant column unless the caller bypasses with '*'."""
    if not parsed.tables or tenant_id == TENANT_BYPASS:
        return None

    column = tenant_column.lower()
    if column in filtered_columns(parsed.statement):
        return None
    if column in inserted_columns(parsed.statement):
        return None

    return (
        Diagnostic.error(
            codes.MISSING_TENANT_FILTER,
            f"Tenant filter missing; {tenant_column} must be enforced",
        )
        .note(f"tables: {', '.join(parsed.tables)}")
        .suggest(f"add a condition such as WHERE {tenant_column} = '{tenant_id}'")
    )
