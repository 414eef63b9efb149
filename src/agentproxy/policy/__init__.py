"""Policy engine: parse, classify, apply global and per-table rules."""

from __future__ import annotations

from agentproxy.errors import error_for
from agentproxy.models import QueryContext
from agentproxy.policy._types import Operation, ParsedQuery
from agentproxy.policy.access import TABLE_CHECKS
from agentproxy.policy.analyze import DEFAULT_DIALECT, analyze
from agentproxy.policy.config import (
    PolicyConfig,
    RequiredFilter,
    TablePolicy,
    load_policy,
    parse_policy,
)
from agentproxy.policy.safety import TENANT_BYPASS, check_mutation_without_where, check_tenant_filter

__all__ = [
    "DEFAULT_DIALECT",
    "Operation",
    "ParsedQuery",
    "PolicyConfig",
    "RequiredFilter",
    "TENANT_BYPASS",
    "TablePolicy",
    "analyze",
    "enforce_policy",
    "enforce_rules",
    "load_policy",
    "parse_policy",
    "run_policy",
]


def enforce_rules(parsed: ParsedQuery, context: QueryContext, policy: PolicyConfig) -> None:
    """Global rules: WHERE on mutations, tenant scoping."""
    for diag in (
        check_mutation_without_where(parsed),
        check_tenant_filter(
            parsed, tenant_id=context.tenant_id, tenant_column=policy.tenant_column
        ),
    ):
        if diag is not None:
            raise error_for(diag)


def enforce_policy(parsed: ParsedQuery, policy: PolicyConfig) -> None:
    """Per-table rules, tables in discovery order, first violation wins."""
    for table in parsed.tables:
        table_policy = policy.table_policy(table)
        if table_policy is None:
            continue
        for check in TABLE_CHECKS:
            diag = check(parsed, table, table_policy)
            if diag is not None:
                raise error_for(diag)


def run_policy(
    sql: str,
    context: QueryContext,
    policy: PolicyConfig,
    *,
    dialect: str | None = DEFAULT_DIALECT,
) -> ParsedQuery:
    """Run the full policy pipeline on a SQL string.

    Steps:
        1. Parse; exactly one statement (MultiStatementError, SqlParseError)
        2. Classify (UnsupportedStatementError for DDL and unknown kinds)
        3. Global rules (MissingWhereClauseError, MissingTenantFilterError)
        4. Per-table policy (OperationNotAllowedError,
           RequiredFilterMissingError, DeniedColumnError)

    Returns:
        The ParsedQuery of an approved statement. Rejections raise.
    """
    parsed = analyze(sql, dialect=dialect)
    enforce_rules(parsed, context, policy)
    enforce_policy(parsed, policy)
    return parsed
