"""Per-table policy rules: allowed operations, required filters, denied columns."""

from __future__ import annotations

from agentproxy.diagnostics import Diagnostic, codes
from agentproxy.policy._types import ParsedQuery
from agentproxy.policy.config import TablePolicy
from agentproxy.policy.predicates import filtered_columns, inserted_columns, referenced_columns


def check_operation_allowed(
    parsed: ParsedQuery, table: str, policy: TablePolicy
) -> Diagnostic | None:
    if policy.allows(parsed.operation):
        return None
    allowed = ", ".join(op.value for op in policy.allow_ops)
    return (
        Diagnostic.error(
            codes.OPERATION_NOT_ALLOWED,
            f"Operation '{parsed.operation.value}' is not allowed for table '{table}'",
        )
        .note(f"allowed operations: {allowed}")
    )


def check_required_filters(
    parsed: ParsedQuery, table: str, policy: TablePolicy
) -> Diagnostic | None:
    """Every required filter needs a predicate on its column.

    A filter with a configured operator is only satisfied by a predicate
    using that operator.

    INSERT has no filter concept; listing the column in the insert column
    list satisfies the requirement.
    """
    if not policy.required_filters:
        return None

    filtered = filtered_columns(parsed.statement)
    inserted = set(inserted_columns(parsed.statement))
    for required in policy.required_filters:
        column = required.column.lower()
        if column in inserted:
            continue
        operators = filtered.get(column, ())
        if operators and (required.operator is None or required.operator in operators):
            continue
        diag = Diagnostic.error(
            codes.REQUIRED_FILTER_MISSING,
            f"Missing required filter on column '{required.column}'",
        )
        if required.operator is None:
            diag.note(f"table '{table}' requires a filter on {required.column}")
        else:
            diag.note(
                f"table '{table}' requires {required.column} {required.operator.upper()} <value>"
            )
        if operators:
            used = ", ".join(sorted(op.upper() for op in operators))
            diag.note(f"{required.column} is filtered with {used} instead")
        return diag
    return None


def check_denied_columns(
    parsed: ParsedQuery, table: str, policy: TablePolicy
) -> Diagnostic | None:
    if not policy.deny_columns:
        return None

    referenced = referenced_columns(parsed.statement)
    denied = [c for c in policy.deny_columns if c.lower() in referenced]
    if not denied:
        return None
    return (
        Diagnostic.error(
            codes.DENIED_COLUMN,
            f"Query references denied columns: {', '.join(denied)}",
        )
        .note(f"table '{table}' never exposes these columns")
    )


TABLE_CHECKS = (check_operation_allowed, check_required_filters, check_denied_columns)
