"""The `validate` command: check SQL against a policy without recording or executing."""

from __future__ import annotations

import json

import click

from agentproxy.cli._shared import emit_error, format_option, policy_option, policy_or_exit
from agentproxy.errors import AgentProxyError
from agentproxy.models import QueryContext
from agentproxy.policy import DEFAULT_DIALECT, run_policy


@click.command()
@click.argument("sql")
@policy_option
@click.option("--tenant", "tenant_id", required=True, help="Tenant id ('*' disables tenant checks).")
@click.option("--actor", default="cli", show_default=True, help="Caller identity.")
@click.option("--dialect", default=DEFAULT_DIALECT, show_default=True, help="SQL dialect.")
@format_option
def validate(
    sql: str,
    policy_path: str,
    tenant_id: str,
    actor: str,
    dialect: str,
    output_format: str,
) -> None:
    """Validate SQL through the policy engine without executing."""
    policy = policy_or_exit(policy_path)
    context = QueryContext(actor=actor, tenant_id=tenant_id)
    try:
        parsed = run_policy(sql, context, policy, dialect=dialect)
    except AgentProxyError as e:
        emit_error(e, output_format)
        raise SystemExit(1) from None

    if output_format == "json":
        click.echo(json.dumps({
            "ok": True,
            "operation": parsed.operation.value,
            "tables": parsed.tables,
            "has_where": parsed.has_where,
        }, indent=2))
    else:
        tables = ", ".join(parsed.tables) or "-"
        click.echo(f"ok: {parsed.operation.value} on {tables}")
