"""The `policy` command group: inspect a policy file."""

from __future__ import annotations

import json

import click

from agentproxy.cli._shared import format_option, policy_option, policy_or_exit


@click.group("policy")
def policy() -> None:
    """Inspect policy files."""


@policy.command("show")
@policy_option
@format_option
def show(policy_path: str, output_format: str) -> None:
    """Load a policy file and print it as the service would describe it."""
    config = policy_or_exit(policy_path)
    if output_format == "json":
        click.echo(json.dumps(config.to_dict(), indent=2))
        return

    click.echo(f"tenant column: {config.tenant_column}")
    if not config.tables:
        click.echo("No table policies.")
    for name, table in config.tables.items():
        click.echo(name)
        ops = ", ".join(op.value for op in table.allow_ops) or "any"
        click.echo(f"  allow_ops: {ops}")
        for f in table.required_filters:
            click.echo(f"  required filter: {f.column} {f.operator or '(any)'}")
        if table.deny_columns:
            click.echo(f"  deny_columns: {', '.join(table.deny_columns)}")
