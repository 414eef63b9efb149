"""Shared helpers for CLI commands."""

from __future__ import annotations

import json

import click

from agentproxy.adapters import ConnectionConfig, parse_db
from agentproxy.errors import AgentProxyError, ConfigError
from agentproxy.policy import PolicyConfig, load_policy
from agentproxy.service import error_document

policy_option = click.option(
    "--policy",
    "policy_path",
    required=True,
    envvar="AGENTPROXY_POLICY",
    type=click.Path(dir_okay=False),
    help="Policy file (YAML or JSON).",
)

db_option = click.option(
    "--db",
    default=None,
    envvar="AGENTPROXY_DB",
    help="Database as type:key=val (duckdb:path=x.db, sqlite:path=x.db, postgres:dsn=...).",
)

format_option = click.option(
    "--format",
    "output_format",
    type=click.Choice(["json", "text"]),
    default="json",
    help="Output format.",
)


def policy_or_exit(path: str) -> PolicyConfig:
    """Load the policy file. A broken policy is fatal."""
    try:
        return load_policy(path)
    except ConfigError as e:
        click.echo(f"error: {e}", err=True)
        raise SystemExit(1) from e


def db_or_exit(value: str | None) -> ConnectionConfig | None:
    if value is None:
        return None
    try:
        return parse_db(value)
    except ConfigError as e:
        click.echo(f"error: {e}", err=True)
        raise SystemExit(1) from e


def emit_error(error: AgentProxyError, output_format: str) -> None:
    if output_format == "json":
        click.echo(json.dumps(error_document(error), indent=2))
    else:
        from agentproxy.diagnostics.render import render_text

        click.echo(render_text(error.diagnostic), err=True)
