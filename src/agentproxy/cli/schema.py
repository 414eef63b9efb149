"""The `schema` command: list tables and columns of the configured database."""

from __future__ import annotations

import asyncio
import json

import click

from agentproxy.adapters import (
    ConnectionConfig,
    IntrospectionLevel,
    SchemaMetadata,
    connect_adapter,
)
from agentproxy.cli._shared import db_or_exit, format_option
from agentproxy.errors import AgentProxyError


async def _introspect(config: ConnectionConfig, level: IntrospectionLevel) -> SchemaMetadata:
    adapter = await connect_adapter(config)
    try:
        return await adapter.introspect(level)
    finally:
        await adapter.close()


@click.command("schema")
@click.option("--db", required=True, envvar="AGENTPROXY_DB", help="Database as type:key=val.")
@click.option("--tables-only", is_flag=True, help="Skip column details.")
@format_option
def schema(db: str, tables_only: bool, output_format: str) -> None:
    """Describe the tables (and columns) of a database."""
    config = db_or_exit(db)
    level = IntrospectionLevel.CATALOG if tables_only else IntrospectionLevel.STRUCTURE

    try:
        metadata = asyncio.run(_introspect(config, level))
    except AgentProxyError as e:
        if output_format == "json":
            click.echo(json.dumps({"error": str(e)}, indent=2))
        else:
            click.echo(f"error: {e}", err=True)
        raise SystemExit(1) from None

    if output_format == "json":
        click.echo(json.dumps(metadata.to_dict(), indent=2))
        return

    if not metadata.tables:
        click.echo("No tables found.")
    for t in metadata.tables:
        click.echo(f"{t.schema}.{t.name}" if t.schema else t.name)
        for c in t.columns:
            nullable = "NULL" if c.is_nullable else "NOT NULL"
            click.echo(f"  {c.name}  {c.data_type}  {nullable}")
