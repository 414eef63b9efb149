"""The `serve` command: run the HTTP service or the MCP stdio server."""

from __future__ import annotations

import click

from agentproxy.cli._shared import db_option, db_or_exit, policy_option, policy_or_exit
from agentproxy.querylog import cleanup_old_logs
from agentproxy.service import ProxyService


def _split_listen(value: str) -> tuple[str, int]:
    host, sep, port = value.rpartition(":")
    if not sep or not port.isdigit():
        raise click.BadParameter(f"expected host:port, got '{value}'", param_hint="'--listen'")
    return host or "127.0.0.1", int(port)


@click.command()
@policy_option
@db_option
@click.option(
    "--listen",
    default="127.0.0.1:3000",
    show_default=True,
    envvar="AGENTPROXY_LISTEN",
    help="HTTP listen address.",
)
@click.option("--mcp-stdio", is_flag=True, help="Serve the MCP tools over stdio instead of HTTP.")
@click.option("--dialect", default=None, help="SQL dialect (defaults to the database's).")
@click.option("--no-log", is_flag=True, help="Do not write the JSONL decision log.")
def serve(
    policy_path: str,
    db: str | None,
    listen: str,
    mcp_stdio: bool,
    dialect: str | None,
    no_log: bool,
) -> None:
    """Serve preview/commit with policy enforcement."""
    policy = policy_or_exit(policy_path)
    config = db_or_exit(db)
    if not no_log:
        cleanup_old_logs()

    service = ProxyService(policy, db=config, dialect=dialect, log=not no_log)

    if mcp_stdio:
        from agentproxy.mcp_server import create_mcp

        create_mcp(service).run(transport="stdio")
        return

    host, port = _split_listen(listen)
    import uvicorn

    from agentproxy.app import create_app

    target = f"{config.db_type.value}" if config else "none (dry-run)"
    click.echo(f"agentproxy listening on http://{host}:{port} (database: {target})", err=True)
    uvicorn.run(create_app(service), host=host, port=port)
