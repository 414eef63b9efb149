"""CLI entry point: `agentproxy`."""

from __future__ import annotations

import click

from agentproxy.cli.policy import policy
from agentproxy.cli.schema import schema
from agentproxy.cli.serve import serve
from agentproxy.cli.validate import validate


@click.group()
@click.version_option(package_name="agentproxy")
def main() -> None:
    """agentproxy: policy-enforced SQL preview/commit for AI agents."""


main.add_command(serve)
main.add_command(validate)
main.add_command(policy)
main.add_command(schema)
