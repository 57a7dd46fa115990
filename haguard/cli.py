#!/usr/bin/env python3
"""haguard CLI - reference checks for Home Assistant configuration."""

import typer
from rich.console import Console

from haguard.cli_registry_commands import register_registry_commands
from haguard.cli_validate_commands import register_validate_commands
from haguard.core.logger import get_logger

app = typer.Typer(
    name="haguard",
    help="""haguard - catch dangling references before you deploy

Checks scripts, helpers and dashboards in a Home Assistant config repo.

Quick start:
  haguard validate -c ./config          # Errors block deployment
  haguard validate -c ./config -f json  # Report for CI
  haguard entities -c ./config          # What the registry knows
""",
    add_completion=False,
)

console = Console()
logger = get_logger(__name__)

register_validate_commands(app, console)
register_registry_commands(app, console)

if __name__ == "__main__":
    app()
