"""Entity registry CLI commands."""
from typing import Optional

import typer
from rich.console import Console
from rich.table import Table

# Module-level console instance (will be set by register function)
console: Console = Console()


def entities(
    config_dir: Optional[str] = typer.Option(
        None, "--config-dir", "-c", envvar="HAGUARD_CONFIG_DIR",
        help="Home Assistant configuration directory (corpus root)",
    ),
    settings_file: Optional[str] = typer.Option(
        None, "--settings", help="Settings file (defaults to haguard.yml in the corpus root)"
    ),
    domain: Optional[str] = typer.Option(None, "--domain", "-d", help="Only show this domain"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose output"),
):
    """Show live entity ids from the entity registry, per domain.

    Examples:
        haguard entities -c ./config
        haguard entities -c ./config --domain input_boolean
    """
    from haguard.cli_support import handle_cli_error, print_info, resolve_settings
    from haguard.config.loader import load_corpus
    from haguard.core.registry_summary import summarize_registry
    from haguard.models.errors import ConfigValidationError, CorpusUnreadable

    try:
        corpus = load_corpus(resolve_settings(config_dir, settings_file))
    except CorpusUnreadable as e:
        handle_cli_error(e, console, verbose, exit_code=2, label="Corpus unreadable")
    except ConfigValidationError as e:
        handle_cli_error(e, console, verbose, exit_code=2)

    summaries = summarize_registry(corpus.registry, domain=domain)
    if not summaries:
        print_info(console, f"No entities found{f' in domain {domain}' if domain else ''}")
        return

    table = Table(title="Entity registry", show_header=True, header_style="bold")
    table.add_column("Domain", style="cyan")
    table.add_column("Enabled", justify="right")
    table.add_column("Disabled", justify="right")
    table.add_column("Examples")
    for summary in summaries:
        table.add_row(
            summary.domain,
            str(summary.enabled),
            str(summary.disabled),
            ", ".join(summary.examples),
        )
    console.print(table)


def register_registry_commands(
    app: typer.Typer,
    shared_console: Console,
):
    """Register entity registry commands with the main Typer app.

    Args:
        app: Main Typer application
        shared_console: Shared Rich console instance
    """
    global console
    console = shared_console

    app.command(name="entities")(entities)
