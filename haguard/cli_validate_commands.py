"""Validation CLI command: the pre-deployment gate."""
from typing import Optional

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

# Module-level console instance (will be set by register function)
console: Console = Console()
err_console: Console = Console(stderr=True)

OUTPUT_FORMATS = ("text", "json")


def validate(
    config_dir: Optional[str] = typer.Option(
        None, "--config-dir", "-c", envvar="HAGUARD_CONFIG_DIR",
        help="Home Assistant configuration directory (corpus root)",
    ),
    settings_file: Optional[str] = typer.Option(
        None, "--settings", help="Settings file (defaults to haguard.yml in the corpus root)"
    ),
    output_format: str = typer.Option("text", "--format", "-f", help="Output format: text or json"),
    force: bool = typer.Option(False, "--force", help="Exit successfully even when errors block deployment"),
    ask: bool = typer.Option(False, "--ask", help="Ask whether to continue when errors are found"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose output"),
    log_file: Optional[str] = typer.Option(None, "--log-file", help="Path to log file"),
):
    """Check script, helper and dashboard references before deploying.

    Exit codes: 0 safe to deploy (or forced), 1 errors block deployment,
    2 the corpus or settings could not be read.

    Examples:
        haguard validate -c ./config
        haguard validate -c ./config --format json
        haguard validate -c ./config --ask
    """
    from haguard.cli_support import (
        confirm_action,
        handle_cli_error,
        print_error,
        print_warning,
        resolve_settings,
        setup_file_logging,
    )
    from haguard.core.reference_validator import validate as run_validation
    from haguard.models.errors import ConfigValidationError, CorpusUnreadable

    setup_file_logging(log_file=log_file, verbose=verbose)

    if output_format not in OUTPUT_FORMATS:
        print_error(console, f"Unknown format '{output_format}'. Use one of: {', '.join(OUTPUT_FORMATS)}")
        raise typer.Exit(2)

    # Keep stdout pure JSON; status lines and prompts go to stderr
    as_json = output_format == "json"
    status_console = err_console if as_json else console

    try:
        settings = resolve_settings(config_dir, settings_file)
        report = run_validation(settings)
    except CorpusUnreadable as e:
        handle_cli_error(e, status_console, verbose, exit_code=2, label="Corpus unreadable")
    except ConfigValidationError as e:
        handle_cli_error(e, status_console, verbose, exit_code=2)

    if as_json:
        typer.echo(report.to_json())
    else:
        _display_report(report)

    if report.is_safe:
        return

    count = len(report.errors)
    if force:
        print_warning(status_console, f"Continuing despite {count} blocking error(s) (--force)")
        return

    if ask and confirm_action(
        f"{count} error(s) block deployment. Continue anyway?", err=as_json
    ):
        print_warning(status_console, f"Continuing despite {count} blocking error(s)")
        return

    raise typer.Exit(1)


def _display_report(report):
    """Print findings followed by a per-check summary table."""
    from haguard.cli_support import print_error, print_success
    from haguard.models.report import Severity

    severity_labels = {
        Severity.ERROR: "[red]ERROR[/red]",
        Severity.WARNING: "[yellow]WARNING[/yellow]",
    }

    for finding in report.findings:
        where = f" {escape(str(finding.location))}" if finding.location else ""
        console.print(
            f"{severity_labels.get(finding.severity, finding.severity)}"
            f"[dim]{where}[/dim] {escape(finding.message)}"
        )

    summary_table = Table(show_header=True, header_style="bold")
    summary_table.add_column("Check")
    summary_table.add_column("Errors", justify="right")
    summary_table.add_column("Warnings", justify="right")
    for check, counts in report.summary().items():
        summary_table.add_row(check, str(counts[Severity.ERROR]), str(counts[Severity.WARNING]))

    console.print()
    console.print(summary_table)

    if report.is_safe and not report.warnings:
        print_success(console, "All references are valid - safe to deploy")
    elif report.is_safe:
        print_success(console, f"Safe to deploy ({len(report.warnings)} warning(s))")
    else:
        print_error(console, f"Unsafe to deploy: {len(report.errors)} error(s)")


def register_validate_commands(
    app: typer.Typer,
    shared_console: Console,
):
    """Register validation commands with the main Typer app.

    Args:
        app: Main Typer application
        shared_console: Shared Rich console instance
    """
    global console
    console = shared_console

    app.command(name="validate")(validate)
