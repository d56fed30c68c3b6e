"""
Main monkeyrouter CLI application.

Provides the entry point for the monkeyrouter command-line interface
with subcommands for routing, analysis, estimation and calibration.
"""

from __future__ import annotations

import json
import sys
from pathlib import Path
from typing import Annotated

import typer
from rich.console import Console
from rich.table import Table

from monkeyrouter.cli.commands import analyze, calibrate, estimate, route
from monkeyrouter.cli.commands.route import check_output_format, load_catalog
from monkeyrouter.core.config import LoggingConfig, get_config
from monkeyrouter.utils.errors import MonkeyRouterError
from monkeyrouter.utils.logging import setup_logging

# =============================================================================
# CLI Application Setup
# =============================================================================

app = typer.Typer(
    name="monkeyrouter",
    help="monkeyrouter CLI - Rule-based model tier routing",
    add_completion=False,
    rich_markup_mode="rich",
    pretty_exceptions_enable=True,
    pretty_exceptions_show_locals=False,
)

console = Console()
error_console = Console(stderr=True)

app.command()(route.route)
app.command()(analyze.analyze)
app.command()(estimate.estimate)
app.command()(calibrate.calibrate)


# =============================================================================
# Version and Global Options
# =============================================================================


def _get_version() -> str:
    """Get package version."""
    from monkeyrouter import __version__

    return __version__


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        console.print(f"[bold blue]monkeyrouter[/bold blue] version [green]{_get_version()}[/green]")
        raise typer.Exit()


@app.callback()
def main(
    version: Annotated[
        bool | None,
        typer.Option(
            "--version",
            "-V",
            help="Show version and exit",
            callback=version_callback,
            is_eager=True,
        ),
    ] = None,
    log_level: Annotated[
        str | None,
        typer.Option(
            "--log-level", help="Log level: DEBUG, INFO, WARNING, ERROR (default from config)"
        ),
    ] = None,
    log_json: Annotated[
        bool,
        typer.Option("--log-json", help="Emit JSON log lines on stderr"),
    ] = False,
) -> None:
    """
    monkeyrouter - Rule-based model tier routing.

    Picks a model tier (low / mid / high / superior), token budget,
    temperature and response strategy for a query and its history.

    Examples:
        monkeyrouter route "How do I use React hooks with TypeScript?"
        monkeyrouter analyze "Compare quicksort and heapsort" --output json
        monkeyrouter estimate chat.json --task-type coding
        monkeyrouter calibrate sample_queries.yaml --target 0.5
    """
    try:
        settings = get_config().logging
    except MonkeyRouterError:
        # Commands report the configuration error themselves
        settings = LoggingConfig()

    setup_logging(
        level=log_level or settings.level,
        json_format=log_json or settings.json_format,
        log_file=settings.log_file,
    )


# =============================================================================
# Additional Commands
# =============================================================================


@app.command()
def tiers(
    catalog_path: Annotated[
        Path | None,
        typer.Option("--catalog", "-c", help="Model catalog file (JSON or YAML)"),
    ] = None,
    output: Annotated[
        str,
        typer.Option("--output", "-o", help="Output format: text, json"),
    ] = "text",
) -> None:
    """List the tier -> model mapping."""
    check_output_format(output)

    try:
        resolved = load_catalog(catalog_path).resolve_tiers()
    except (MonkeyRouterError, OSError) as e:
        error_console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(code=1)

    if output == "json":
        typer.echo(
            json.dumps({tier.value: model.to_dict() for tier, model in resolved.items()}, indent=2)
        )
        return

    table = Table(title="Model Tiers", show_header=True, header_style="bold cyan")
    table.add_column("Tier", style="cyan")
    table.add_column("Model", style="green")
    table.add_column("Provider")
    table.add_column("Context")
    table.add_column("Cost / Token")

    for tier, model in resolved.items():
        table.add_row(
            tier.value,
            model.id,
            model.provider,
            f"{model.context_window:,}",
            f"${model.cost_per_token:.6f}",
        )

    console.print()
    console.print(table)
    console.print()


@app.command()
def config(
    output: Annotated[
        str,
        typer.Option("--output", "-o", help="Output format: text, json"),
    ] = "text",
) -> None:
    """Display current configuration."""
    check_output_format(output)

    try:
        settings = get_config()
    except MonkeyRouterError as e:
        error_console.print(f"[red]Error loading configuration:[/red] {e}")
        raise typer.Exit(code=1)

    if output == "json":
        typer.echo(json.dumps(settings.to_dict(), indent=2))
        return

    table = Table(title="monkeyrouter Configuration", show_header=True, header_style="bold cyan")
    table.add_column("Setting", style="cyan")
    table.add_column("Value", style="green")

    table.add_row("Threshold", str(settings.routing.threshold))
    table.add_row("Catalog", settings.catalog_path or "built-in")
    for tier_name, model_id in settings.to_dict()["tiers"].items():
        table.add_row(f"Tier {tier_name}", model_id or "[dim]catalog default[/dim]")
    table.add_row("Log Level", settings.logging.level)
    table.add_row("Log JSON", str(settings.logging.json_format))
    table.add_row("Log File", settings.logging.log_file or "stderr")

    console.print()
    console.print(table)
    console.print()


# =============================================================================
# Entry Point
# =============================================================================


def cli() -> None:
    """Entry point for the CLI."""
    try:
        app()
    except KeyboardInterrupt:
        console.print("\n[yellow]Interrupted by user[/yellow]")
        sys.exit(130)


if __name__ == "__main__":
    cli()


__all__ = ["app", "cli", "main"]
