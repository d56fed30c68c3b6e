"""
Route command for monkeyrouter CLI.

Routes a query (optionally with a conversation history file) and prints
the routing decision.
"""

from __future__ import annotations

import json
import uuid
from pathlib import Path
from typing import Annotated

import typer
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from monkeyrouter.core.catalog import ModelCatalog
from monkeyrouter.core.config import get_config, load_history_file
from monkeyrouter.core.router import AdvancedRouter
from monkeyrouter.core.types import ConversationMessage, RouterConfig
from monkeyrouter.utils.errors import MonkeyRouterError
from monkeyrouter.utils.logging import LogContext

console = Console()
error_console = Console(stderr=True)

OUTPUT_FORMATS = ("text", "json")


def check_output_format(output: str) -> None:
    """Exit with an error for unknown --output values."""
    if output not in OUTPUT_FORMATS:
        error_console.print(
            f"[red]Error:[/red] Unknown output format '{output}' "
            f"(expected one of: {', '.join(OUTPUT_FORMATS)})"
        )
        raise typer.Exit(code=1)


def load_catalog(catalog_path: Path | None = None) -> ModelCatalog:
    """Catalog from --catalog, else from the active configuration."""
    config = get_config()
    if catalog_path is None:
        return config.build_catalog()
    return ModelCatalog.from_file(catalog_path).with_tiers(config.tiers.overrides())


def load_router(threshold: float | None = None, catalog_path: Path | None = None) -> AdvancedRouter:
    """Router from the active configuration with CLI overrides applied."""
    config = get_config()
    if threshold is None:
        threshold = config.routing.threshold
    return AdvancedRouter(load_catalog(catalog_path), threshold=threshold)


def load_history(history_file: Path | None) -> list[ConversationMessage]:
    return load_history_file(history_file) if history_file else []


def _print_decision(decision: RouterConfig) -> None:
    """Print a routing decision as a table plus explanation panel."""
    table = Table(title="Routing Decision", show_header=True, header_style="bold cyan")
    table.add_column("Field", style="cyan")
    table.add_column("Value", style="green")

    table.add_row("Tier", f"[bold]{decision.tier.value}[/bold]")
    table.add_row("Model", decision.model.id)
    table.add_row("Max Tokens", str(decision.max_tokens))
    table.add_row("Temperature", f"{decision.temperature:.2f}")
    table.add_row("Strategy", decision.response_strategy.value)
    table.add_row("Task Type", decision.task_type.value if decision.task_type else "-")
    table.add_row(
        "Question Type", decision.question_type.value if decision.question_type else "-"
    )

    console.print(table)
    console.print()
    console.print(
        Panel(
            decision.routing_explanation,
            title="[bold]Explanation[/bold]",
            expand=False,
        )
    )


def route(
    query: Annotated[str, typer.Argument(help="Query to route")],
    history_file: Annotated[
        Path | None,
        typer.Option("--history", "-H", help="Conversation history file (JSON or YAML)"),
    ] = None,
    threshold: Annotated[
        float | None,
        typer.Option("--threshold", "-t", help="Complexity threshold (default from config)"),
    ] = None,
    catalog_path: Annotated[
        Path | None,
        typer.Option("--catalog", "-c", help="Model catalog file (JSON or YAML)"),
    ] = None,
    output: Annotated[
        str,
        typer.Option("--output", "-o", help="Output format: text, json"),
    ] = "text",
) -> None:
    """
    Route a query to a model tier.

    Examples:
        monkeyrouter route "How do I use React hooks with TypeScript?"
        monkeyrouter route "Next message" --history chat.json --output json
    """
    check_output_format(output)

    try:
        router = load_router(threshold, catalog_path)
        history = load_history(history_file)
        with LogContext(request_id=uuid.uuid4().hex[:8], command="route"):
            decision = router.route(query, history)
    except (MonkeyRouterError, OSError) as e:
        error_console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(code=1)

    if output == "json":
        typer.echo(json.dumps(decision.to_dict(), indent=2))
    else:
        _print_decision(decision)


__all__ = ["route", "load_router", "load_catalog", "load_history", "check_output_format"]
