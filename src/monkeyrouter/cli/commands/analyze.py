"""
Analyze command for monkeyrouter CLI.

Prints the features the router extracts from a query without routing it.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Annotated

import typer
from rich.console import Console
from rich.table import Table

from monkeyrouter.cli.commands.route import check_output_format, load_history
from monkeyrouter.core.analyzer import QueryAnalysis, analyze_query
from monkeyrouter.utils.errors import MonkeyRouterError

console = Console()
error_console = Console(stderr=True)


def _print_analysis_table(analysis: QueryAnalysis) -> None:
    """Print analysis in a formatted table."""
    table = Table(title="Query Analysis", show_header=True, header_style="bold cyan")
    table.add_column("Feature", style="cyan")
    table.add_column("Value", style="green")

    complexity = analysis.complexity
    complexity_color = "green" if complexity < 0.4 else "yellow" if complexity < 0.7 else "red"
    table.add_row("Complexity", f"[{complexity_color}]{complexity:.2f}[/{complexity_color}]")
    table.add_row("Task Type", analysis.task_type.value)
    table.add_row("Question Type", analysis.question_type.value)
    table.add_row(
        "Tech Stack",
        ", ".join(t.value for t in analysis.ordered_tech_stack) or "none",
    )
    table.add_row("Tech Multiplier", f"{analysis.tech_stack_multiplier:.3f}")
    table.add_row("Code Complexity", f"{analysis.code_complexity:.2f}")
    table.add_row(
        "Code Indicators",
        ", ".join(sorted(i.value for i in analysis.code_indicators)) or "none",
    )
    table.add_row("Weighted Code Score", f"{analysis.weighted_code_score:.2f}")
    table.add_row("Context Length", f"{analysis.context_length:,} chars")
    table.add_row("History Messages", str(analysis.history_length))
    table.add_row("Rapid Exchange", "yes" if analysis.rapid_exchange else "no")
    table.add_row("Explanation Requested", "yes" if analysis.explanation_requested else "no")

    console.print(table)


def analyze(
    query: Annotated[str, typer.Argument(help="Query to analyze")],
    history_file: Annotated[
        Path | None,
        typer.Option("--history", "-H", help="Conversation history file (JSON or YAML)"),
    ] = None,
    output: Annotated[
        str,
        typer.Option("--output", "-o", help="Output format: text, json"),
    ] = "text",
) -> None:
    """
    Analyze a query without routing it.

    Shows task and question classification, complexity scores, detected
    tech stack and code indicators, and history flags.

    Examples:
        monkeyrouter analyze "Compare quicksort and heapsort"
        monkeyrouter analyze "Why?" --history chat.json --output json
    """
    check_output_format(output)

    try:
        history = load_history(history_file)
    except (MonkeyRouterError, OSError) as e:
        error_console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(code=1)

    analysis = analyze_query(query, history)

    if output == "json":
        typer.echo(json.dumps(analysis.to_dict(), indent=2))
    else:
        _print_analysis_table(analysis)


__all__ = ["analyze"]
