"""
Estimate command for monkeyrouter CLI.

Estimates the token footprint and cost of a conversation.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Annotated, Any

import typer
from rich.console import Console
from rich.table import Table

from monkeyrouter.cli.commands.route import check_output_format
from monkeyrouter.core.config import load_history_file
from monkeyrouter.core.types import ResponseStrategy, TaskType
from monkeyrouter.utils.errors import MonkeyRouterError
from monkeyrouter.utils.tokens import TokenCounter, TokenEstimator

console = Console()
error_console = Console(stderr=True)


def _print_estimate_table(result: dict[str, Any]) -> None:
    table = Table(title="Token Estimate", show_header=True, header_style="bold cyan")
    table.add_column("Metric", style="cyan")
    table.add_column("Value", style="green")

    table.add_row("Method", "exact (tiktoken)" if result["exact"] else "heuristic")
    table.add_row("Messages", str(result["messages"]))
    table.add_row("Prompt Tokens", f"{result['prompt_tokens']:,}")
    table.add_row("Expected Response Tokens", f"{result['expected_response_tokens']:,}")
    table.add_row("Total Tokens", f"[bold]{result['total_tokens']:,}[/bold]")
    table.add_row("Model Limit", f"{result['model_limit']:,}")
    table.add_row("Suggested Chunk Size", f"{result['suggested_chunk_size']:,}")
    table.add_row("Estimated Cost", f"${result['estimated_cost']:.6f}")

    console.print(table)

    if result["approaching_context_limit"]:
        console.print()
        console.print("[yellow bold]Warnings:[/yellow bold]")
        console.print("  [yellow]! Conversation is approaching the model context limit[/yellow]")


def estimate(
    history_file: Annotated[
        Path,
        typer.Argument(help="Conversation file (JSON or YAML list of role/content messages)"),
    ],
    task_type: Annotated[
        str,
        typer.Option("--task-type", "-T", help="Task type: coding, analysis, creative, casual, general"),
    ] = TaskType.GENERAL.value,
    strategy: Annotated[
        str,
        typer.Option("--strategy", "-s", help="Response strategy (e.g. chain_of_thought)"),
    ] = ResponseStrategy.DIRECT_ANSWER.value,
    model_limit: Annotated[
        int,
        typer.Option("--model-limit", "-l", help="Model context window in tokens"),
    ] = 8192,
    price_per_token: Annotated[
        float,
        typer.Option("--price-per-token", "-p", help="USD per token"),
    ] = 0.0,
    exact: Annotated[
        bool,
        typer.Option("--exact", help="Count prompt tokens with tiktoken"),
    ] = False,
    model: Annotated[
        str | None,
        typer.Option("--model", "-m", help="Model name for tokenizer selection (with --exact)"),
    ] = None,
    output: Annotated[
        str,
        typer.Option("--output", "-o", help="Output format: text, json"),
    ] = "text",
) -> None:
    """
    Estimate tokens and cost for a conversation.

    Examples:
        monkeyrouter estimate chat.json
        monkeyrouter estimate chat.yaml --task-type coding --strategy code_generation
        monkeyrouter estimate chat.json --exact --model gpt-4o --output json
    """
    check_output_format(output)

    try:
        messages = load_history_file(history_file)
        if exact:
            token_estimate = TokenCounter().estimate_conversation_tokens(
                messages, task_type, strategy, model=model
            )
        else:
            token_estimate = TokenEstimator.estimate_conversation_tokens(
                messages, task_type, strategy
            )
        approaching = TokenEstimator.is_approaching_context_limit(token_estimate, model_limit)
        chunk_size = TokenEstimator.suggest_chunk_size(token_estimate.total_tokens, model_limit)
        cost = TokenEstimator.estimate_cost(token_estimate, price_per_token)
    except (MonkeyRouterError, OSError) as e:
        error_console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(code=1)

    result: dict[str, Any] = {
        **token_estimate.to_dict(),
        "messages": len(messages),
        "task_type": TaskType.parse(task_type).value,
        "response_strategy": strategy,
        "exact": exact,
        "model_limit": model_limit,
        "approaching_context_limit": approaching,
        "suggested_chunk_size": chunk_size,
        "estimated_cost": cost,
    }

    if output == "json":
        typer.echo(json.dumps(result, indent=2))
    else:
        _print_estimate_table(result)


__all__ = ["estimate"]
