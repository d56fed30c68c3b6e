"""
Calibrate command for monkeyrouter CLI.

Finds a complexity threshold that routes a target share of labelled
sample queries to the strong tiers.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Annotated

import typer
from rich.console import Console
from rich.table import Table

from monkeyrouter.cli.commands.route import check_output_format, load_catalog
from monkeyrouter.core.calibration import CalibrationResult, RouterCalibrator
from monkeyrouter.utils.errors import MonkeyRouterError

console = Console()
error_console = Console(stderr=True)


def _print_result_table(result: CalibrationResult) -> None:
    table = Table(title="Calibration Result", show_header=True, header_style="bold cyan")
    table.add_column("Metric", style="cyan")
    table.add_column("Value", style="green")

    table.add_row("Optimal Threshold", f"[bold]{result.optimal_threshold:.3f}[/bold]")
    table.add_row("Target Strong %", f"{result.target_strong_percentage:.1%}")
    table.add_row("Achieved Strong %", f"{result.strong_percentage:.1%}")
    table.add_row("Accuracy", f"{result.accuracy:.1%}")
    table.add_row("Iterations", str(result.iterations))
    for tier, count in result.model_distribution.items():
        table.add_row(f"Routed to {tier}", str(count))

    console.print(table)


def calibrate(
    samples_file: Annotated[
        Path,
        typer.Argument(help="Labelled sample queries (JSON or YAML)"),
    ],
    target: Annotated[
        float,
        typer.Option("--target", help="Target share of queries routed to high/superior"),
    ] = 0.5,
    tolerance: Annotated[
        float,
        typer.Option("--tolerance", help="Accepted distance from the target share"),
    ] = 0.05,
    catalog_path: Annotated[
        Path | None,
        typer.Option("--catalog", "-c", help="Model catalog file (JSON or YAML)"),
    ] = None,
    output_file: Annotated[
        Path | None,
        typer.Option("--output-file", "-O", help="Write the result as JSON to this file"),
    ] = None,
    output: Annotated[
        str,
        typer.Option("--output", "-o", help="Output format: text, json"),
    ] = "text",
) -> None:
    """
    Calibrate the routing threshold against labelled samples.

    Examples:
        monkeyrouter calibrate sample_queries.yaml
        monkeyrouter calibrate samples.json --target 0.6 --output-file calibration.json
    """
    check_output_format(output)

    try:
        calibrator = RouterCalibrator.from_file(samples_file, catalog=load_catalog(catalog_path))
        result = calibrator.calibrate_threshold(target_strong_pct=target, tolerance=tolerance)
        if output_file:
            calibrator.save_results(result, output_file)
    except (MonkeyRouterError, OSError) as e:
        error_console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(code=1)

    if output == "json":
        typer.echo(json.dumps(result.to_dict(), indent=2))
    else:
        _print_result_table(result)
        if output_file:
            console.print(f"[green]Output written to:[/green] {output_file}")


__all__ = ["calibrate"]
