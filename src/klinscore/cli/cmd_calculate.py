"""Calculate command: score a set of inputs against one definition."""

from pathlib import Path
from typing import List

import typer
from rich.table import Table

from klinscore.cli._app import app
from klinscore.cli._common import build_inputs, get_config, get_registry, setup_logging
from klinscore.cli._console import console, output_json, print_err
from klinscore.engine.calculator import ScoreCalculator
from klinscore.errors import CalculationError, ScoreNotFoundError


@app.command("calculate", help="Calculate a score from field=value inputs.")
def calculate_cmd(
    ctx: typer.Context,
    score_id: str = typer.Argument(..., help="Score id (definition file name without extension)"),
    inputs: List[str] = typer.Option(None, "--input", "-i", help="Input as field=value (repeatable)"),
    inputs_file: Path = typer.Option(None, "--inputs-file", "-f", help="YAML/JSON mapping of field to value"),
):
    """Calculate one score and print the total, breakdown and interpretation."""
    setup_logging(verbose=ctx.obj["verbose"], quiet=ctx.obj["quiet"])
    config = get_config(ctx)
    calculator = ScoreCalculator(get_registry(ctx), warn_on_unknown_inputs=config.warn_on_unknown_inputs)

    try:
        prepared = calculator.resolve(score_id)
    except ScoreNotFoundError as e:
        print_err(str(e))
        raise SystemExit(1)

    try:
        values = build_inputs(prepared.definition, inputs, inputs_file)
    except ValueError as e:
        print_err(str(e))
        raise SystemExit(1)

    try:
        result = calculator.calculate(prepared, values)
    except CalculationError as e:
        if not output_json({"score_id": score_id, "error": type(e).__name__, "field": e.field, "message": str(e)}, ctx=ctx):
            print_err(str(e))
        raise SystemExit(1)

    if output_json(result.model_dump(mode="json"), ctx=ctx):
        return

    table = Table(title=f"{result.score_name}", show_lines=False)
    table.add_column("Field")
    table.add_column("Value")
    table.add_column("Points", justify="right")
    for c in result.contributions:
        value = str(c.value) if c.provided else "-"
        table.add_row(c.label or c.field, value, str(c.points))
    console.print(table)

    console.print(f"  Total: [bold]{result.total}[/bold]")
    band = result.matched_band
    if band is None:
        console.print("  Risk: [dim]unclassified (no interpretation band matches)[/dim]")
        return
    console.print(f"  Risk: [{band.risk_level.color}]{band.risk}[/] ({band.risk_level.value})")
    if band.recommendation:
        console.print(f"  Recommendation: {band.recommendation}", markup=False)
    if band.details:
        console.print(f"  {band.details}", markup=False)
