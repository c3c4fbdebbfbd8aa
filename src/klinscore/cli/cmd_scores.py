"""Score catalogue commands: list and show."""

import typer

from klinscore.cli._app import app
from klinscore.cli._common import get_registry, setup_logging
from klinscore.cli._console import console, output_json, output_table, print_err
from klinscore.definitions.schemas import FieldKind, Specialty
from klinscore.errors import ScoreNotFoundError


@app.command("list", help="List the loaded score definitions.")
def list_cmd(
    ctx: typer.Context,
    specialty: str = typer.Option(None, "--specialty", "-s", help="Only scores of this specialty"),
):
    """List scores, optionally filtered by specialty."""
    setup_logging(verbose=ctx.obj["verbose"], quiet=ctx.obj["quiet"])
    registry = get_registry(ctx)

    if specialty:
        scores = registry.for_specialty(Specialty.parse(specialty))
    else:
        scores = list(registry)

    rows = [
        {
            "id": s.score_id,
            "name": s.definition.name,
            "specialty": s.definition.specialty.value,
            "version": s.definition.version,
            "fields": len(s.definition.inputs),
        }
        for s in scores
    ]
    output_table(rows, ctx=ctx, title="Scores", columns=["id", "name", "specialty", "version", "fields"])


@app.command("show", help="Show the fields, point rules and bands of a score.")
def show_cmd(
    ctx: typer.Context,
    score_id: str = typer.Argument(..., help="Score id (definition file name without extension)"),
):
    """Describe one score definition."""
    setup_logging(verbose=ctx.obj["verbose"], quiet=ctx.obj["quiet"])
    registry = get_registry(ctx)

    try:
        prepared = registry.get(score_id)
    except ScoreNotFoundError as e:
        print_err(str(e))
        raise SystemExit(1)

    definition = prepared.definition
    if output_json(definition.model_dump(mode="json", by_alias=True), ctx=ctx):
        return

    console.rule(f"{definition.name} ({prepared.score_id})")
    console.print(f"  Specialty: {definition.specialty.display_name}")
    console.print(f"  Version: {definition.version}")
    if definition.guideline_source:
        console.print(f"  Guideline: {definition.guideline_source}")
    if definition.description:
        console.print(f"  {definition.description}")

    console.print("\n[bold]Inputs[/bold]")
    for f in definition.inputs:
        flag = "" if f.required else " (optional)"
        unit = f" [{f.unit}]" if f.unit else ""
        console.print(f"  {f.field}: {f.kind.value}{unit}{flag}  {f.label}", markup=False)
        if f.kind == FieldKind.NUMBER and (f.min is not None or f.max is not None):
            console.print(f"      range: {f.min} .. {f.max}")
        for rule in f.conditions:
            console.print(f"      {rule.condition} -> {rule.points}", markup=False)
        for opt in f.options:
            console.print(f"      {opt.value} ({opt.label}) -> {opt.points}", markup=False)
        if f.kind == FieldKind.BOOLEAN and f.fixed_points is not None:
            console.print(f"      yes -> {f.fixed_points}")
        elif f.kind == FieldKind.NUMBER and not f.is_conditional:
            console.print(f"      always -> {f.fixed_points}")

    console.print("\n[bold]Interpretation[/bold]")
    for rule, band in zip(prepared.bands, definition.interpretation):
        console.print(f"  {rule}: {band.risk} ({band.risk_level.value})", markup=False)
