"""Validate command: check definition files for structural problems."""

from pathlib import Path
from typing import List

import typer

from klinscore.cli._app import app
from klinscore.cli._common import get_config, setup_logging
from klinscore.cli._console import console, output_json, print_err, print_ok
from klinscore.definitions.loader import discover_definitions, load_definition
from klinscore.definitions.validation import validate_definition
from klinscore.errors import ScoreLoadError


@app.command("validate", help="Validate score definition files or directories.")
def validate_cmd(
    ctx: typer.Context,
    paths: List[Path] = typer.Argument(None, help="Files or directories (default: configured scores dir)"),
):
    """Report every structural problem in the given definitions."""
    setup_logging(verbose=ctx.obj["verbose"], quiet=ctx.obj["quiet"])
    config = get_config(ctx)

    targets = paths or [config.scores_dir]
    files: List[Path] = []
    for target in targets:
        if target.is_dir():
            files.extend(discover_definitions(target, config.skip_patterns))
        elif target.exists():
            files.append(target)
        else:
            print_err(f"Path not found: {target}")
            raise SystemExit(1)

    report = []
    for path in files:
        entry = {"file": str(path), "valid": True, "errors": []}
        try:
            definition = load_definition(path)
        except ScoreLoadError as e:
            entry["valid"] = False
            entry["errors"].append({"location": None, "message": str(e)})
            report.append(entry)
            continue

        errors = validate_definition(definition)
        if errors:
            entry["valid"] = False
            entry["errors"] = [e.to_dict() for e in errors]
        report.append(entry)

    invalid = [r for r in report if not r["valid"]]

    if not output_json({"files": report, "invalid": len(invalid)}, ctx=ctx):
        for entry in report:
            if entry["valid"]:
                if not ctx.obj["quiet"]:
                    print_ok(entry["file"])
                continue
            print_err(entry["file"])
            for err in entry["errors"]:
                where = f"{err['location']}: " if err["location"] else ""
                console.print(f"    - {where}{err['message']}", markup=False)
        if not ctx.obj["quiet"]:
            console.print(f"\n  Checked: {len(report)}  Invalid: {len(invalid)}")

    if invalid:
        raise SystemExit(1)
