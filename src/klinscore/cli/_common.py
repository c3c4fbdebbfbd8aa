"""Shared CLI helpers: logging, config/registry resolution, input coercion."""

import logging
import re
from pathlib import Path
from typing import Any, Dict, List, Optional

import typer
import yaml
from rich.logging import RichHandler

from klinscore.cli._console import console
from klinscore.config import KlinScoreConfig, load_config
from klinscore.definitions.loader import load_registry
from klinscore.definitions.schemas import FieldKind, ScoreDefinition
from klinscore.errors import ScoreLoadError
from klinscore.registry import ScoreRegistry

logger = logging.getLogger(__name__)

_TRUE_TOKENS = {"true", "yes", "y", "1", "ja", "on"}
_FALSE_TOKENS = {"false", "no", "n", "0", "nein", "off"}
_DECIMAL_COMMA_RE = re.compile(r"^([+-]?\d+),(\d+)$")


def setup_logging(*, verbose: bool = False, quiet: bool = False) -> None:
    """Configure logging with Rich handler."""
    if verbose:
        level = logging.DEBUG
    elif quiet:
        level = logging.WARNING
    else:
        level = logging.INFO

    handler = RichHandler(
        console=console,
        show_time=True,
        show_path=False,
        markup=False,
        rich_tracebacks=True,
    )

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(level)


def get_config(ctx: typer.Context) -> KlinScoreConfig:
    """Load config once per invocation, applying the --scores-dir override."""
    if "config" not in ctx.obj:
        from klinscore.cli._console import print_err

        try:
            config = load_config(ctx.obj.get("config_path"))
        except ValueError as e:
            print_err(str(e))
            raise SystemExit(1)
        if ctx.obj.get("scores_dir") is not None:
            config = config.model_copy(update={"scores_dir": ctx.obj["scores_dir"]})
        ctx.obj["config"] = config
    return ctx.obj["config"]


def get_registry(ctx: typer.Context) -> ScoreRegistry:
    """Build the score registry from the configured scores directory.

    Raises:
        SystemExit: If the scores directory does not exist.
    """
    if "registry" not in ctx.obj:
        from klinscore.cli._console import print_err

        config = get_config(ctx)
        try:
            ctx.obj["registry"] = load_registry(config.scores_dir, config.skip_patterns)
        except ScoreLoadError as e:
            print_err(str(e))
            raise SystemExit(1)
    return ctx.obj["registry"]


def coerce_value(kind: FieldKind, raw: Any) -> Any:
    """Convert a raw CLI/file value to the Python type a field kind expects.

    Values that are already of the right type pass through. Strings that
    cannot be converted are returned unchanged so the engine reports a
    TypeMismatchError naming the field.
    """
    if kind == FieldKind.DROPDOWN and isinstance(raw, (int, float)) and not isinstance(raw, bool):
        # Same normalization as DropdownOption.value: YAML reads "grade: 2" as int
        return str(raw)
    if not isinstance(raw, str):
        return raw
    text = raw.strip()

    if kind == FieldKind.BOOLEAN:
        lowered = text.lower()
        if lowered in _TRUE_TOKENS:
            return True
        if lowered in _FALSE_TOKENS:
            return False
        return raw

    if kind == FieldKind.NUMBER:
        try:
            return int(text)
        except ValueError:
            pass
        if "," in text:
            return _parse_decimal_comma(text, raw)
        try:
            return float(text)
        except ValueError:
            return raw

    return text


def _parse_decimal_comma(text: str, raw: str) -> Any:
    """Read a European decimal comma ("38,5"); reject anything that may be digit grouping."""
    match = _DECIMAL_COMMA_RE.match(text)
    if not match:
        return raw
    whole, fraction = match.groups()
    # "1,200" reads as 1200 in English notation
    if len(fraction) == 3 and whole.lstrip("+-") != "0":
        return raw
    return float(f"{whole}.{fraction}")


def parse_assignments(assignments: List[str]) -> Dict[str, str]:
    """Parse ``field=value`` pairs.

    Raises:
        ValueError: If an assignment has no '=' or an empty field name.
    """
    parsed: Dict[str, str] = {}
    for item in assignments:
        name, sep, value = item.partition("=")
        if not sep or not name.strip():
            raise ValueError(f"Invalid input '{item}', expected field=value")
        parsed[name.strip()] = value
    return parsed


def read_inputs_file(path: Path) -> Dict[str, Any]:
    """Read a YAML (or JSON) mapping of field name to value."""
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except FileNotFoundError:
        raise ValueError(f"Inputs file not found: {path}")
    except yaml.YAMLError as e:
        raise ValueError(f"Invalid YAML in inputs file {path}: {e}")
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValueError(f"Inputs file {path} must contain a mapping")
    return {str(k): v for k, v in data.items()}


def build_inputs(
    definition: ScoreDefinition,
    assignments: Optional[List[str]] = None,
    inputs_file: Optional[Path] = None,
) -> Dict[str, Any]:
    """Merge file inputs and ``field=value`` assignments, coercing per field kind.

    Assignments override values from the file. Names the definition does not
    declare are passed through untouched.
    """
    raw: Dict[str, Any] = {}
    if inputs_file is not None:
        raw.update(read_inputs_file(inputs_file))
    raw.update(parse_assignments(assignments or []))

    inputs: Dict[str, Any] = {}
    for name, value in raw.items():
        input_field = definition.get_field(name)
        inputs[name] = coerce_value(input_field.kind, value) if input_field else value
    return inputs
