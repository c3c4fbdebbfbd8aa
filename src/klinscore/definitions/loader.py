"""Load clinical score definitions from YAML files."""

import logging
from pathlib import Path
from typing import Iterable, List, Optional, Tuple

import yaml
from pydantic import ValidationError

from klinscore.definitions.schemas import ScoreDefinition
from klinscore.errors import InvalidDefinitionError, ScoreLoadError
from klinscore.registry import ScoreRegistry

logger = logging.getLogger(__name__)

YAML_SUFFIXES = (".yaml", ".yml")
DEFAULT_SKIP_PATTERNS = ("template",)


def load_definition(file_path: str | Path) -> ScoreDefinition:
    """Read one YAML document into a ScoreDefinition.

    Only the document shape is checked here; structural consistency is the
    job of ``validate_definition``.

    Args:
        file_path: Path to the YAML file.

    Returns:
        The parsed definition.

    Raises:
        ScoreLoadError: If the file is missing, is not valid YAML, or does not
            match the definition schema.
    """
    path = Path(file_path)
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except FileNotFoundError:
        raise ScoreLoadError(f"Score file not found: {path}")
    except yaml.YAMLError as e:
        raise ScoreLoadError(f"Invalid YAML in score file {path}: {e}")

    if not isinstance(data, dict):
        raise ScoreLoadError(f"Score file {path} must contain a mapping at the top level")

    try:
        return ScoreDefinition.model_validate(data)
    except ValidationError as e:
        raise ScoreLoadError(f"Invalid score definition in {path}: {e}")


def discover_definitions(
    directory: str | Path, skip_patterns: Iterable[str] = DEFAULT_SKIP_PATTERNS
) -> List[Path]:
    """Find YAML definition files below ``directory``, sorted by path.

    Files whose path contains any of ``skip_patterns`` are left out.

    Raises:
        ScoreLoadError: If ``directory`` does not exist or is not a directory.
    """
    root = Path(directory)
    if not root.is_dir():
        raise ScoreLoadError(f"No scores directory found at {root}")

    patterns = tuple(skip_patterns)
    found = []
    for path in sorted(root.rglob("*")):
        if not path.is_file() or path.suffix.lower() not in YAML_SUFFIXES:
            continue
        if any(p in path.relative_to(root).as_posix() for p in patterns):
            logger.debug(f"Skipping {path} (matches skip pattern)")
            continue
        found.append(path)
    return found


def load_registry(
    directory: str | Path,
    skip_patterns: Iterable[str] = DEFAULT_SKIP_PATTERNS,
    registry: Optional[ScoreRegistry] = None,
) -> ScoreRegistry:
    """Load and validate every definition below ``directory``.

    The score id is the file stem. Files that fail to load or validate are
    logged and skipped so that one broken definition does not take the rest
    down with it; use ``load_registry_strict`` to fail instead.

    Returns:
        The populated registry.

    Raises:
        ScoreLoadError: If ``directory`` does not exist.
    """
    registry, failures = _load_into(directory, skip_patterns, registry)
    for path, error in failures:
        logger.warning(f"Failed to load score from {path}: {error}")
    logger.info(f"Loaded {len(registry)} score(s) from {directory}")
    return registry


def load_registry_strict(
    directory: str | Path, skip_patterns: Iterable[str] = DEFAULT_SKIP_PATTERNS
) -> ScoreRegistry:
    """Like ``load_registry`` but raises on the first bad file.

    Raises:
        ScoreLoadError: If the directory is missing or any file fails to load.
        InvalidDefinitionError: If any definition fails validation.
    """
    registry, failures = _load_into(directory, skip_patterns, None)
    if failures:
        raise failures[0][1]
    return registry


def _load_into(
    directory: str | Path,
    skip_patterns: Iterable[str],
    registry: Optional[ScoreRegistry],
) -> Tuple[ScoreRegistry, List[Tuple[Path, Exception]]]:
    registry = registry if registry is not None else ScoreRegistry()
    failures: List[Tuple[Path, Exception]] = []

    for path in discover_definitions(directory, skip_patterns):
        score_id = path.stem
        try:
            definition = load_definition(path)
            registry.register(score_id, definition)
        except (ScoreLoadError, InvalidDefinitionError, ValueError) as e:
            failures.append((path, e))

    return registry, failures
