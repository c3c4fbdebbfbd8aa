"""Configuration schema and loader.

Settings are read from ``config/klinscore.yaml`` (relative to the working
directory) unless an explicit path is given. A ``.env`` file is honoured, and
``KLINSCORE_SCORES_DIR`` overrides the scores directory from the file.
"""

import logging
import os
from pathlib import Path
from typing import List, Optional

import yaml
from dotenv import load_dotenv
from pydantic import BaseModel, Field, field_validator

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = Path("config") / "klinscore.yaml"
SCORES_DIR_ENV = "KLINSCORE_SCORES_DIR"


class KlinScoreConfig(BaseModel):
    """Settings for loading score definitions and running calculations.

    Attributes:
        scores_dir: Directory scanned (recursively) for YAML definitions.
        skip_patterns: Files whose relative path contains any of these are ignored.
        warn_on_unknown_inputs: Log a warning when inputs name undeclared fields.
    """

    scores_dir: Path = Field(
        default=Path("scores"),
        description="Directory scanned for score definitions",
    )
    skip_patterns: List[str] = Field(
        default_factory=lambda: ["template"],
        description="Path substrings that exclude a definition file",
    )
    warn_on_unknown_inputs: bool = Field(
        default=True,
        description="Warn when inputs contain fields the score does not declare",
    )

    @field_validator("skip_patterns")
    @classmethod
    def validate_skip_patterns(cls, v: List[str]) -> List[str]:
        """Reject empty patterns, which would skip every file."""
        if any(not p.strip() for p in v):
            raise ValueError("skip_patterns must not contain empty strings")
        return v


def load_config(config_path: Optional[Path] = None) -> KlinScoreConfig:
    """Load configuration from YAML, then apply environment overrides.

    Args:
        config_path: Optional explicit path. Defaults to ``config/klinscore.yaml``.

    Returns:
        KlinScoreConfig (defaults if the file does not exist or is empty).

    Raises:
        ValueError: If the file exists but contains invalid configuration.
    """
    load_dotenv()
    path = Path(config_path) if config_path is not None else DEFAULT_CONFIG_PATH

    data = {}
    if path.exists():
        try:
            with open(path, "r", encoding="utf-8") as f:
                data = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ValueError(f"Invalid YAML in config {path}: {e}")
        if not isinstance(data, dict):
            raise ValueError(f"Config {path} must contain a mapping")
        logger.debug(f"Loaded config from {path}")
    elif config_path is not None:
        raise ValueError(f"Config file not found: {path}")
    else:
        logger.debug(f"No config found at {path}, using defaults")

    env_scores_dir = os.getenv(SCORES_DIR_ENV)
    if env_scores_dir:
        data["scores_dir"] = env_scores_dir

    try:
        return KlinScoreConfig.model_validate(data)
    except Exception as e:
        raise ValueError(f"Failed to load config from {path}: {e}")
