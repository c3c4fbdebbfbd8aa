"""Application configuration management."""

from klinscore.config.settings import (
    DEFAULT_CONFIG_PATH,
    KlinScoreConfig,
    load_config,
)

__all__ = [
    "DEFAULT_CONFIG_PATH",
    "KlinScoreConfig",
    "load_config",
]
