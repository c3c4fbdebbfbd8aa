"""CLI package: Typer-based command-line interface.

Usage:
    klinscore --help
    klinscore calculate cha2ds2_va -i age=72 -i heart_failure=yes ...
"""

from klinscore.cli._app import app

# Register command modules (side-effect imports)
import klinscore.cli.cmd_scores  # noqa: F401
import klinscore.cli.cmd_validate  # noqa: F401
import klinscore.cli.cmd_calculate  # noqa: F401

__all__ = ["app"]
