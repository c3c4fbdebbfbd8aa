"""
KlinScore - clinical risk scores from declarative YAML definitions.

Score definitions (fields, point rules, interpretation bands) are validated
once, then used for any number of stateless calculations.
"""

__version__ = "0.1.0"

from klinscore.definitions import ScoreDefinition, prepare_definition, validate_definition
from klinscore.definitions.loader import load_definition, load_registry
from klinscore.engine import CalculationResult, ScoreCalculator, calculate
from klinscore.registry import ScoreRegistry

__all__ = [
    "ScoreDefinition",
    "prepare_definition",
    "validate_definition",
    "load_definition",
    "load_registry",
    "CalculationResult",
    "ScoreCalculator",
    "calculate",
    "ScoreRegistry",
]
