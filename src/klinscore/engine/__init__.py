"""Calculation engine for point-based clinical scores."""

from klinscore.engine.calculator import ScoreCalculator, calculate, find_band
from klinscore.engine.schemas import CalculationResult, FieldContribution

__all__ = [
    "ScoreCalculator",
    "calculate",
    "find_band",
    "CalculationResult",
    "FieldContribution",
]
