"""Score definitions: document model, expressions, validation and loading."""

from klinscore.definitions.expressions import (
    BandRule,
    Comparison,
    Operator,
    ParsedExpression,
    evaluate,
    parse_band_rule,
    parse_expression,
)
from klinscore.definitions.schemas import (
    DropdownOption,
    FieldKind,
    InputField,
    InterpretationBand,
    PointCondition,
    RiskLevel,
    ScoreDefinition,
    Specialty,
)
from klinscore.definitions.validation import (
    PreparedScore,
    prepare_definition,
    validate_definition,
)

__all__ = [
    "BandRule",
    "Comparison",
    "Operator",
    "ParsedExpression",
    "evaluate",
    "parse_band_rule",
    "parse_expression",
    "DropdownOption",
    "FieldKind",
    "InputField",
    "InterpretationBand",
    "PointCondition",
    "RiskLevel",
    "ScoreDefinition",
    "Specialty",
    "PreparedScore",
    "prepare_definition",
    "validate_definition",
]
