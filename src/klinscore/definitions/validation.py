"""Structural validation of score definitions.

``validate_definition`` reports every problem it finds rather than stopping at
the first, so an author sees the whole list in one pass. ``prepare_definition``
turns a clean definition into a ``PreparedScore`` whose expressions are parsed
once and cached; only prepared scores are handed to the calculator.
"""

import logging
from collections import Counter
from dataclasses import dataclass
from types import MappingProxyType
from typing import Dict, List, Mapping, Optional, Tuple

from klinscore.definitions.expressions import (
    BandRule,
    ParsedExpression,
    parse_band_rule,
    parse_expression,
)
from klinscore.definitions.schemas import FieldKind, InputField, ScoreDefinition
from klinscore.errors import (
    DefinitionError,
    ExpressionParseError,
    InvalidDefinitionError,
    format_number,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True, eq=False)
class PreparedScore:
    """A validated definition plus its pre-parsed expressions.

    Attributes:
        score_id: Identifier of the score (file stem or explicit key).
        definition: The validated, immutable definition.
        conditions: Parsed conditional rules per number field, in rule order (read-only).
        bands: Parsed band rules, parallel to ``definition.interpretation``.
    """

    score_id: str
    definition: ScoreDefinition
    conditions: Mapping[str, Tuple[ParsedExpression, ...]]
    bands: Tuple[BandRule, ...]

    @property
    def name(self) -> str:
        return self.definition.name


def _check_field(index: int, input_field: InputField) -> List[DefinitionError]:
    errors: List[DefinitionError] = []
    loc = f"inputs[{index}]"

    if not input_field.field.strip():
        errors.append(DefinitionError("field name is empty", f"{loc}.field"))

    if input_field.kind == FieldKind.DROPDOWN:
        if not input_field.options:
            errors.append(
                DefinitionError(
                    f"dropdown field '{input_field.field}' has no options", f"{loc}.options"
                )
            )
        counts = Counter(input_field.option_values())
        for value, count in counts.items():
            if count > 1:
                errors.append(
                    DefinitionError(
                        f"duplicate option value '{value}' in field '{input_field.field}'",
                        f"{loc}.options",
                    )
                )

    if input_field.kind == FieldKind.NUMBER:
        if (
            input_field.min is not None
            and input_field.max is not None
            and input_field.min > input_field.max
        ):
            errors.append(
                DefinitionError(
                    f"min ({format_number(input_field.min)}) is greater than"
                    f" max ({format_number(input_field.max)}) for field '{input_field.field}'",
                    loc,
                )
            )

    if input_field.is_conditional:
        if input_field.kind != FieldKind.NUMBER:
            errors.append(
                DefinitionError(
                    f"conditional points are only supported on number fields,"
                    f" '{input_field.field}' is {input_field.kind.value}",
                    f"{loc}.points",
                )
            )
        for j, rule in enumerate(input_field.conditions):
            try:
                parse_expression(rule.condition, f"{loc}.points[{j}].condition")
            except ExpressionParseError as e:
                errors.append(e)

    return errors


def validate_definition(definition: ScoreDefinition) -> List[DefinitionError]:
    """Check a definition for internal consistency.

    Args:
        definition: The definition to check.

    Returns:
        Every DefinitionError found, in document order. Empty means valid.
    """
    errors: List[DefinitionError] = []

    if not definition.name.strip():
        errors.append(DefinitionError("score name is empty", "name"))

    if not definition.inputs:
        errors.append(DefinitionError("score must have at least one input field", "inputs"))

    for i, input_field in enumerate(definition.inputs):
        errors.extend(_check_field(i, input_field))

    counts = Counter(definition.field_names())
    for name, count in counts.items():
        if count > 1 and name.strip():
            errors.append(DefinitionError(f"duplicate field name '{name}'", "inputs"))

    for i, band in enumerate(definition.interpretation):
        try:
            parse_band_rule(band.score, f"interpretation[{i}].score")
        except ExpressionParseError as e:
            errors.append(e)

    return errors


def prepare_definition(
    definition: ScoreDefinition, score_id: Optional[str] = None
) -> PreparedScore:
    """Validate a definition and cache its parsed expressions.

    Args:
        definition: The definition to prepare.
        score_id: Identifier to attach; defaults to the score name.

    Returns:
        PreparedScore ready for any number of calculations.

    Raises:
        InvalidDefinitionError: If validation found any problem.
    """
    sid = score_id or definition.name
    errors = validate_definition(definition)
    if errors:
        raise InvalidDefinitionError(errors, score_id=sid)

    conditions: Dict[str, Tuple[ParsedExpression, ...]] = {}
    for i, input_field in enumerate(definition.inputs):
        if input_field.is_conditional:
            conditions[input_field.field] = tuple(
                parse_expression(rule.condition, f"inputs[{i}].points[{j}].condition")
                for j, rule in enumerate(input_field.conditions)
            )

    bands = tuple(
        parse_band_rule(band.score, f"interpretation[{i}].score")
        for i, band in enumerate(definition.interpretation)
    )

    logger.debug(
        f"Prepared score '{sid}': {len(definition.inputs)} fields, "
        f"{sum(len(c) for c in conditions.values())} conditions, {len(bands)} bands"
    )
    return PreparedScore(
        score_id=sid,
        definition=definition,
        conditions=MappingProxyType(conditions),
        bands=bands,
    )
