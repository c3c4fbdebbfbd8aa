"""Calculation engine for point-based clinical scores.

Scoring is a pure function of (definition, inputs):

1. Every field is checked in declared order: presence, kind, bounds, option.
2. Each field's points are resolved (fixed, first matching condition, or
   selected option).
3. Points are summed and the interpretation bands are scanned in declared
   order; the first band whose rule matches the total is reported.

Any invalid or missing input aborts the whole calculation. A score must never
be silently under-computed, so no partial total is ever returned.
"""

import logging
import math
from typing import Any, Mapping, Optional, Tuple, Union

from klinscore.definitions.schemas import FieldKind, InputField, InterpretationBand, ScoreDefinition
from klinscore.definitions.validation import PreparedScore, prepare_definition
from klinscore.engine.schemas import CalculationResult, FieldContribution
from klinscore.errors import (
    InvalidOptionError,
    MissingFieldError,
    RangeError,
    TypeMismatchError,
)
from klinscore.registry import ScoreRegistry

logger = logging.getLogger(__name__)

ScoreRef = Union[str, PreparedScore, ScoreDefinition]


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _check_value(input_field: InputField, value: Any) -> None:
    """Raise the matching CalculationError if ``value`` is unusable for the field."""
    name = input_field.field

    if input_field.kind == FieldKind.BOOLEAN:
        if not isinstance(value, bool):
            raise TypeMismatchError(name, FieldKind.BOOLEAN.value, value)

    elif input_field.kind == FieldKind.NUMBER:
        if not _is_number(value) or math.isnan(value):
            raise TypeMismatchError(name, FieldKind.NUMBER.value, value)
        if input_field.min is not None and value < input_field.min:
            raise RangeError(name, value, input_field.min, input_field.max)
        if input_field.max is not None and value > input_field.max:
            raise RangeError(name, value, input_field.min, input_field.max)

    elif input_field.kind == FieldKind.DROPDOWN:
        if not isinstance(value, str):
            raise TypeMismatchError(name, FieldKind.DROPDOWN.value, value)
        if input_field.get_option(value) is None:
            raise InvalidOptionError(name, value, input_field.option_values())


def _field_points(
    prepared: PreparedScore, input_field: InputField, value: Any
) -> Tuple[int, Optional[str]]:
    """Points for an already-checked value, plus the rule that produced them."""
    if input_field.kind == FieldKind.BOOLEAN:
        if value and input_field.fixed_points is not None:
            return input_field.fixed_points, None
        return 0, None

    if input_field.kind == FieldKind.NUMBER:
        if not input_field.is_conditional:
            return input_field.fixed_points, None
        parsed = prepared.conditions[input_field.field]
        for expression, rule in zip(parsed, input_field.conditions):
            if expression.evaluate(value):
                return rule.points, rule.label or rule.condition
        return 0, None

    option = input_field.get_option(value)
    return option.points, option.value


def find_band(prepared: PreparedScore, total: int) -> Optional[InterpretationBand]:
    """Return the first interpretation band whose rule matches ``total``."""
    for rule, band in zip(prepared.bands, prepared.definition.interpretation):
        if rule.matches(total):
            return band
    return None


def calculate(
    score: Union[PreparedScore, ScoreDefinition], inputs: Mapping[str, Any]
) -> CalculationResult:
    """Score an input set against a definition.

    Args:
        score: A PreparedScore, or a ScoreDefinition which is validated and
            prepared first.
        inputs: Mapping of field name to value (bool, number or option token).

    Returns:
        CalculationResult with the total, per-field points and matched band
        (None when no band matches).

    Raises:
        InvalidDefinitionError: If a raw ScoreDefinition fails validation.
        MissingFieldError, TypeMismatchError, RangeError, InvalidOptionError:
            If any input is missing or invalid.
    """
    prepared = score if isinstance(score, PreparedScore) else prepare_definition(score)
    definition = prepared.definition

    contributions = []
    for input_field in definition.inputs:
        name = input_field.field
        value = inputs.get(name)

        if value is None:
            if input_field.required:
                raise MissingFieldError(name)
            contributions.append(
                FieldContribution(field=name, label=input_field.label, points=0, provided=False)
            )
            continue

        _check_value(input_field, value)
        points, matched_rule = _field_points(prepared, input_field, value)
        logger.debug(f"{prepared.score_id}.{name} = {value!r} -> {points} point(s)")
        contributions.append(
            FieldContribution(
                field=name,
                label=input_field.label,
                points=points,
                value=value,
                matched_rule=matched_rule,
            )
        )

    known = set(definition.field_names())
    unknown = sorted(str(k) for k in inputs if k not in known)
    if unknown:
        logger.warning(f"Ignoring inputs not declared by '{prepared.score_id}': {', '.join(unknown)}")

    total = sum(c.points for c in contributions)
    band = find_band(prepared, total)
    if band is None:
        logger.info(f"No interpretation band of '{prepared.score_id}' matches total {total}")

    return CalculationResult(
        score_id=prepared.score_id,
        score_name=definition.name,
        total=total,
        contributions=contributions,
        matched_band=band,
    )


class ScoreCalculator:
    """Calculates scores by id or object against an explicit registry.

    UI code, the CLI and tests all go through ``calculate`` with either a
    registry id or a definition object.
    """

    def __init__(self, registry: Optional[ScoreRegistry] = None, warn_on_unknown_inputs: bool = True):
        self.registry = registry if registry is not None else ScoreRegistry()
        self.warn_on_unknown_inputs = warn_on_unknown_inputs

    def resolve(self, score: ScoreRef) -> PreparedScore:
        """Turn an id, definition or prepared score into a PreparedScore."""
        if isinstance(score, PreparedScore):
            return score
        if isinstance(score, ScoreDefinition):
            return prepare_definition(score)
        return self.registry.get(score)

    def calculate(self, score: ScoreRef, inputs: Mapping[str, Any]) -> CalculationResult:
        prepared = self.resolve(score)
        if not self.warn_on_unknown_inputs:
            known = set(prepared.definition.field_names())
            inputs = {k: v for k, v in inputs.items() if k in known}
        return calculate(prepared, inputs)
