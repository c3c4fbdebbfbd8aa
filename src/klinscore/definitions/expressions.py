"""Comparison expressions used by conditional points and interpretation bands.

Grammar (whitespace between tokens is optional)::

    expression := clause ( AND clause )*
    clause     := operator number
    operator   := ">=" | "<=" | "==" | "!=" | ">" | "<" | "≥" | "≤" | "≠"
    AND        := "&&" | "and"

Every clause of a compound expression must hold. Expressions are parsed once
when a definition is prepared; evaluating a ``ParsedExpression`` cannot fail.

Interpretation bands use a related set of match-rules (``parse_band_rule``):
an exact integer, an inclusive range ``"a-b"``, or a single comparison with an
integer literal.
"""

import operator
import re
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Optional, Tuple, Union

from klinscore.errors import ExpressionParseError, format_number


class Operator(str, Enum):
    """Comparison operators, valued by their canonical token."""

    GE = ">="
    LE = "<="
    EQ = "=="
    NE = "!="
    GT = ">"
    LT = "<"

    @property
    def func(self) -> Callable[[float, float], bool]:
        return _OPERATOR_FUNCS[self]


_OPERATOR_FUNCS = {
    Operator.GE: operator.ge,
    Operator.LE: operator.le,
    Operator.EQ: operator.eq,
    Operator.NE: operator.ne,
    Operator.GT: operator.gt,
    Operator.LT: operator.lt,
}

# Longest tokens first so ">=" is not read as ">" followed by "=5"
_OPERATOR_TOKENS = (
    (">=", Operator.GE),
    ("<=", Operator.LE),
    ("==", Operator.EQ),
    ("!=", Operator.NE),
    ("≥", Operator.GE),
    ("≤", Operator.LE),
    ("≠", Operator.NE),
    (">", Operator.GT),
    ("<", Operator.LT),
)

_NUMBER_RE = re.compile(r"^[+-]?(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][+-]?\d+)?$")
_INTEGER_RE = re.compile(r"^[+-]?\d+$")
_AND_RE = re.compile(r"&&|\band\b", re.IGNORECASE)
_RANGE_RE = re.compile(r"^([+-]?\d+)\s*-\s*([+-]?\d+)$")


@dataclass(frozen=True)
class Comparison:
    """A single ``operator operand`` clause."""

    op: Operator
    operand: float

    def evaluate(self, value: float) -> bool:
        return self.op.func(value, self.operand)

    def __str__(self) -> str:
        return f"{self.op.value} {format_number(self.operand)}"


@dataclass(frozen=True)
class ParsedExpression:
    """A conjunction of one or more comparisons."""

    clauses: Tuple[Comparison, ...]
    source: str = ""

    def evaluate(self, value: float) -> bool:
        return all(clause.evaluate(value) for clause in self.clauses)

    @property
    def is_compound(self) -> bool:
        return len(self.clauses) > 1

    def __str__(self) -> str:
        return " && ".join(str(c) for c in self.clauses)


def _parse_clause(
    text: str, expression: str, location: Optional[str], integer_only: bool = False
) -> Comparison:
    clause = text.strip()
    if not clause:
        raise ExpressionParseError(expression, "empty comparison", location)

    for token, op in _OPERATOR_TOKENS:
        if clause.startswith(token):
            literal = clause[len(token):].strip()
            break
    else:
        raise ExpressionParseError(
            expression,
            f"unknown operator in '{clause}' (expected one of >=, <=, >, <, ==, !=)",
            location,
        )

    if not literal:
        raise ExpressionParseError(expression, f"missing number after '{token}'", location)
    pattern = _INTEGER_RE if integer_only else _NUMBER_RE
    if not pattern.match(literal):
        kind = "integer" if integer_only else "number"
        raise ExpressionParseError(
            expression, f"invalid {kind} after '{token}': '{literal}'", location
        )
    return Comparison(op, float(literal))


def parse_expression(expression: str, location: Optional[str] = None) -> ParsedExpression:
    """Parse a comparison expression such as ``">= 65"`` or ``">= 30 && < 40"``.

    Args:
        expression: Expression text.
        location: Optional path into the definition, attached to errors.

    Returns:
        ParsedExpression ready for repeated evaluation.

    Raises:
        ExpressionParseError: On unknown operators, bad literals or dangling ``&&``.
    """
    if not isinstance(expression, str):
        raise ExpressionParseError(expression, "expression must be a string", location)
    if not expression.strip():
        raise ExpressionParseError(expression, "empty expression", location)

    parts = _AND_RE.split(expression)
    clauses = tuple(_parse_clause(part, expression, location) for part in parts)
    return ParsedExpression(clauses=clauses, source=expression.strip())


def evaluate(expression: Union[ParsedExpression, str], value: float) -> bool:
    """Evaluate an expression against a numeric value.

    Accepts a pre-parsed expression (the normal path) or raw text, which is
    parsed first and may therefore raise ``ExpressionParseError``.
    """
    if isinstance(expression, str):
        expression = parse_expression(expression)
    return expression.evaluate(value)


# ── Interpretation band rules ───────────────────────────────────────


class BandRuleKind(str, Enum):
    EXACT = "exact"
    RANGE = "range"
    COMPARISON = "comparison"


@dataclass(frozen=True)
class BandRule:
    """Parsed match-rule of an interpretation band."""

    kind: BandRuleKind
    low: Optional[int] = None
    high: Optional[int] = None
    comparison: Optional[Comparison] = None
    source: str = ""

    def matches(self, total: int) -> bool:
        if self.kind is BandRuleKind.EXACT:
            return total == self.low
        if self.kind is BandRuleKind.RANGE:
            return self.low <= total <= self.high
        return self.comparison.evaluate(total)

    def __str__(self) -> str:
        if self.kind is BandRuleKind.EXACT:
            return str(self.low)
        if self.kind is BandRuleKind.RANGE:
            return f"{self.low}-{self.high}"
        return f"{self.comparison.op.value} {int(self.comparison.operand)}"


def parse_band_rule(raw: Any, location: Optional[str] = None) -> BandRule:
    """Parse the ``score`` entry of an interpretation band.

    Accepted forms: ``2``, ``"2"``, ``"1-3"``, ``">= 2"``, ``"≥2"``, ``"> 4"``,
    ``"<= 1"``, ``"< 5"``, ``"== 3"``, ``"!= 0"``.

    Raises:
        ExpressionParseError: If the rule is not one of the forms above.
    """
    if isinstance(raw, bool):
        raise ExpressionParseError(raw, "expected an integer or a range string", location)
    if isinstance(raw, int):
        return BandRule(BandRuleKind.EXACT, low=raw, high=raw, source=str(raw))
    if not isinstance(raw, str):
        raise ExpressionParseError(raw, "expected an integer or a range string", location)

    text = raw.strip()
    if not text:
        raise ExpressionParseError(raw, "empty band rule", location)

    if _INTEGER_RE.match(text):
        value = int(text)
        return BandRule(BandRuleKind.EXACT, low=value, high=value, source=text)

    match = _RANGE_RE.match(text)
    if match:
        low, high = int(match.group(1)), int(match.group(2))
        if low > high:
            raise ExpressionParseError(
                raw, f"range lower bound {low} exceeds upper bound {high}", location
            )
        return BandRule(BandRuleKind.RANGE, low=low, high=high, source=text)

    if _AND_RE.search(text):
        raise ExpressionParseError(raw, "compound rules are not allowed in bands", location)

    comparison = _parse_clause(text, raw, location, integer_only=True)
    return BandRule(BandRuleKind.COMPARISON, comparison=comparison, source=text)
