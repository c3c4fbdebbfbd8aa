"""Error taxonomy for score definitions and calculations.

Two families:

- Structural problems in a score definition (``DefinitionError``). These are
  collected by the validator and reported together; a definition with any of
  them is never handed to the calculator.
- Problems with the inputs supplied to one calculation (``CalculationError``).
  The caller is expected to fix the inputs and try again.
"""

from typing import Any, List, Optional


def format_number(value: float) -> str:
    """Render a number without exponent notation or a trailing ``.0``."""
    if float(value).is_integer():
        return str(int(value))
    return repr(float(value))


class ScoreError(Exception):
    """Base class for all klinscore errors."""


# ── Definition errors ───────────────────────────────────────────────


class DefinitionError(ScoreError):
    """A structural problem in a score definition.

    Attributes:
        message: Human-readable description of the problem.
        location: Path into the definition (e.g. ``inputs[2].points[0].condition``).
    """

    def __init__(self, message: str, location: Optional[str] = None):
        self.message = message
        self.location = location
        super().__init__(f"{location}: {message}" if location else message)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, DefinitionError):
            return NotImplemented
        return (
            type(self) is type(other)
            and self.message == other.message
            and self.location == other.location
        )

    def __hash__(self) -> int:
        return hash((type(self).__name__, self.message, self.location))

    def to_dict(self) -> dict:
        return {"location": self.location, "message": self.message}


class ExpressionParseError(DefinitionError):
    """A comparison expression or band rule could not be parsed."""

    def __init__(self, expression: Any, reason: str, location: Optional[str] = None):
        self.expression = expression
        self.reason = reason
        super().__init__(f"cannot parse {expression!r}: {reason}", location)


class InvalidDefinitionError(ScoreError):
    """Raised when a definition fails structural validation.

    Carries every problem found so the author can fix them in one pass.
    """

    def __init__(self, errors: List[DefinitionError], score_id: Optional[str] = None):
        self.errors = list(errors)
        self.score_id = score_id
        name = f"'{score_id}'" if score_id else "definition"
        details = "; ".join(str(e) for e in self.errors)
        super().__init__(
            f"Invalid score {name} ({len(self.errors)} error(s)): {details}"
        )


# ── Calculation errors ──────────────────────────────────────────────


class CalculationError(ScoreError):
    """An input set cannot be scored against a definition."""

    def __init__(self, field: str, message: str):
        self.field = field
        super().__init__(message)


class MissingFieldError(CalculationError):
    """A required field is absent from the inputs."""

    def __init__(self, field: str):
        super().__init__(field, f"Missing required field: {field}")


class TypeMismatchError(CalculationError):
    """The supplied value does not have the field's declared kind."""

    def __init__(self, field: str, expected_kind: str, value: Any = None):
        self.expected_kind = expected_kind
        self.value = value
        super().__init__(
            field,
            f"Field '{field}' expects a {expected_kind} value, "
            f"got {type(value).__name__} {value!r}",
        )


class RangeError(CalculationError):
    """A number lies outside the field's declared bounds."""

    def __init__(
        self,
        field: str,
        value: float,
        min: Optional[float] = None,
        max: Optional[float] = None,
    ):
        self.value = value
        self.min = min
        self.max = max
        lo = "-inf" if min is None else format_number(min)
        hi = "inf" if max is None else format_number(max)
        super().__init__(
            field,
            f"Field '{field}' is out of range: {format_number(value)} (allowed: {lo} - {hi})",
        )


class InvalidOptionError(CalculationError):
    """A dropdown value is not among the field's declared options."""

    def __init__(self, field: str, value: str, allowed: Optional[List[str]] = None):
        self.value = value
        self.allowed = list(allowed or [])
        message = f"Unknown option '{value}' for field '{field}'"
        if self.allowed:
            message += f" (expected one of: {', '.join(self.allowed)})"
        super().__init__(field, message)


# ── Loading / lookup ────────────────────────────────────────────────


class ScoreLoadError(ScoreError):
    """Raised when a definition file or directory cannot be loaded."""


class ScoreNotFoundError(ScoreError, KeyError):
    """Raised when a score id is not present in a registry."""

    def __init__(self, score_id: str):
        self.score_id = score_id
        super().__init__(f"Score not found: {score_id}")

    def __str__(self) -> str:
        return self.args[0]
