"""Pydantic schemas for clinical score definitions.

A score definition is authored as YAML by clinicians, not programmers. These
models mirror that document format one-to-one; structural consistency
(unique field names, sane bounds, parsable conditions) is checked separately
by ``klinscore.definitions.validation`` so that every problem can be reported
at once instead of failing on the first one.

All models are frozen and sequences are stored as tuples: a definition is
read-only once constructed and may be shared freely between calculations.
"""

from enum import Enum
from types import MappingProxyType
from typing import Any, Dict, List, Mapping, Optional, Tuple, Union

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    StrictInt,
    StrictStr,
    field_serializer,
    field_validator,
)


class Specialty(str, Enum):
    """Medical specialty a score belongs to."""

    CARDIOLOGY = "Cardiology"
    NEPHROLOGY = "Nephrology"
    ANESTHESIOLOGY = "Anesthesiology"
    EMERGENCY = "Emergency"
    INTERNAL_MEDICINE = "InternalMedicine"
    SURGERY = "Surgery"
    OTHER = "Other"

    @classmethod
    def parse(cls, value: Any) -> "Specialty":
        """Lenient lookup: accepts the value or member name in any case.

        Unknown specialties map to ``OTHER``.
        """
        if isinstance(value, cls):
            return value
        text = str(value).strip().replace(" ", "").replace("_", "").lower()
        for member in cls:
            if text in (member.value.lower(), member.name.replace("_", "").lower()):
                return member
        return cls.OTHER

    @property
    def display_name(self) -> str:
        return _SPECIALTY_NAMES[self][0]

    @property
    def display_name_de(self) -> str:
        return _SPECIALTY_NAMES[self][1]


_SPECIALTY_NAMES = {
    Specialty.CARDIOLOGY: ("Cardiology", "Kardiologie"),
    Specialty.NEPHROLOGY: ("Nephrology", "Nephrologie"),
    Specialty.ANESTHESIOLOGY: ("Anesthesiology", "Anästhesiologie"),
    Specialty.EMERGENCY: ("Emergency Medicine", "Notfallmedizin"),
    Specialty.INTERNAL_MEDICINE: ("Internal Medicine", "Innere Medizin"),
    Specialty.SURGERY: ("Surgery", "Chirurgie"),
    Specialty.OTHER: ("Other", "Sonstiges"),
}


class FieldKind(str, Enum):
    """Kind of value an input field accepts."""

    BOOLEAN = "boolean"
    NUMBER = "number"
    DROPDOWN = "dropdown"


class RiskLevel(str, Enum):
    """Severity tag of an interpretation band. Display only, never used in logic."""

    VERY_LOW = "VeryLow"
    LOW = "Low"
    MODERATE = "Moderate"
    HIGH = "High"
    VERY_HIGH = "VeryHigh"
    CRITICAL = "Critical"
    NONE = "None"

    @property
    def color(self) -> str:
        """Hex color used by presentation layers."""
        return _RISK_COLORS[self]


_RISK_COLORS = {
    RiskLevel.VERY_LOW: "#4CAF50",
    RiskLevel.LOW: "#8BC34A",
    RiskLevel.MODERATE: "#FFC107",
    RiskLevel.HIGH: "#FF9800",
    RiskLevel.VERY_HIGH: "#F44336",
    RiskLevel.CRITICAL: "#B71C1C",
    RiskLevel.NONE: "#9E9E9E",
}


class PointCondition(BaseModel):
    """One conditional point rule: ``points`` apply when ``condition`` holds."""

    model_config = ConfigDict(frozen=True)

    condition: str = Field(..., description="Comparison expression, e.g. '>= 65' or '>= 30 && < 40'")
    points: StrictInt = Field(..., description="Points awarded when the condition holds")
    label: Optional[str] = Field(None, description="Display label, e.g. 'Age 65-74'")
    label_de: Optional[str] = Field(None, description="German display label")


class DropdownOption(BaseModel):
    """One selectable option of a dropdown field."""

    model_config = ConfigDict(frozen=True)

    value: str = Field(..., description="Token submitted as the input value")
    label: str = Field("", description="Display label")
    label_de: Optional[str] = Field(None, description="German display label")
    points: StrictInt = Field(0, description="Points awarded for this option")
    description: Optional[str] = None
    description_de: Optional[str] = None

    @field_validator("value", mode="before")
    @classmethod
    def _value_to_str(cls, v: Any) -> Any:
        # YAML turns unquoted tokens like 1 or 2.5 into numbers
        if isinstance(v, (int, float)) and not isinstance(v, bool):
            return str(v)
        return v


PointsRule = Union[StrictInt, Tuple[PointCondition, ...]]


class InputField(BaseModel):
    """One datum the score requires."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    field: str = Field(..., description="Key of this field in the input mapping")
    kind: FieldKind = Field(..., alias="type", description="boolean, number or dropdown")
    label: str = Field("", description="Display label")
    label_de: Optional[str] = None
    unit: Optional[str] = Field(None, description="Unit of measurement, e.g. 'years'")
    unit_de: Optional[str] = None
    help: Optional[str] = None
    help_de: Optional[str] = None
    points: PointsRule = Field(
        0, description="Fixed points or an ordered list of conditional rules"
    )
    min: Optional[float] = Field(None, description="Inclusive lower bound (number fields)")
    max: Optional[float] = Field(None, description="Inclusive upper bound (number fields)")
    options: Tuple[DropdownOption, ...] = Field(
        default=(), description="Ordered options (dropdown fields)"
    )
    required: bool = Field(True, description="Whether the field must be supplied")

    @field_validator("kind", mode="before")
    @classmethod
    def _normalize_kind(cls, v: Any) -> Any:
        if isinstance(v, str):
            return v.strip().lower()
        return v

    @property
    def is_conditional(self) -> bool:
        return isinstance(self.points, tuple)

    @property
    def conditions(self) -> Tuple[PointCondition, ...]:
        return self.points if isinstance(self.points, tuple) else ()

    @property
    def fixed_points(self) -> Optional[int]:
        return None if isinstance(self.points, tuple) else self.points

    def option_values(self) -> List[str]:
        return [opt.value for opt in self.options]

    def get_option(self, value: str) -> Optional[DropdownOption]:
        for opt in self.options:
            if opt.value == value:
                return opt
        return None


class InterpretationBand(BaseModel):
    """Maps a total-score match-rule to a risk label and recommendation."""

    model_config = ConfigDict(frozen=True)

    score: Union[StrictInt, StrictStr] = Field(
        ..., description="Exact score, range 'a-b', or comparison such as '>= 2'"
    )
    risk: str = Field(..., description="Risk label, e.g. 'Moderate-High'")
    risk_de: Optional[str] = None
    risk_level: RiskLevel = Field(RiskLevel.NONE, description="Severity tag for display")
    recommendation: str = Field("", description="Clinical recommendation")
    recommendation_de: Optional[str] = None
    details: Optional[str] = None
    details_de: Optional[str] = None


class ScoreDefinition(BaseModel):
    """Declarative description of one clinical score."""

    model_config = ConfigDict(frozen=True)

    name: str = Field(..., description="Score name")
    name_de: Optional[str] = None
    specialty: Specialty = Field(Specialty.OTHER, description="Medical specialty")
    specialty_de: Optional[str] = None
    version: str = Field("1.0", description="Version of the definition")
    guideline_source: Optional[str] = Field(None, description="e.g. 'ESC 2024'")
    reference: Optional[str] = Field(None, description="Full reference citation")
    validation_status: Optional[str] = Field(None, description="e.g. 'peer_reviewed', 'draft'")
    description: str = ""
    description_de: Optional[str] = None
    inputs: Tuple[InputField, ...] = Field(
        default=(), description="Input fields in display and evaluation order"
    )
    interpretation: Tuple[InterpretationBand, ...] = Field(
        default=(), description="Interpretation bands; first match wins"
    )
    metadata: Mapping[str, str] = Field(
        default_factory=lambda: MappingProxyType({}), description="Free-form string annotations"
    )

    @field_validator("specialty", mode="before")
    @classmethod
    def _parse_specialty(cls, v: Any) -> Specialty:
        return Specialty.parse(v)

    @field_validator("version", mode="before")
    @classmethod
    def _version_to_str(cls, v: Any) -> Any:
        # "version: 1.0" arrives as a float from YAML
        if isinstance(v, (int, float)) and not isinstance(v, bool):
            return str(v)
        return v

    @field_validator("metadata", mode="before")
    @classmethod
    def _metadata_to_str(cls, v: Any) -> Any:
        if isinstance(v, dict):
            return {str(k): str(val) for k, val in v.items()}
        return v

    @field_validator("metadata")
    @classmethod
    def _freeze_metadata(cls, v: Mapping[str, str]) -> Mapping[str, str]:
        return MappingProxyType(dict(v))

    @field_serializer("metadata")
    def _serialize_metadata(self, v: Mapping[str, str]) -> Dict[str, str]:
        return dict(v)

    def field_names(self) -> List[str]:
        return [f.field for f in self.inputs]

    def get_field(self, name: str) -> Optional[InputField]:
        for f in self.inputs:
            if f.field == name:
                return f
        return None
