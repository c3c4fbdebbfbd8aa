"""Pydantic schemas for calculation results."""

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field

from klinscore.definitions.schemas import InterpretationBand, RiskLevel


class FieldContribution(BaseModel):
    """Points awarded by one input field."""

    model_config = ConfigDict(frozen=True)

    field: str = Field(..., description="Field key")
    label: str = Field("", description="Field display label")
    points: int = Field(0, description="Points awarded")
    value: Any = Field(None, description="Value the points were computed from")
    provided: bool = Field(True, description="False when an optional field was omitted")
    matched_rule: Optional[str] = Field(
        None, description="Condition or option that produced the points, if any"
    )


class CalculationResult(BaseModel):
    """Outcome of scoring one input set against one definition."""

    model_config = ConfigDict(frozen=True)

    score_id: str = Field(..., description="Identifier of the score")
    score_name: str = Field(..., description="Display name of the score")
    total: int = Field(..., description="Sum of all field contributions")
    contributions: List[FieldContribution] = Field(
        default_factory=list, description="Per-field points, in definition order"
    )
    matched_band: Optional[InterpretationBand] = Field(
        None, description="First interpretation band matching the total, if any"
    )

    @property
    def per_field(self) -> Dict[str, int]:
        return {c.field: c.points for c in self.contributions}

    def get_field_points(self, field_name: str) -> Optional[int]:
        for c in self.contributions:
            if c.field == field_name:
                return c.points
        return None

    @property
    def is_classified(self) -> bool:
        return self.matched_band is not None

    @property
    def risk_label(self) -> Optional[str]:
        return self.matched_band.risk if self.matched_band else None

    @property
    def risk_level(self) -> RiskLevel:
        return self.matched_band.risk_level if self.matched_band else RiskLevel.NONE

    @property
    def recommendation(self) -> Optional[str]:
        return self.matched_band.recommendation if self.matched_band else None
