"""Unit tests for score definition schemas."""

import pytest
from pydantic import ValidationError

from klinscore.definitions.schemas import (
    FieldKind,
    InputField,
    InterpretationBand,
    PointCondition,
    RiskLevel,
    ScoreDefinition,
    Specialty,
)


class TestSpecialty:
    """Tests for Specialty parsing."""

    def test_exact_value(self):
        assert Specialty.parse("Cardiology") == Specialty.CARDIOLOGY

    def test_case_and_separator_insensitive(self):
        assert Specialty.parse("internal_medicine") == Specialty.INTERNAL_MEDICINE
        assert Specialty.parse("Internal Medicine") == Specialty.INTERNAL_MEDICINE

    def test_unknown_maps_to_other(self):
        assert Specialty.parse("Dermatology") == Specialty.OTHER

    def test_display_names(self):
        assert Specialty.CARDIOLOGY.display_name == "Cardiology"
        assert Specialty.CARDIOLOGY.display_name_de == "Kardiologie"
        assert Specialty.EMERGENCY.display_name == "Emergency Medicine"


class TestRiskLevel:
    def test_colors(self):
        assert RiskLevel.LOW.color == "#8BC34A"
        assert RiskLevel.HIGH.color == "#FF9800"
        assert RiskLevel.NONE.color == "#9E9E9E"

    def test_string_comparison(self):
        assert RiskLevel.VERY_HIGH == "VeryHigh"


class TestInputField:
    """Tests for InputField parsing."""

    def test_type_alias_and_defaults(self):
        f = InputField.model_validate({"field": "hf", "type": "Boolean", "points": 1})
        assert f.kind == FieldKind.BOOLEAN
        assert f.required is True
        assert f.fixed_points == 1
        assert not f.is_conditional
        assert f.conditions == ()

    def test_conditional_points(self):
        f = InputField.model_validate(
            {
                "field": "age",
                "type": "number",
                "points": [{"condition": ">= 75", "points": 2}, {"condition": ">= 65", "points": 1}],
            }
        )
        assert f.is_conditional
        assert f.fixed_points is None
        assert f.conditions == (
            PointCondition(condition=">= 75", points=2),
            PointCondition(condition=">= 65", points=1),
        )

    def test_numeric_option_values_become_strings(self):
        f = InputField.model_validate(
            {
                "field": "grade",
                "type": "dropdown",
                "options": [{"value": 1, "points": 0}, {"value": 2, "points": 3}],
            }
        )
        assert f.option_values() == ["1", "2"]
        assert f.get_option("2").points == 3
        assert f.get_option("3") is None

    def test_unknown_type_rejected(self):
        with pytest.raises(ValidationError):
            InputField.model_validate({"field": "x", "type": "slider", "points": 1})

    def test_frozen(self):
        f = InputField.model_validate({"field": "hf", "type": "boolean", "points": 1})
        with pytest.raises(ValidationError):
            f.points = 2


class TestScoreDefinition:
    """Tests for ScoreDefinition parsing."""

    def test_minimal_document(self):
        d = ScoreDefinition.model_validate(
            {
                "name": "Test",
                "specialty": "Nephrology",
                "version": 1.0,
                "inputs": [{"field": "a", "type": "boolean", "points": 1}],
                "interpretation": [{"score": 0, "risk": "Low", "risk_level": "Low"}],
            }
        )
        assert d.specialty == Specialty.NEPHROLOGY
        assert d.version == "1.0"
        assert isinstance(d.inputs, tuple)
        assert d.field_names() == ["a"]
        assert d.get_field("a").kind == FieldKind.BOOLEAN
        assert d.get_field("b") is None

    def test_input_order_is_preserved(self):
        names = ["z", "a", "m"]
        d = ScoreDefinition.model_validate(
            {"name": "Order", "inputs": [{"field": n, "type": "boolean", "points": 1} for n in names]}
        )
        assert d.field_names() == names

    def test_band_score_accepts_int_and_str(self):
        assert InterpretationBand(score=2, risk="x").score == 2
        assert InterpretationBand(score="1-2", risk="x").score == "1-2"

    def test_band_risk_level_defaults_to_none(self):
        assert InterpretationBand(score=0, risk="x").risk_level == RiskLevel.NONE

    def test_unknown_risk_level_rejected(self):
        with pytest.raises(ValidationError):
            InterpretationBand(score=0, risk="x", risk_level="Extreme")

    def test_missing_name_rejected(self):
        with pytest.raises(ValidationError):
            ScoreDefinition.model_validate({"inputs": []})

    def test_metadata_is_read_only(self):
        d = ScoreDefinition.model_validate(
            {"name": "Meta", "inputs": [], "metadata": {"a": "b", "year": 2024}}
        )
        with pytest.raises(TypeError):
            d.metadata["a"] = "changed"
        assert d.metadata["a"] == "b"
        assert d.metadata["year"] == "2024"
        assert d.model_dump()["metadata"] == {"a": "b", "year": "2024"}

    def test_metadata_defaults_to_empty(self):
        d = ScoreDefinition.model_validate({"name": "Meta"})
        assert dict(d.metadata) == {}
        with pytest.raises(TypeError):
            d.metadata["a"] = "b"
