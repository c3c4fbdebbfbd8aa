"""Tests for the klinscore command line interface."""

import json
from pathlib import Path

import pytest
from typer.testing import CliRunner

from klinscore.cli import app
from klinscore.cli._common import build_inputs, coerce_value, parse_assignments
from klinscore.definitions.schemas import FieldKind, ScoreDefinition
from klinscore.engine.calculator import calculate

SCORES_DIR = Path(__file__).resolve().parents[2] / "scores"

runner = CliRunner()

CHA2DS2_VA_ARGS = [
    "-i", "age=72",
    "-i", "heart_failure=yes",
    "-i", "hypertension=true",
    "-i", "diabetes=no",
    "-i", "stroke_tia=0",
    "-i", "vascular_disease=nein",
]


def _invoke(*args: str, scores_dir: Path = SCORES_DIR):
    return runner.invoke(app, ["--scores-dir", str(scores_dir), *args])


# ── Input helpers ────────────────────────────────────────────────────


class TestCoerceValue:
    @pytest.mark.parametrize("raw", ["yes", "TRUE", "1", "ja", " y "])
    def test_boolean_true_tokens(self, raw):
        assert coerce_value(FieldKind.BOOLEAN, raw) is True

    @pytest.mark.parametrize("raw", ["no", "False", "0", "nein", "off"])
    def test_boolean_false_tokens(self, raw):
        assert coerce_value(FieldKind.BOOLEAN, raw) is False

    def test_unknown_boolean_token_is_returned_unchanged(self):
        assert coerce_value(FieldKind.BOOLEAN, "maybe") == "maybe"

    def test_numbers(self):
        assert coerce_value(FieldKind.NUMBER, "72") == 72
        assert coerce_value(FieldKind.NUMBER, "1.5") == 1.5
        assert coerce_value(FieldKind.NUMBER, "38,5") == 38.5
        assert coerce_value(FieldKind.NUMBER, "abc") == "abc"

    def test_dropdown_is_stripped(self):
        assert coerce_value(FieldKind.DROPDOWN, " mild ") == "mild"

    def test_non_strings_pass_through(self):
        assert coerce_value(FieldKind.BOOLEAN, True) is True
        assert coerce_value(FieldKind.NUMBER, 3.2) == 3.2

    def test_numeric_dropdown_values_become_tokens(self):
        assert coerce_value(FieldKind.DROPDOWN, 2) == "2"
        assert coerce_value(FieldKind.DROPDOWN, 2.5) == "2.5"
        assert coerce_value(FieldKind.DROPDOWN, True) is True

    @pytest.mark.parametrize("raw", ["1,200", "1.200,5", "1,200.5", "1,2,3", "12,345"])
    def test_possible_digit_grouping_is_not_read_as_decimal(self, raw):
        assert coerce_value(FieldKind.NUMBER, raw) == raw

    def test_decimal_comma_with_leading_zero(self):
        assert coerce_value(FieldKind.NUMBER, "0,125") == 0.125


class TestParseAssignments:
    def test_pairs(self):
        assert parse_assignments(["age=72", "note=a=b"]) == {"age": "72", "note": "a=b"}

    @pytest.mark.parametrize("item", ["age", "=72"])
    def test_invalid(self, item):
        with pytest.raises(ValueError, match="expected field=value"):
            parse_assignments([item])


class TestBuildInputs:
    def test_file_and_assignments_merge(self, stroke_definition, write_yaml):
        path = write_yaml("inputs.yaml", "age: 80\nheart_failure: true\nhypertension: false\n")
        inputs = build_inputs(stroke_definition, ["age=70", "extra=1"], path)
        assert inputs == {"age": 70, "heart_failure": True, "hypertension": False, "extra": "1"}

    def test_missing_file(self, stroke_definition, tmp_path):
        with pytest.raises(ValueError, match="not found"):
            build_inputs(stroke_definition, [], tmp_path / "nope.yaml")

    def test_numeric_dropdown_value_from_file_scores(self, write_yaml):
        definition = ScoreDefinition.model_validate(
            {
                "name": "Grade",
                "inputs": [
                    {
                        "field": "grade",
                        "type": "dropdown",
                        "options": [{"value": 1, "points": 0}, {"value": 2, "points": 3}],
                    }
                ],
            }
        )
        path = write_yaml("inputs.yaml", "grade: 2\n")
        inputs = build_inputs(definition, [], path)
        assert inputs == {"grade": "2"}
        assert calculate(definition, inputs).total == 3


# ── Commands ────────────────────────────────────────────────────────


class TestCalculateCommand:
    def test_json_output(self):
        result = _invoke("-q", "--json", "calculate", "cha2ds2_va", *CHA2DS2_VA_ARGS)
        assert result.exit_code == 0, result.output
        data = json.loads(result.stdout)
        assert data["score_id"] == "cha2ds2_va"
        assert data["total"] == 3
        assert data["matched_band"]["risk"] == "Moderate-High"
        assert [c["field"] for c in data["contributions"]][:2] == ["age", "heart_failure"]

    def test_text_output(self):
        result = _invoke("-q", "calculate", "cha2ds2_va", *CHA2DS2_VA_ARGS)
        assert result.exit_code == 0, result.output
        assert "Total: 3" in result.output
        assert "Moderate-High" in result.output

    def test_inputs_file(self, write_yaml):
        path = write_yaml(
            "inputs.yaml",
            "bilirubin: 40\nalbumin: 30\ninr: 1.5\nascites: mild\nencephalopathy: none\n",
        )
        result = _invoke("-q", "--json", "calculate", "child_pugh", "-f", str(path))
        assert result.exit_code == 0, result.output
        assert json.loads(result.stdout)["total"] == 8

    def test_missing_field_reports_error(self):
        result = _invoke("-q", "--json", "calculate", "cha2ds2_va", "-i", "age=72")
        assert result.exit_code == 1
        data = json.loads(result.stdout)
        assert data["error"] == "MissingFieldError"
        assert data["field"] == "heart_failure"

    def test_out_of_range(self):
        args = [a.replace("age=72", "age=150") for a in CHA2DS2_VA_ARGS]
        result = _invoke("-q", "calculate", "cha2ds2_va", *args)
        assert result.exit_code == 1
        assert "out of range" in result.output

    def test_grouped_number_is_rejected(self):
        result = _invoke(
            "-q", "--json", "calculate", "curb65",
            "-i", "confusion=no", "-i", "urea=1,200", "-i", "respiratory_rate=18",
            "-i", "low_blood_pressure=no", "-i", "age=40",
        )
        assert result.exit_code == 1
        data = json.loads(result.stdout)
        assert data["error"] == "TypeMismatchError"
        assert data["field"] == "urea"

    def test_unknown_score(self):
        result = _invoke("-q", "calculate", "does_not_exist", "-i", "a=1")
        assert result.exit_code == 1
        assert "Score not found" in result.output

    def test_bad_assignment(self):
        result = _invoke("-q", "calculate", "cha2ds2_va", "-i", "age")
        assert result.exit_code == 1
        assert "expected field=value" in result.output

    def test_missing_scores_dir(self, tmp_path):
        result = _invoke("-q", "calculate", "cha2ds2_va", scores_dir=tmp_path / "missing")
        assert result.exit_code == 1
        assert "No scores directory" in result.output


class TestListAndShow:
    def test_list_json(self):
        result = _invoke("-q", "--json", "list")
        assert result.exit_code == 0, result.output
        rows = json.loads(result.stdout)
        assert [r["id"] for r in rows] == ["cha2ds2_va", "child_pugh", "curb65"]
        assert rows[0]["specialty"] == "Cardiology"

    def test_list_by_specialty(self):
        result = _invoke("-q", "--json", "list", "--specialty", "emergency")
        assert result.exit_code == 0, result.output
        assert [r["id"] for r in json.loads(result.stdout)] == ["curb65"]

    def test_show_json(self):
        result = _invoke("-q", "--json", "show", "curb65")
        assert result.exit_code == 0, result.output
        data = json.loads(result.stdout)
        assert data["name"] == "CURB-65"
        assert data["inputs"][0]["type"] == "boolean"

    def test_show_text(self):
        result = _invoke("-q", "show", "cha2ds2_va")
        assert result.exit_code == 0, result.output
        assert "heart_failure" in result.output
        assert ">= 75 -> 2" in result.output

    def test_show_unknown(self):
        result = _invoke("-q", "show", "nope")
        assert result.exit_code == 1


class TestValidateCommand:
    def test_bundled_scores_are_valid(self):
        result = _invoke("-q", "--json", "validate", str(SCORES_DIR))
        assert result.exit_code == 0, result.output
        data = json.loads(result.stdout)
        assert data["invalid"] == 0
        assert len(data["files"]) == 3

    def test_reports_all_errors(self, tmp_path, write_yaml):
        write_yaml(
            "broken.yaml",
            "name: Broken\n"
            "inputs:\n"
            "  - field: grade\n"
            "    type: dropdown\n"
            "  - field: grade\n"
            "    type: boolean\n"
            "    points: 1\n"
            "interpretation:\n"
            "  - score: 'two'\n"
            "    risk: High\n",
        )
        result = _invoke("-q", "--json", "validate", str(tmp_path))
        assert result.exit_code == 1
        data = json.loads(result.stdout)
        assert data["invalid"] == 1
        locations = [e["location"] for e in data["files"][0]["errors"]]
        assert locations == ["inputs[0].options", "inputs", "interpretation[0].score"]

    def test_missing_path(self, tmp_path):
        result = _invoke("-q", "validate", str(tmp_path / "missing"))
        assert result.exit_code == 1
        assert "Path not found" in result.output
