"""
Pytest fixtures shared by the klinscore tests.
"""

from pathlib import Path

import pytest

from klinscore.definitions.schemas import ScoreDefinition

REPO_ROOT = Path(__file__).resolve().parents[1]


@pytest.fixture
def bundled_scores_dir() -> Path:
    """The score definitions shipped with the repository."""
    return REPO_ROOT / "scores"


@pytest.fixture
def stroke_definition() -> ScoreDefinition:
    """Stroke-risk style score: conditional age plus two boolean risk factors."""
    return ScoreDefinition.model_validate(
        {
            "name": "Stroke Risk",
            "specialty": "Cardiology",
            "version": "1.0",
            "inputs": [
                {
                    "field": "age",
                    "type": "number",
                    "label": "Age",
                    "min": 18,
                    "max": 120,
                    "points": [
                        {"condition": ">= 75", "points": 2},
                        {"condition": ">= 65", "points": 1},
                    ],
                },
                {"field": "heart_failure", "type": "boolean", "label": "Heart failure", "points": 1},
                {"field": "hypertension", "type": "boolean", "label": "Hypertension", "points": 1},
            ],
            "interpretation": [
                {"score": 0, "risk": "Low", "risk_level": "Low", "recommendation": "No therapy"},
                {"score": "1", "risk": "Low-Moderate", "risk_level": "Moderate", "recommendation": "Consider therapy"},
                {"score": ">=2", "risk": "Moderate-High", "risk_level": "High", "recommendation": "Therapy recommended"},
            ],
        }
    )


@pytest.fixture
def write_yaml(tmp_path):
    """Write YAML text to a file under tmp_path and return its path."""

    def _write(relative: str, content: str) -> Path:
        path = tmp_path / relative
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding="utf-8")
        return path

    return _write
