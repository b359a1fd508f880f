from __future__ import annotations

import pytest

from leaderboard.services.criteria import (
    DEFAULT_WEIGHTS,
    WEIGHT_FIELDS,
    ensure_valid_criteria,
    ensure_valid_raw_score,
    resolve_weights,
    validate_criteria,
    validate_raw_score,
)
from leaderboard.services.errors import ValidationError


def test_default_weights_sum_to_one():
    assert sum(DEFAULT_WEIGHTS.values()) == pytest.approx(1.0)
    assert validate_criteria(DEFAULT_WEIGHTS) == []


def test_partial_weight_set_counts_missing_as_zero():
    assert validate_criteria({"logic_weight": 1.0}) == []
    assert validate_criteria({"logic_weight": 0.4, "clarity_weight": 0.3, "testing_weight": 0.3}) == []


def test_sum_violation_is_reported():
    errors = validate_criteria({"logic_weight": 0.5, "clarity_weight": 0.6})
    assert len(errors) == 1
    assert errors[0].startswith("Total weight must equal 1.0, got 1.1")


def test_empty_weight_set_fails_the_sum_check():
    errors = validate_criteria({})
    assert errors == ["Total weight must equal 1.0, got 0"]


def test_sum_within_tolerance_is_accepted():
    assert validate_criteria({"logic_weight": 0.5, "clarity_weight": 0.495}) == []
    assert validate_criteria({"logic_weight": 0.5, "clarity_weight": 0.505}) == []


def test_sum_exactly_on_the_tolerance_edge_is_accepted():
    assert validate_criteria({"logic_weight": 0.5, "clarity_weight": 0.49}) == []
    assert validate_criteria({"logic_weight": 0.5, "clarity_weight": 0.51}) == []


def test_sum_outside_tolerance_is_rejected():
    assert validate_criteria({"logic_weight": 0.5, "clarity_weight": 0.48}) != []
    assert validate_criteria({"logic_weight": 0.5, "clarity_weight": 0.52}) != []


def test_all_range_errors_are_collected():
    errors = validate_criteria({"logic_weight": 1.5, "clarity_weight": -0.5})
    assert errors == [
        "logic_weight must be a number between 0 and 1",
        "clarity_weight must be a number between 0 and 1",
    ]


def test_range_and_sum_errors_come_back_together():
    errors = validate_criteria({"logic_weight": 1.5, "creativity_weight": 0.2})
    assert "logic_weight must be a number between 0 and 1" in errors
    assert any(e.startswith("Total weight must equal 1.0") for e in errors)


@pytest.mark.parametrize("bad", ["0.5", True, float("nan"), [0.5]])
def test_non_numeric_weight_is_rejected(bad):
    errors = validate_criteria({"logic_weight": bad, "clarity_weight": 1.0})
    assert errors == ["logic_weight must be a number between 0 and 1"]


def test_none_weight_is_treated_as_absent():
    assert validate_criteria({"logic_weight": None, "clarity_weight": 1.0}) == []


def test_unknown_weight_names_are_ignored():
    assert validate_criteria({"logic_weight": 1.0, "speed_weight": 5}) == []


def test_ensure_valid_criteria_raises_with_full_list():
    with pytest.raises(ValidationError) as exc_info:
        ensure_valid_criteria({"logic_weight": 2.0, "clarity_weight": 0.6})

    assert len(exc_info.value.errors) == 2
    assert exc_info.value.message == "Invalid criteria"


def test_resolve_weights_falls_back_to_defaults():
    assert resolve_weights(None) == DEFAULT_WEIGHTS
    assert resolve_weights({}) == DEFAULT_WEIGHTS


def test_resolve_weights_fills_omitted_names_with_zero():
    resolved = resolve_weights({"logic_weight": 0.6, "clarity_weight": 0.4})
    assert set(resolved) == set(WEIGHT_FIELDS)
    assert resolved["logic_weight"] == 0.6
    assert resolved["api_ui_weight"] == 0.0


def _raw(**overrides):
    record = {
        "user_id": "u1",
        "challenge_id": "c1",
        "ai_score": 90,
        "code_quality": 85,
        "testing_rate": 70,
        "logic_score": 95,
        "clarity_score": 88,
    }
    record.update(overrides)
    return record


def test_valid_raw_score():
    assert validate_raw_score(_raw()) == []
    assert validate_raw_score(_raw(efficiency_score=0, creativity_score=100)) == []


def test_missing_required_fields_are_named():
    errors = validate_raw_score({})
    assert errors == [
        "Missing required field: user_id",
        "Missing required field: challenge_id",
        "Missing required field: ai_score",
        "Missing required field: code_quality",
        "Missing required field: testing_rate",
        "Missing required field: logic_score",
        "Missing required field: clarity_score",
    ]


def test_out_of_range_scores_are_all_reported():
    errors = validate_raw_score(_raw(logic_score=101, api_ui_score=-1, creativity_score="high"))
    assert errors == [
        "logic_score must be a number between 0 and 100",
        "api_ui_score must be a number between 0 and 100",
        "creativity_score must be a number between 0 and 100",
    ]


def test_missing_and_out_of_range_are_reported_together():
    record = _raw(clarity_score=None, testing_rate=150)
    errors = validate_raw_score(record)
    assert errors == [
        "Missing required field: clarity_score",
        "testing_rate must be a number between 0 and 100",
    ]


def test_ensure_valid_raw_score_raises():
    with pytest.raises(ValidationError) as exc_info:
        ensure_valid_raw_score(_raw(logic_score=120))

    assert exc_info.value.errors == ["logic_score must be a number between 0 and 100"]
    assert "logic_score" in str(exc_info.value)
