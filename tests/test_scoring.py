from __future__ import annotations

import pytest

from leaderboard.services.errors import ValidationError
from leaderboard.services.scoring import (
    CriterionBreakdown,
    RankedEntry,
    ScoreResult,
    calculate_final_score,
    calculate_rankings,
    process_challenge_scores,
    round_half_up,
)


def _raw(user_id: str = "u1", challenge_id: str = "c1", **scores) -> dict:
    record = {
        "user_id": user_id,
        "challenge_id": challenge_id,
        "ai_score": 80,
        "code_quality": 80,
        "testing_rate": 0,
        "logic_score": 0,
        "clarity_score": 0,
    }
    record.update(scores)
    return record


def _result(user_id: str, final_score: float) -> ScoreResult:
    return ScoreResult(
        user_id=user_id,
        challenge_id="c1",
        final_score=final_score,
        contributions={},
        breakdown={},
    )


# ---------------------------------------------------------------------------
# Rounding
# ---------------------------------------------------------------------------

def test_round_half_up_rounds_halves_away_from_zero():
    assert round_half_up(0.125) == 0.13
    assert round_half_up(0.375) == 0.38


def test_round_half_up_rounds_below_half_down():
    assert round_half_up(0.124) == 0.12
    assert round_half_up(95.0) == 95.0
    assert round_half_up(86.5) == 86.5


# ---------------------------------------------------------------------------
# Aggregation
# ---------------------------------------------------------------------------

def test_weighted_final_score():
    weights = {"logic_weight": 0.4, "clarity_weight": 0.3, "testing_weight": 0.3, "efficiency_weight": 0.0}
    raw = _raw(logic_score=95, clarity_score=90, testing_rate=100, efficiency_score=0)

    result = calculate_final_score(raw, weights)

    assert result.final_score == 95.0
    assert result.contributions["logic"] == 38.0
    assert result.contributions["clarity"] == 27.0
    assert result.contributions["testing"] == 30.0
    assert result.contributions["efficiency"] == 0.0
    assert result.user_id == "u1"
    assert result.challenge_id == "c1"


def test_breakdown_carries_score_weight_and_contribution():
    weights = {"logic_weight": 0.4, "clarity_weight": 0.3, "testing_weight": 0.3}
    result = calculate_final_score(_raw(logic_score=95, clarity_score=90, testing_rate=100), weights)

    assert result.breakdown["logic"] == CriterionBreakdown(score=95, weight=0.4, contribution=pytest.approx(38.0))
    assert result.breakdown["creativity"].weight == 0.0
    assert set(result.breakdown) == {
        "logic",
        "clarity",
        "testing",
        "efficiency",
        "api_ui",
        "edge_cases",
        "creativity",
    }


def test_default_weights_when_none_configured():
    raw = _raw(
        logic_score=91,
        clarity_score=87,
        testing_rate=70,
        api_ui_score=80,
        edge_cases_score=75,
        creativity_score=66,
    )
    result = calculate_final_score(raw, None)

    assert result.breakdown["logic"].weight == 0.25
    assert result.breakdown["testing"].weight == 0.0
    assert result.contributions["logic"] == 22.75
    assert result.contributions["clarity"] == 26.1
    assert result.contributions["creativity"] == 6.6
    assert result.final_score == pytest.approx(82.7)


def test_contributions_are_rounded_independently_of_the_total():
    weights = {"logic_weight": 0.5, "clarity_weight": 0.5}
    result = calculate_final_score(_raw(logic_score=0.25, clarity_score=0.25), weights)

    # 0.125 + 0.125 = 0.25, while each contribution rounds up to 0.13.
    assert result.contributions == {
        "logic": 0.13,
        "clarity": 0.13,
        "testing": 0.0,
        "efficiency": 0.0,
        "api_ui": 0.0,
        "edge_cases": 0.0,
        "creativity": 0.0,
    }
    assert result.final_score == 0.25


def test_missing_optional_subscores_count_as_zero():
    weights = {"logic_weight": 0.5, "creativity_weight": 0.5}
    result = calculate_final_score(_raw(logic_score=80), weights)

    assert result.breakdown["creativity"].score == 0
    assert result.final_score == 40.0


def test_aggregate_is_deterministic():
    raw = _raw(logic_score=73, clarity_score=64, testing_rate=55)
    assert calculate_final_score(raw, None) == calculate_final_score(raw, None)


def test_invalid_weight_sum_refuses_to_aggregate():
    with pytest.raises(ValidationError) as exc_info:
        calculate_final_score(_raw(logic_score=90), {"logic_weight": 0.5, "clarity_weight": 0.6})

    assert any(e.startswith("Total weight must equal 1.0") for e in exc_info.value.errors)


def test_out_of_range_weight_refuses_to_aggregate():
    with pytest.raises(ValidationError) as exc_info:
        calculate_final_score(_raw(), {"logic_weight": 1.2, "clarity_weight": -0.2})

    assert exc_info.value.errors == [
        "logic_weight must be a number between 0 and 1",
        "clarity_weight must be a number between 0 and 1",
    ]


def test_out_of_range_score_is_never_clamped():
    with pytest.raises(ValidationError) as exc_info:
        calculate_final_score(_raw(logic_score=130), {"logic_weight": 1.0})

    assert exc_info.value.errors == ["logic_score must be a number between 0 and 100"]


def test_missing_required_score_field_refuses_to_aggregate():
    raw = _raw()
    del raw["clarity_score"]

    with pytest.raises(ValidationError) as exc_info:
        calculate_final_score(raw, None)

    assert exc_info.value.errors == ["Missing required field: clarity_score"]


# ---------------------------------------------------------------------------
# Ranking
# ---------------------------------------------------------------------------

def test_empty_input_ranks_to_empty_list():
    assert calculate_rankings([]) == []


def test_ties_share_a_rank_and_the_next_rank_skips():
    ranked = calculate_rankings([_result("a", 95.0), _result("b", 95.0), _result("c", 86.5)])

    assert [e.rank for e in ranked] == [1, 1, 3]


def test_standard_competition_ranking_pattern():
    ranked = calculate_rankings(
        [_result("a", 70.0), _result("b", 90.0), _result("c", 80.0), _result("d", 80.0), _result("e", 60.0)]
    )

    assert [(e.user_id, e.rank) for e in ranked] == [("b", 1), ("c", 2), ("d", 2), ("a", 4), ("e", 5)]


def test_every_score_tied():
    ranked = calculate_rankings([_result("a", 50.0), _result("b", 50.0), _result("c", 50.0)])

    assert [e.rank for e in ranked] == [1, 1, 1]


def test_ties_keep_arrival_order():
    ranked = calculate_rankings([_result("zed", 88.0), _result("amy", 88.0), _result("kim", 88.0)])

    assert [e.user_id for e in ranked] == ["zed", "amy", "kim"]


def test_rank_is_idempotent():
    results = [_result("a", 10.0), _result("b", 30.0), _result("c", 30.0), _result("d", 20.0)]

    assert calculate_rankings(results) == calculate_rankings(results)


def test_ranking_law_holds():
    scores = [12.5, 99.0, 45.0, 99.0, 45.0, 45.0, 0.0, 70.25]
    ranked = calculate_rankings([_result(f"u{i}", s) for i, s in enumerate(scores)])

    for i, entry in enumerate(ranked):
        if i == 0:
            assert entry.rank == 1
        elif entry.final_score != ranked[i - 1].final_score:
            assert entry.rank == i + 1
        else:
            assert entry.rank == ranked[i - 1].rank


def test_ranked_entry_keeps_score_result_fields():
    ranked = calculate_rankings([_result("a", 42.0)])

    entry = ranked[0]
    assert isinstance(entry, RankedEntry)
    assert isinstance(entry, ScoreResult)
    assert entry.to_dict() == {
        "user_id": "a",
        "challenge_id": "c1",
        "final_score": 42.0,
        "contributions": {},
        "breakdown": {},
        "rank": 1,
    }


def test_process_challenge_scores():
    weights = {"logic_weight": 0.4, "clarity_weight": 0.3, "testing_weight": 0.3}
    raw_scores = [
        _raw("carol", logic_score=80, clarity_score=85, testing_rate=95),
        _raw("alice", logic_score=95, clarity_score=90, testing_rate=100),
        _raw("bob", logic_score=95, clarity_score=90, testing_rate=100),
    ]

    ranked = process_challenge_scores(raw_scores, weights)

    assert [(e.user_id, e.final_score, e.rank) for e in ranked] == [
        ("alice", 95.0, 1),
        ("bob", 95.0, 1),
        ("carol", 86.0, 3),
    ]


def test_process_challenge_scores_with_no_scores():
    assert process_challenge_scores([], None) == []
