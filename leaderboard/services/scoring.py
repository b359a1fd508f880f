from __future__ import annotations

import math
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, fields
from typing import Any

from leaderboard.services.criteria import (
    CRITERIA,
    ensure_valid_criteria,
    ensure_valid_raw_score,
    resolve_weights,
)


def round_half_up(value: float) -> float:
    """Round to 2 decimals by scaling to hundredths, rounding half up, and scaling back.

    Not ``round()``: 0.125 must become 0.13.
    """
    return math.floor(value * 100 + 0.5) / 100


@dataclass(frozen=True)
class CriterionBreakdown:
    score: float
    weight: float
    contribution: float


@dataclass(frozen=True)
class ScoreResult:
    user_id: str
    challenge_id: str
    final_score: float
    contributions: dict[str, float]
    breakdown: dict[str, CriterionBreakdown]

    def to_dict(self) -> dict:
        return {
            "user_id": self.user_id,
            "challenge_id": self.challenge_id,
            "final_score": self.final_score,
            "contributions": dict(self.contributions),
            "breakdown": {
                name: {"score": b.score, "weight": b.weight, "contribution": b.contribution}
                for name, b in self.breakdown.items()
            },
        }


@dataclass(frozen=True)
class RankedEntry(ScoreResult):
    rank: int

    @classmethod
    def from_result(cls, result: ScoreResult, rank: int) -> RankedEntry:
        values = {f.name: getattr(result, f.name) for f in fields(ScoreResult)}
        return cls(rank=rank, **values)

    def to_dict(self) -> dict:
        data = super().to_dict()
        data["rank"] = self.rank
        return data


def calculate_final_score(raw: Mapping[str, Any], weights: Mapping[str, Any] | None) -> ScoreResult:
    ensure_valid_raw_score(raw)
    resolved = resolve_weights(weights)
    ensure_valid_criteria(resolved)

    breakdown: dict[str, CriterionBreakdown] = {}
    for criterion in CRITERIA:
        score = raw.get(criterion.score_field) or 0
        weight = resolved[criterion.weight_field]
        breakdown[criterion.name] = CriterionBreakdown(
            score=score,
            weight=weight,
            contribution=score * weight,
        )

    final_score = sum(b.contribution for b in breakdown.values())

    return ScoreResult(
        user_id=raw["user_id"],
        challenge_id=raw["challenge_id"],
        final_score=round_half_up(final_score),
        contributions={name: round_half_up(b.contribution) for name, b in breakdown.items()},
        breakdown=breakdown,
    )


def calculate_rankings(results: Iterable[ScoreResult]) -> list[RankedEntry]:
    # sorted() is stable under reverse=True, so exact ties keep their arrival order.
    ordered = sorted(results, key=lambda r: r.final_score, reverse=True)

    ranked: list[RankedEntry] = []
    current_rank = 1
    previous_score: float | None = None

    for position, result in enumerate(ordered, start=1):
        if previous_score is not None and result.final_score != previous_score:
            current_rank = position
        ranked.append(RankedEntry.from_result(result, current_rank))
        previous_score = result.final_score

    return ranked


def process_challenge_scores(
    raw_scores: Iterable[Mapping[str, Any]],
    weights: Mapping[str, Any] | None,
) -> list[RankedEntry]:
    return calculate_rankings(calculate_final_score(raw, weights) for raw in raw_scores)
