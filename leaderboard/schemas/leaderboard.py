from __future__ import annotations

from pydantic import BaseModel


class CriterionBreakdownOut(BaseModel):
    score: float
    weight: float
    contribution: float


class RankingOut(BaseModel):
    user_id: str
    challenge_id: str
    rank: int
    final_score: float
    contributions: dict[str, float]
    breakdown: dict[str, CriterionBreakdownOut]


class CalculateRankingsOut(BaseModel):
    message: str
    total_participants: int
    rankings: list[RankingOut]


class LeaderboardEntry(BaseModel):
    user_id: str
    name: str
    rank: int
    final_score: float

    logic_contribution: float
    clarity_contribution: float
    testing_contribution: float
    efficiency_contribution: float
    api_ui_contribution: float
    edge_cases_contribution: float
    creativity_contribution: float

    ai_score: float | None = None
    code_quality: float | None = None
    testing_rate: float | None = None
    logic_score: float | None = None
    clarity_score: float | None = None
    efficiency_score: float | None = None
    api_ui_score: float | None = None
    edge_cases_score: float | None = None
    creativity_score: float | None = None


class LeaderboardResponse(BaseModel):
    challenge_id: str
    total_participants: int
    leaderboard: list[LeaderboardEntry]
