from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field


class ScoreSubmitIn(BaseModel):
    # Required-ness, type and the 0-100 range are enforced by validate_raw_score,
    # so scores stay loosely typed and a bad value comes back in the 400 details.
    user_id: str | None = Field(default=None, max_length=100)
    challenge_id: str | None = Field(default=None, max_length=100)
    name: str | None = Field(default=None, max_length=200)
    email: str | None = Field(default=None, max_length=255)

    ai_score: Any = None
    code_quality: Any = None
    testing_rate: Any = None
    logic_score: Any = None
    clarity_score: Any = None
    efficiency_score: Any = None
    api_ui_score: Any = None
    edge_cases_score: Any = None
    creativity_score: Any = None


class ScoreOut(BaseModel):
    user_id: str
    challenge_id: str

    ai_score: float
    code_quality: float
    testing_rate: float
    logic_score: float
    clarity_score: float
    efficiency_score: float
    api_ui_score: float
    edge_cases_score: float
    creativity_score: float

    submitted_at: datetime | None = None
