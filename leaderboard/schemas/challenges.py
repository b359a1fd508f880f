from __future__ import annotations

from datetime import datetime

from pydantic import AliasChoices, BaseModel, Field


class ChallengeCreateIn(BaseModel):
    challenge_id: str = Field(
        min_length=1,
        max_length=100,
        validation_alias=AliasChoices("challenge_id", "challengeId"),
    )
    title: str = Field(min_length=1, max_length=200)
    description: str | None = None


class ChallengeOut(BaseModel):
    challenge_id: str
    title: str
    description: str | None = None
    created_at: datetime | None = None


class ChallengeListOut(BaseModel):
    challenges: list[ChallengeOut]


class MessageOut(BaseModel):
    message: str
