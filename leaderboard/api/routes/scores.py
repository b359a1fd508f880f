from __future__ import annotations

from fastapi import APIRouter, Depends

from leaderboard.api.deps import get_storage
from leaderboard.schemas.scores import ScoreOut, ScoreSubmitIn
from leaderboard.services import leaderboard as workflow
from leaderboard.storage.base import Storage


router = APIRouter(prefix="/scores")


@router.post("", response_model=ScoreOut, status_code=201)
def submit_score(payload: ScoreSubmitIn, storage: Storage = Depends(get_storage)):
    stored = workflow.submit_score(storage, payload.model_dump(exclude_none=True))
    return ScoreOut(**stored)
