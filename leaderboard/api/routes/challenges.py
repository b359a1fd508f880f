from __future__ import annotations

from fastapi import APIRouter, Depends

from leaderboard.api.deps import get_app_settings, get_storage, require_challenge
from leaderboard.core.config import Settings
from leaderboard.schemas.challenges import ChallengeCreateIn, ChallengeListOut, ChallengeOut, MessageOut
from leaderboard.schemas.criteria import CriteriaIn, CriteriaOut
from leaderboard.schemas.leaderboard import CalculateRankingsOut, RankingOut
from leaderboard.services import leaderboard as workflow
from leaderboard.storage.base import Storage


router = APIRouter(prefix="/challenges")


@router.post("", response_model=ChallengeOut, status_code=201)
def create_challenge(payload: ChallengeCreateIn, storage: Storage = Depends(get_storage)):
    challenge = storage.create_challenge(payload.challenge_id, payload.title, payload.description)
    return ChallengeOut(**challenge)


@router.get("", response_model=ChallengeListOut)
def list_challenges(storage: Storage = Depends(get_storage)):
    return ChallengeListOut(challenges=[ChallengeOut(**c) for c in storage.list_challenges()])


@router.delete("/{challenge_id}", response_model=MessageOut)
def delete_challenge(challenge_id: str, storage: Storage = Depends(get_storage)):
    workflow.delete_challenge(storage, challenge_id)
    return MessageOut(message="Challenge deleted successfully")


@router.post("/{challenge_id}/criteria", response_model=CriteriaOut, status_code=201)
def set_criteria(
    challenge_id: str,
    payload: CriteriaIn,
    storage: Storage = Depends(get_storage),
):
    stored = workflow.set_weights(storage, challenge_id, payload.model_dump(exclude_none=True))
    return CriteriaOut(**stored)


@router.get("/{challenge_id}/criteria", response_model=CriteriaOut)
def get_criteria(
    challenge_id: str,
    _challenge: dict = Depends(require_challenge),
    storage: Storage = Depends(get_storage),
):
    configured = storage.get_weights(challenge_id)
    weights = workflow.effective_weights(storage, challenge_id)
    return CriteriaOut(challenge_id=challenge_id, is_default=configured is None, **weights)


@router.post("/{challenge_id}/calculate-rankings", response_model=CalculateRankingsOut)
def calculate_rankings(
    challenge_id: str,
    _challenge: dict = Depends(require_challenge),
    storage: Storage = Depends(get_storage),
    settings: Settings = Depends(get_app_settings),
):
    rankings = workflow.recalculate_rankings(storage, challenge_id)
    return CalculateRankingsOut(
        message="Rankings calculated successfully",
        total_participants=len(rankings),
        rankings=[RankingOut(**entry.to_dict()) for entry in rankings[: settings.ranking_preview_size]],
    )
