from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Query

from leaderboard.api.deps import get_app_settings, get_storage
from leaderboard.core.config import Settings
from leaderboard.schemas.challenges import MessageOut
from leaderboard.schemas.leaderboard import LeaderboardEntry, LeaderboardResponse
from leaderboard.services import leaderboard as workflow
from leaderboard.storage.base import Storage


router = APIRouter(prefix="/challenges")


@router.get("/{challenge_id}/leaderboard", response_model=LeaderboardResponse)
def get_leaderboard(
    challenge_id: str,
    limit: int | None = Query(None, ge=1, le=1000),
    search: str | None = Query(None),
    storage: Storage = Depends(get_storage),
    settings: Settings = Depends(get_app_settings),
):
    rows = storage.get_leaderboard(challenge_id, limit or settings.leaderboard_default_limit)
    rows = workflow.filter_leaderboard(rows, search)

    return LeaderboardResponse(
        challenge_id=challenge_id,
        total_participants=len(rows),
        leaderboard=[LeaderboardEntry(**r) for r in rows],
    )


@router.delete("/{challenge_id}/leaderboard", response_model=MessageOut)
def clear_leaderboard(challenge_id: str, storage: Storage = Depends(get_storage)):
    workflow.clear_leaderboard(storage, challenge_id)
    return MessageOut(message="Leaderboard cleared successfully")


@router.get("/{challenge_id}/users/{user_id}/ranking", response_model=LeaderboardEntry)
def get_user_ranking(challenge_id: str, user_id: str, storage: Storage = Depends(get_storage)):
    rows = storage.get_leaderboard(challenge_id, limit=1000)
    row = next((r for r in rows if r["user_id"] == user_id), None)
    if row is None:
        raise HTTPException(status_code=404, detail="User ranking not found for this challenge")
    return LeaderboardEntry(**row)


@router.delete("/{challenge_id}/users/{user_id}", response_model=MessageOut)
def delete_user(challenge_id: str, user_id: str, storage: Storage = Depends(get_storage)):
    workflow.remove_user(storage, challenge_id, user_id)
    return MessageOut(message="User deleted successfully and rankings updated")
