from __future__ import annotations

from fastapi import Depends, HTTPException, Request

from leaderboard.core.config import Settings, get_settings
from leaderboard.storage.base import Storage


def get_storage(request: Request) -> Storage:
    return request.app.state.storage


def get_app_settings(request: Request) -> Settings:
    return getattr(request.app.state, "settings", None) or get_settings()


def require_challenge(challenge_id: str, storage: Storage = Depends(get_storage)) -> dict:
    challenge = storage.get_challenge(challenge_id)
    if challenge is None:
        raise HTTPException(status_code=404, detail="Challenge not found")
    return challenge
