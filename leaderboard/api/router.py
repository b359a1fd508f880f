from __future__ import annotations

from fastapi import APIRouter

from leaderboard.api.routes import challenges, leaderboard, scores


api_router = APIRouter(prefix="/api")

api_router.include_router(challenges.router, tags=["challenges"])
api_router.include_router(scores.router, tags=["scores"])
api_router.include_router(leaderboard.router, tags=["leaderboard"])
