from __future__ import annotations

import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from leaderboard.api.router import api_router
from leaderboard.core.config import Settings, get_settings
from leaderboard.services.errors import ValidationError
from leaderboard.services.leaderboard import ChallengeNotFoundError
from leaderboard.storage import Storage, build_storage

logger = logging.getLogger(__name__)


def create_app(settings: Settings | None = None, storage: Storage | None = None) -> FastAPI:
    """Build the API. Pass ``storage`` to inject a backend instead of building one at startup."""
    settings = settings or get_settings()
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    app = FastAPI(title="Challenge Leaderboard API", version="0.1.0")
    app.state.settings = settings
    app.state.storage = storage

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.get("/")
    def root():
        return {"message": "Challenge Leaderboard API is running. See /docs or /health."}

    @app.get("/health")
    def health():
        return {"status": "ok"}

    @app.get("/api/health")
    def api_health():
        return {"status": "ok"}

    @app.exception_handler(ValidationError)
    async def _validation_error(request: Request, exc: ValidationError):
        return JSONResponse(status_code=400, content={"error": exc.message, "details": exc.errors})

    @app.exception_handler(ChallengeNotFoundError)
    async def _challenge_not_found(request: Request, exc: ChallengeNotFoundError):
        return JSONResponse(status_code=404, content={"detail": str(exc)})

    @app.on_event("startup")
    def _startup_storage():
        if app.state.storage is None:
            app.state.storage = build_storage(settings)

    @app.on_event("shutdown")
    def _shutdown_storage():
        if app.state.storage is not None:
            app.state.storage.close()
            logger.info("Storage closed")

    app.include_router(api_router)
    return app


app = create_app()
