from __future__ import annotations

import logging

from leaderboard.core.config import Settings
from leaderboard.db.session import get_engine
from leaderboard.storage.base import Storage
from leaderboard.storage.memory import MemoryStorage
from leaderboard.storage.sql import SqlStorage

logger = logging.getLogger(__name__)

__all__ = ["MemoryStorage", "SqlStorage", "Storage", "build_storage"]


def build_storage(settings: Settings) -> Storage:
    """Construct the storage backend selected by configuration. Called once at startup."""
    if settings.storage_backend == "memory":
        logger.info("Using in-memory storage")
        return MemoryStorage()

    logger.info("Using SQL storage at %s", get_engine(settings.database_url).url.render_as_string(hide_password=True))
    return SqlStorage(get_engine(settings.database_url), create_tables=settings.auto_create_tables)
