from __future__ import annotations

from functools import lru_cache
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore", case_sensitive=False)

    # "sql" works against any SQLAlchemy URL (SQLite locally, Postgres/Supabase in
    # production). "memory" keeps everything in-process and is lost on restart.
    storage_backend: Literal["sql", "memory"] = Field(
        default="sql",
        validation_alias="STORAGE_BACKEND",
    )

    database_url: str = Field(
        default="sqlite+pysqlite:///./leaderboard.db",
        validation_alias="DATABASE_URL",
    )

    auto_create_tables: bool = Field(
        default=True,
        validation_alias="AUTO_CREATE_TABLES",
    )

    cors_origins: list[str] = Field(
        default=["http://127.0.0.1:3000", "http://localhost:3000"],
        validation_alias="CORS_ORIGINS",
    )

    log_level: str = Field(
        default="INFO",
        validation_alias="LOG_LEVEL",
    )

    leaderboard_default_limit: int = Field(
        default=100,
        validation_alias="LEADERBOARD_DEFAULT_LIMIT",
    )
    ranking_preview_size: int = Field(
        default=10,
        validation_alias="RANKING_PREVIEW_SIZE",
    )


@lru_cache
def get_settings() -> Settings:
    return Settings()
