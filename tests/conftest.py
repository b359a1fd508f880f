from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from leaderboard.core.config import Settings
from leaderboard.db.session import make_engine
from leaderboard.main import create_app
from leaderboard.storage import MemoryStorage, SqlStorage


@pytest.fixture(params=["memory", "sql"])
def storage(request):
    if request.param == "memory":
        backend = MemoryStorage()
    else:
        backend = SqlStorage(make_engine("sqlite+pysqlite:///:memory:"))
    yield backend
    backend.close()


@pytest.fixture()
def client(storage):
    settings = Settings(STORAGE_BACKEND="memory", LOG_LEVEL="WARNING")
    return TestClient(create_app(settings=settings, storage=storage))
