"""Caller-side workflow around the scoring engine.

Every change to a challenge's scores or weights is followed by a full
recomputation of that challenge's rankings. The read-score-set, rank and
persist steps run under a per-challenge lock so concurrent submissions to the
same challenge cannot interleave with a recompute.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Iterator, Mapping
from contextlib import contextmanager
from typing import Any

from leaderboard.services.criteria import (
    DEFAULT_WEIGHTS,
    ensure_valid_criteria,
    ensure_valid_raw_score,
    resolve_weights,
)
from leaderboard.services.errors import ValidationError
from leaderboard.services.scoring import RankedEntry, process_challenge_scores
from leaderboard.storage.base import Storage

logger = logging.getLogger(__name__)


class ChallengeNotFoundError(LookupError):
    def __init__(self, challenge_id: str):
        self.challenge_id = challenge_id
        super().__init__(f"Challenge not found: {challenge_id}")


class ChallengeLocks:
    def __init__(self) -> None:
        self._guard = threading.Lock()
        self._locks: dict[str, threading.Lock] = {}

    @contextmanager
    def hold(self, challenge_id: str) -> Iterator[None]:
        with self._guard:
            lock = self._locks.setdefault(challenge_id, threading.Lock())
        with lock:
            yield

    def discard(self, challenge_id: str) -> None:
        """Forget a challenge's lock. Holders of the old lock finish undisturbed."""
        with self._guard:
            self._locks.pop(challenge_id, None)

    def __contains__(self, challenge_id: object) -> bool:
        with self._guard:
            return challenge_id in self._locks


_locks = ChallengeLocks()


def _require_challenge(storage: Storage, challenge_id: str) -> None:
    if storage.get_challenge(challenge_id) is None:
        raise ChallengeNotFoundError(challenge_id)


def effective_weights(storage: Storage, challenge_id: str) -> dict[str, float]:
    """The challenge's configured weights, or the defaults when none are set."""
    weights = storage.get_weights(challenge_id)
    return dict(weights) if weights else dict(DEFAULT_WEIGHTS)


def _recalculate(storage: Storage, challenge_id: str) -> list[RankedEntry]:
    weights = effective_weights(storage, challenge_id)
    scores = storage.get_all_scores(challenge_id)
    rankings = process_challenge_scores(scores, weights)

    storage.replace_rankings(challenge_id, rankings)

    logger.info("Recalculated %d rankings for challenge %s", len(rankings), challenge_id)
    return rankings


def recalculate_rankings(storage: Storage, challenge_id: str) -> list[RankedEntry]:
    with _locks.hold(challenge_id):
        return _recalculate(storage, challenge_id)


def submit_score(storage: Storage, record: Mapping[str, Any]) -> dict:
    try:
        ensure_valid_raw_score(record)
    except ValidationError as exc:
        logger.warning("Rejected score submission for user %r: %s", record.get("user_id"), exc.errors)
        raise

    challenge_id = record["challenge_id"]
    _require_challenge(storage, challenge_id)

    with _locks.hold(challenge_id):
        if storage.get_user(record["user_id"]) is None:
            storage.create_user(record["user_id"], record.get("name") or record["user_id"], record.get("email"))
        stored = storage.submit_score(record)
        _recalculate(storage, challenge_id)
    return stored


def set_weights(storage: Storage, challenge_id: str, weights: Mapping[str, Any]) -> dict:
    ensure_valid_criteria(weights)
    _require_challenge(storage, challenge_id)

    with _locks.hold(challenge_id):
        stored = storage.set_weights(challenge_id, resolve_weights(weights))
        _recalculate(storage, challenge_id)
    return stored


def remove_user(storage: Storage, challenge_id: str, user_id: str) -> list[RankedEntry]:
    with _locks.hold(challenge_id):
        storage.delete_user(challenge_id, user_id)
        logger.info("Removed user %s from challenge %s", user_id, challenge_id)
        return _recalculate(storage, challenge_id)


def clear_leaderboard(storage: Storage, challenge_id: str) -> None:
    with _locks.hold(challenge_id):
        storage.clear_leaderboard(challenge_id)
    logger.info("Cleared leaderboard for challenge %s", challenge_id)


def delete_challenge(storage: Storage, challenge_id: str) -> None:
    with _locks.hold(challenge_id):
        storage.delete_challenge(challenge_id)
        _locks.discard(challenge_id)
    logger.info("Deleted challenge %s", challenge_id)


def filter_leaderboard(rows: list[dict], search: str | None) -> list[dict]:
    if not search:
        return rows
    needle = search.lower()
    return [r for r in rows if needle in (r.get("name") or "").lower() or needle in r["user_id"].lower()]
