from __future__ import annotations

import threading
from collections.abc import Iterable, Mapping
from datetime import datetime
from typing import Any

from leaderboard.services.criteria import SCORE_FIELDS, WEIGHT_FIELDS
from leaderboard.services.scoring import RankedEntry
from leaderboard.storage.base import Storage, leaderboard_row


def _ranking_row(entry: RankedEntry) -> dict:
    return {
        "user_id": entry.user_id,
        "challenge_id": entry.challenge_id,
        "final_score": entry.final_score,
        "rank": entry.rank,
        "contributions": dict(entry.contributions),
        "calculated_at": datetime.utcnow(),
    }


class MemoryStorage(Storage):
    """Process-local storage. Nothing survives a restart."""

    def __init__(self) -> None:
        self._lock = threading.RLock()
        self._users: dict[str, dict] = {}
        self._challenges: dict[str, dict] = {}
        self._weights: dict[str, dict] = {}
        # Keyed by (challenge_id, user_id); dict order is first-submission order.
        self._scores: dict[tuple[str, str], dict] = {}
        self._rankings: dict[tuple[str, str], dict] = {}

    def create_user(self, user_id: str, name: str, email: str | None = None) -> dict:
        with self._lock:
            user = {"user_id": user_id, "name": name, "email": email, "created_at": datetime.utcnow()}
            self._users[user_id] = user
            return dict(user)

    def get_user(self, user_id: str) -> dict | None:
        with self._lock:
            user = self._users.get(user_id)
            return dict(user) if user is not None else None

    def create_challenge(self, challenge_id: str, title: str, description: str | None = None) -> dict:
        with self._lock:
            challenge = {
                "challenge_id": challenge_id,
                "title": title,
                "description": description,
                "created_at": datetime.utcnow(),
            }
            self._challenges.pop(challenge_id, None)
            self._challenges[challenge_id] = challenge
            return dict(challenge)

    def get_challenge(self, challenge_id: str) -> dict | None:
        with self._lock:
            challenge = self._challenges.get(challenge_id)
            return dict(challenge) if challenge is not None else None

    def list_challenges(self) -> list[dict]:
        with self._lock:
            return [dict(c) for c in reversed(self._challenges.values())]

    def set_weights(self, challenge_id: str, weights: Mapping[str, float]) -> dict:
        with self._lock:
            stored = {field: float(weights.get(field) or 0.0) for field in WEIGHT_FIELDS}
            self._weights[challenge_id] = stored
            return {"challenge_id": challenge_id, **stored}

    def get_weights(self, challenge_id: str) -> dict | None:
        with self._lock:
            weights = self._weights.get(challenge_id)
            return dict(weights) if weights is not None else None

    def submit_score(self, record: Mapping[str, Any]) -> dict:
        with self._lock:
            score = {"user_id": record["user_id"], "challenge_id": record["challenge_id"]}
            for field in SCORE_FIELDS:
                score[field] = float(record.get(field) or 0.0)
            score["submitted_at"] = datetime.utcnow()
            self._scores[(record["challenge_id"], record["user_id"])] = score
            return dict(score)

    def get_all_scores(self, challenge_id: str) -> list[dict]:
        with self._lock:
            return [dict(s) for (cid, _), s in self._scores.items() if cid == challenge_id]

    def save_ranked_entry(self, entry: RankedEntry) -> None:
        with self._lock:
            self._rankings[(entry.challenge_id, entry.user_id)] = _ranking_row(entry)

    def clear_rankings(self, challenge_id: str) -> None:
        with self._lock:
            self._drop(self._rankings, challenge_id)

    def replace_rankings(self, challenge_id: str, entries: Iterable[RankedEntry]) -> None:
        rows = {(challenge_id, e.user_id): _ranking_row(e) for e in entries}
        with self._lock:
            self._drop(self._rankings, challenge_id)
            self._rankings.update(rows)

    def get_leaderboard(self, challenge_id: str, limit: int = 100) -> list[dict]:
        with self._lock:
            rows = []
            for (cid, user_id), ranking in self._rankings.items():
                if cid != challenge_id:
                    continue
                user = self._users.get(user_id)
                raw = self._scores.get((cid, user_id))
                if user is None or raw is None:
                    continue
                rows.append(leaderboard_row(ranking, user["name"], raw))
            rows.sort(key=lambda r: r["rank"])
            return rows[:limit]

    def clear_leaderboard(self, challenge_id: str) -> None:
        with self._lock:
            self._drop(self._scores, challenge_id)
            self._drop(self._rankings, challenge_id)

    def delete_challenge(self, challenge_id: str) -> None:
        with self._lock:
            self.clear_leaderboard(challenge_id)
            self._weights.pop(challenge_id, None)
            self._challenges.pop(challenge_id, None)

    def delete_user(self, challenge_id: str, user_id: str) -> None:
        with self._lock:
            self._scores.pop((challenge_id, user_id), None)
            self._rankings.pop((challenge_id, user_id), None)

    @staticmethod
    def _drop(table: dict[tuple[str, str], dict], challenge_id: str) -> None:
        for key in [k for k in table if k[0] == challenge_id]:
            del table[key]
