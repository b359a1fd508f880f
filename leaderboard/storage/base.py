from __future__ import annotations

import abc
from collections.abc import Iterable, Mapping
from typing import Any

from leaderboard.services.criteria import CRITERIA, SCORE_FIELDS
from leaderboard.services.scoring import RankedEntry


def leaderboard_row(entry: Mapping[str, Any], name: str, raw: Mapping[str, Any]) -> dict:
    """Flatten a stored ranking, its user and its raw score into one display row."""
    contributions = entry.get("contributions") or {}
    row = {
        "user_id": entry["user_id"],
        "name": name,
        "final_score": entry["final_score"],
        "rank": entry["rank"],
    }
    for criterion in CRITERIA:
        row[f"{criterion.name}_contribution"] = contributions.get(criterion.name, 0.0)
    for field in SCORE_FIELDS:
        row[field] = raw.get(field)
    return row


class Storage(abc.ABC):
    """Persistence used by the leaderboard workflow.

    Records cross this boundary as plain dicts. Implementations are picked once
    at startup (see ``build_storage``) and injected into the API layer.
    """

    @abc.abstractmethod
    def create_user(self, user_id: str, name: str, email: str | None = None) -> dict: ...

    @abc.abstractmethod
    def get_user(self, user_id: str) -> dict | None: ...

    @abc.abstractmethod
    def create_challenge(self, challenge_id: str, title: str, description: str | None = None) -> dict: ...

    @abc.abstractmethod
    def get_challenge(self, challenge_id: str) -> dict | None: ...

    @abc.abstractmethod
    def list_challenges(self) -> list[dict]:
        """Newest first."""

    @abc.abstractmethod
    def set_weights(self, challenge_id: str, weights: Mapping[str, float]) -> dict:
        """Replace the challenge's weight set entirely."""

    @abc.abstractmethod
    def get_weights(self, challenge_id: str) -> dict | None: ...

    @abc.abstractmethod
    def submit_score(self, record: Mapping[str, Any]) -> dict:
        """Insert or replace the score for ``(user_id, challenge_id)``."""

    @abc.abstractmethod
    def get_all_scores(self, challenge_id: str) -> list[dict]:
        """All current raw scores of a challenge, in first-submission order."""

    @abc.abstractmethod
    def save_ranked_entry(self, entry: RankedEntry) -> None: ...

    @abc.abstractmethod
    def clear_rankings(self, challenge_id: str) -> None: ...

    @abc.abstractmethod
    def replace_rankings(self, challenge_id: str, entries: Iterable[RankedEntry]) -> None:
        """Swap the challenge's stored rankings for ``entries`` as one unit.

        Readers see either the previous set or the new one, never a mix. If
        writing fails, the previous set is kept.
        """

    @abc.abstractmethod
    def get_leaderboard(self, challenge_id: str, limit: int = 100) -> list[dict]:
        """Stored rankings joined with user names and raw scores, best rank first."""

    @abc.abstractmethod
    def clear_leaderboard(self, challenge_id: str) -> None:
        """Remove every score and ranking of a challenge, keeping the challenge."""

    @abc.abstractmethod
    def delete_challenge(self, challenge_id: str) -> None: ...

    @abc.abstractmethod
    def delete_user(self, challenge_id: str, user_id: str) -> None:
        """Remove one user's score and ranking from a challenge."""

    def close(self) -> None:
        pass
