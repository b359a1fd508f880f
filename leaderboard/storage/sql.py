from __future__ import annotations

import logging
import time
from collections.abc import Iterable, Iterator, Mapping
from contextlib import contextmanager
from datetime import datetime
from typing import Any

from sqlalchemy import delete, select
from sqlalchemy.engine import Engine
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import Session

from leaderboard.db.session import make_session_maker
from leaderboard.models import AIScore, Challenge, FinalRanking, RecruiterCriteria, User
from leaderboard.models.base import Base
from leaderboard.services.criteria import SCORE_FIELDS, WEIGHT_FIELDS
from leaderboard.services.scoring import RankedEntry
from leaderboard.storage.base import Storage, leaderboard_row

logger = logging.getLogger(__name__)


def _user_dict(user: User) -> dict:
    return {"user_id": user.user_id, "name": user.name, "email": user.email, "created_at": user.created_at}


def _challenge_dict(challenge: Challenge) -> dict:
    return {
        "challenge_id": challenge.challenge_id,
        "title": challenge.title,
        "description": challenge.description,
        "created_at": challenge.created_at,
    }


def _score_dict(score: AIScore) -> dict:
    data = {"user_id": score.user_id, "challenge_id": score.challenge_id}
    for field in SCORE_FIELDS:
        data[field] = getattr(score, field)
    data["submitted_at"] = score.submitted_at
    return data


def _apply_entry(ranking: FinalRanking, entry: RankedEntry) -> None:
    ranking.final_score = entry.final_score
    ranking.rank = entry.rank
    ranking.contributions_json = dict(entry.contributions)
    ranking.calculated_at = datetime.utcnow()


def _ranking_dict(ranking: FinalRanking) -> dict:
    return {
        "user_id": ranking.user_id,
        "challenge_id": ranking.challenge_id,
        "final_score": ranking.final_score,
        "rank": ranking.rank,
        "contributions": ranking.contributions_json or {},
    }


class SqlStorage(Storage):
    """SQLAlchemy-backed storage for SQLite (local) or Postgres (production) URLs."""

    def __init__(self, engine: Engine, create_tables: bool = True) -> None:
        self.engine = engine
        self._session_maker = make_session_maker(engine)
        if create_tables:
            self._create_tables()

    def _create_tables(self) -> None:
        # Overlapping startups (uvicorn --reload, several workers) can race on
        # check-then-create DDL, so transient "already exists" errors are retried.
        for attempt in range(5):
            try:
                Base.metadata.create_all(bind=self.engine)
                return
            except OperationalError as exc:
                message = str(getattr(exc, "orig", exc))
                is_transient = (
                    "already exists" in message
                    or "definition is being modified by concurrent DDL" in message
                )
                if is_transient and attempt < 4:
                    logger.warning("Retrying table creation after transient error: %s", message)
                    time.sleep(0.3 * (attempt + 1))
                    continue
                raise

    @contextmanager
    def _session(self) -> Iterator[Session]:
        db = self._session_maker()
        try:
            yield db
            db.commit()
        except Exception:
            db.rollback()
            raise
        finally:
            db.close()

    def create_user(self, user_id: str, name: str, email: str | None = None) -> dict:
        with self._session() as db:
            user = db.scalar(select(User).where(User.user_id == user_id))
            if user is None:
                user = User(user_id=user_id, name=name, email=email)
            else:
                user.name = name
                user.email = email
            db.add(user)
            db.flush()
            return _user_dict(user)

    def get_user(self, user_id: str) -> dict | None:
        with self._session() as db:
            user = db.scalar(select(User).where(User.user_id == user_id))
            return _user_dict(user) if user is not None else None

    def create_challenge(self, challenge_id: str, title: str, description: str | None = None) -> dict:
        with self._session() as db:
            challenge = db.scalar(select(Challenge).where(Challenge.challenge_id == challenge_id))
            if challenge is None:
                challenge = Challenge(challenge_id=challenge_id, title=title, description=description)
            else:
                challenge.title = title
                challenge.description = description
            db.add(challenge)
            db.flush()
            return _challenge_dict(challenge)

    def get_challenge(self, challenge_id: str) -> dict | None:
        with self._session() as db:
            challenge = db.scalar(select(Challenge).where(Challenge.challenge_id == challenge_id))
            return _challenge_dict(challenge) if challenge is not None else None

    def list_challenges(self) -> list[dict]:
        with self._session() as db:
            rows = db.scalars(select(Challenge).order_by(Challenge.created_at.desc(), Challenge.id.desc())).all()
            return [_challenge_dict(c) for c in rows]

    def set_weights(self, challenge_id: str, weights: Mapping[str, float]) -> dict:
        with self._session() as db:
            criteria = db.scalar(select(RecruiterCriteria).where(RecruiterCriteria.challenge_id == challenge_id))
            if criteria is None:
                criteria = RecruiterCriteria(challenge_id=challenge_id)
            for field in WEIGHT_FIELDS:
                setattr(criteria, field, float(weights.get(field) or 0.0))
            criteria.updated_at = datetime.utcnow()
            db.add(criteria)
            db.flush()
            return {"challenge_id": challenge_id, **{f: getattr(criteria, f) for f in WEIGHT_FIELDS}}

    def get_weights(self, challenge_id: str) -> dict | None:
        with self._session() as db:
            criteria = db.scalar(select(RecruiterCriteria).where(RecruiterCriteria.challenge_id == challenge_id))
            if criteria is None:
                return None
            return {f: getattr(criteria, f) for f in WEIGHT_FIELDS}

    def submit_score(self, record: Mapping[str, Any]) -> dict:
        with self._session() as db:
            score = db.scalar(
                select(AIScore)
                .where(AIScore.user_id == record["user_id"])
                .where(AIScore.challenge_id == record["challenge_id"])
            )
            if score is None:
                score = AIScore(user_id=record["user_id"], challenge_id=record["challenge_id"])
            for field in SCORE_FIELDS:
                setattr(score, field, float(record.get(field) or 0.0))
            score.submitted_at = datetime.utcnow()
            db.add(score)
            db.flush()
            return _score_dict(score)

    def get_all_scores(self, challenge_id: str) -> list[dict]:
        with self._session() as db:
            rows = db.scalars(select(AIScore).where(AIScore.challenge_id == challenge_id).order_by(AIScore.id.asc())).all()
            return [_score_dict(s) for s in rows]

    def save_ranked_entry(self, entry: RankedEntry) -> None:
        with self._session() as db:
            ranking = db.scalar(
                select(FinalRanking)
                .where(FinalRanking.user_id == entry.user_id)
                .where(FinalRanking.challenge_id == entry.challenge_id)
            )
            if ranking is None:
                ranking = FinalRanking(user_id=entry.user_id, challenge_id=entry.challenge_id)
            _apply_entry(ranking, entry)
            db.add(ranking)

    def clear_rankings(self, challenge_id: str) -> None:
        with self._session() as db:
            db.execute(delete(FinalRanking).where(FinalRanking.challenge_id == challenge_id))

    def replace_rankings(self, challenge_id: str, entries: Iterable[RankedEntry]) -> None:
        # One transaction: a failure rolls the delete back with the inserts.
        with self._session() as db:
            db.execute(delete(FinalRanking).where(FinalRanking.challenge_id == challenge_id))
            for entry in entries:
                ranking = FinalRanking(user_id=entry.user_id, challenge_id=challenge_id)
                _apply_entry(ranking, entry)
                db.add(ranking)

    def get_leaderboard(self, challenge_id: str, limit: int = 100) -> list[dict]:
        with self._session() as db:
            rows = db.execute(
                select(FinalRanking, User.name, AIScore)
                .join(User, User.user_id == FinalRanking.user_id)
                .join(
                    AIScore,
                    (AIScore.user_id == FinalRanking.user_id) & (AIScore.challenge_id == FinalRanking.challenge_id),
                )
                .where(FinalRanking.challenge_id == challenge_id)
                .order_by(FinalRanking.rank.asc(), FinalRanking.id.asc())
                .limit(limit)
            ).all()
            return [leaderboard_row(_ranking_dict(r), name, _score_dict(s)) for r, name, s in rows]

    def clear_leaderboard(self, challenge_id: str) -> None:
        with self._session() as db:
            db.execute(delete(AIScore).where(AIScore.challenge_id == challenge_id))
            db.execute(delete(FinalRanking).where(FinalRanking.challenge_id == challenge_id))

    def delete_challenge(self, challenge_id: str) -> None:
        with self._session() as db:
            db.execute(delete(AIScore).where(AIScore.challenge_id == challenge_id))
            db.execute(delete(FinalRanking).where(FinalRanking.challenge_id == challenge_id))
            db.execute(delete(RecruiterCriteria).where(RecruiterCriteria.challenge_id == challenge_id))
            db.execute(delete(Challenge).where(Challenge.challenge_id == challenge_id))

    def delete_user(self, challenge_id: str, user_id: str) -> None:
        with self._session() as db:
            db.execute(
                delete(AIScore).where(AIScore.challenge_id == challenge_id).where(AIScore.user_id == user_id)
            )
            db.execute(
                delete(FinalRanking)
                .where(FinalRanking.challenge_id == challenge_id)
                .where(FinalRanking.user_id == user_id)
            )

    def close(self) -> None:
        self.engine.dispose()
