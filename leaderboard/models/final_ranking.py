from __future__ import annotations

from datetime import datetime

from sqlalchemy import DateTime, Float, ForeignKey, Index, Integer, JSON, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from leaderboard.models.base import Base


class FinalRanking(Base):
    __tablename__ = "final_rankings"
    __table_args__ = (
        UniqueConstraint("user_id", "challenge_id"),
        Index("ix_final_rankings_challenge_rank", "challenge_id", "rank"),
    )

    id: Mapped[int] = mapped_column(primary_key=True)
    user_id: Mapped[str] = mapped_column(ForeignKey("users.user_id"), index=True)
    challenge_id: Mapped[str] = mapped_column(ForeignKey("challenges.challenge_id"), index=True)

    final_score: Mapped[float] = mapped_column(Float)
    rank: Mapped[int] = mapped_column(Integer)

    # Rounded per-criterion contributions, keyed by criterion name.
    contributions_json: Mapped[dict] = mapped_column(JSON, default=dict)

    calculated_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)
