from __future__ import annotations

from datetime import datetime

from sqlalchemy import DateTime, Float, ForeignKey, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from leaderboard.models.base import Base


class AIScore(Base):
    __tablename__ = "ai_scores"
    __table_args__ = (UniqueConstraint("user_id", "challenge_id"),)

    id: Mapped[int] = mapped_column(primary_key=True)
    user_id: Mapped[str] = mapped_column(ForeignKey("users.user_id"), index=True)
    challenge_id: Mapped[str] = mapped_column(ForeignKey("challenges.challenge_id"), index=True)

    ai_score: Mapped[float] = mapped_column(Float)
    code_quality: Mapped[float] = mapped_column(Float)
    testing_rate: Mapped[float] = mapped_column(Float)
    logic_score: Mapped[float] = mapped_column(Float)
    clarity_score: Mapped[float] = mapped_column(Float)
    efficiency_score: Mapped[float] = mapped_column(Float, default=0.0)
    api_ui_score: Mapped[float] = mapped_column(Float, default=0.0)
    edge_cases_score: Mapped[float] = mapped_column(Float, default=0.0)
    creativity_score: Mapped[float] = mapped_column(Float, default=0.0)

    submitted_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)
