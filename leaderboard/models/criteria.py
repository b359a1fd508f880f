from __future__ import annotations

from datetime import datetime

from sqlalchemy import DateTime, Float, ForeignKey
from sqlalchemy.orm import Mapped, mapped_column

from leaderboard.models.base import Base


class RecruiterCriteria(Base):
    __tablename__ = "recruiter_criteria"

    id: Mapped[int] = mapped_column(primary_key=True)
    challenge_id: Mapped[str] = mapped_column(ForeignKey("challenges.challenge_id"), unique=True, index=True)

    logic_weight: Mapped[float] = mapped_column(Float, default=0.0)
    clarity_weight: Mapped[float] = mapped_column(Float, default=0.0)
    testing_weight: Mapped[float] = mapped_column(Float, default=0.0)
    efficiency_weight: Mapped[float] = mapped_column(Float, default=0.0)
    api_ui_weight: Mapped[float] = mapped_column(Float, default=0.0)
    edge_cases_weight: Mapped[float] = mapped_column(Float, default=0.0)
    creativity_weight: Mapped[float] = mapped_column(Float, default=0.0)

    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)
