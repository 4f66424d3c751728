"""players table model."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import CheckConstraint, DateTime, Float, Index, Integer, String, func
from sqlalchemy.orm import Mapped, mapped_column

from models.base import Base


class PlayerRecord(Base):
    """Current standing of one player; mutated only by match submissions."""

    __tablename__ = "players"
    __table_args__ = (
        CheckConstraint("matches_played >= 0", name="ck_players_matches_played"),
        CheckConstraint("wins >= 0 AND wins <= matches_played", name="ck_players_wins"),
        CheckConstraint("streak_count >= 0", name="ck_players_streak_count"),
        Index("idx_players_rating", "rating"),
    )

    id: Mapped[str] = mapped_column(String(32), primary_key=True)
    name: Mapped[str] = mapped_column(String(128), nullable=False, unique=True)
    rating: Mapped[float] = mapped_column(Float, nullable=False, default=1000.0)
    matches_played: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    wins: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    streak_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    last_played_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=False), nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=False),
        nullable=False,
        server_default=func.now(),
    )
