"""match_history table model."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    DateTime,
    Enum,
    ForeignKey,
    Index,
    Integer,
    UniqueConstraint,
    func,
)
from sqlalchemy.orm import Mapped, mapped_column

from models.base import Base


class MatchHistoryRecord(Base):
    """Append-only ledger (one row per player per match)."""

    __tablename__ = "match_history"
    __table_args__ = (
        UniqueConstraint("match_id", "player_id", name="uq_match_history_match_player"),
        CheckConstraint(
            "rating_change = rating_after - rating_before",
            name="ck_match_history_rating_change",
        ),
        Index("idx_match_history_date", "date", "id"),
        Index("idx_match_history_player_date", "player_id", "date"),
        Index("idx_match_history_match", "match_id"),
    )

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    match_id: Mapped[str] = mapped_column(ForeignKey("matches.id"), nullable=False)
    player_id: Mapped[str] = mapped_column(ForeignKey("players.id"), nullable=False)
    team: Mapped[str] = mapped_column(
        Enum("team1", "team2", name="match_history_team", native_enum=False),
        nullable=False,
    )
    rating_before: Mapped[int] = mapped_column(Integer, nullable=False)
    rating_after: Mapped[int] = mapped_column(Integer, nullable=False)
    rating_change: Mapped[int] = mapped_column(Integer, nullable=False)
    score_difference: Mapped[int] = mapped_column(Integer, nullable=False)
    is_winner: Mapped[bool] = mapped_column(Boolean, nullable=False)
    date: Mapped[datetime] = mapped_column(DateTime(timezone=False), nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=False),
        nullable=False,
        server_default=func.now(),
    )
