"""matches table model."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import CheckConstraint, DateTime, Enum, ForeignKey, Index, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from models.base import Base


class MatchRecord(Base):
    """Immutable match outcome (singles or doubles)."""

    __tablename__ = "matches"
    __table_args__ = (
        CheckConstraint("team1_score >= 0 AND team2_score >= 0", name="ck_matches_scores_positive"),
        CheckConstraint("team1_score <> team2_score", name="ck_matches_no_tie"),
        CheckConstraint(
            "(winner = 'team1' AND team1_score > team2_score) "
            "OR (winner = 'team2' AND team2_score > team1_score)",
            name="ck_matches_winner_score",
        ),
        Index("idx_matches_created_at", "created_at"),
    )

    id: Mapped[str] = mapped_column(String(32), primary_key=True)
    team1_player1_id: Mapped[str] = mapped_column(ForeignKey("players.id"), nullable=False)
    team1_player2_id: Mapped[str | None] = mapped_column(ForeignKey("players.id"), nullable=True)
    team2_player1_id: Mapped[str] = mapped_column(ForeignKey("players.id"), nullable=False)
    team2_player2_id: Mapped[str | None] = mapped_column(ForeignKey("players.id"), nullable=True)
    team1_score: Mapped[int] = mapped_column(Integer, nullable=False)
    team2_score: Mapped[int] = mapped_column(Integer, nullable=False)
    winner: Mapped[str] = mapped_column(
        Enum("team1", "team2", name="match_winner", native_enum=False),
        nullable=False,
    )
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=False), nullable=False)
