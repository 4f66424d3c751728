"""SQLAlchemy-backed storage for players, matches and the rating ledger."""

from __future__ import annotations

import logging
import uuid
from collections.abc import Iterator, Sequence
from contextlib import contextmanager
from typing import Any

from sqlalchemy import func, insert, select
from sqlalchemy.engine import Engine, Row
from sqlalchemy.orm import Session, aliased

from domain.common import (
    DEFAULT_RATING,
    Match,
    MatchDraft,
    MatchHistoryEntry,
    Player,
    PlayerRef,
    TeamRoster,
    TeamSide,
)
from models import Base, MatchHistoryRecord, MatchRecord, PlayerMatchUpdateRecord, PlayerRecord

logger = logging.getLogger(__name__)

_TABLES = ("players", "matches", "match_history", "player_match_updates")


def ensure_schema(engine: Engine) -> None:
    """Create league tables and indexes when missing."""
    with engine.begin() as connection:
        Base.metadata.create_all(
            bind=connection,
            tables=[Base.metadata.tables[name] for name in _TABLES],
            checkfirst=True,
        )


def new_id() -> str:
    return uuid.uuid4().hex


def _to_player(record: PlayerRecord) -> Player:
    return Player(
        player_id=record.id,
        name=record.name,
        rating=float(record.rating),
        matches_played=record.matches_played,
        wins=record.wins,
        streak_count=record.streak_count,
        last_played_at=record.last_played_at,
    )


def _ref(player_id: str | None, name: str | None) -> PlayerRef | None:
    if player_id is None:
        return None
    return PlayerRef(player_id=player_id, name=name or "")


def _roster(first: PlayerRef | None, second: PlayerRef | None) -> TeamRoster:
    if first is None:
        raise ValueError("match row is missing its first player")
    return TeamRoster(first=first, second=second)


def _row_to_match(row: Row[Any]) -> Match:
    record: MatchRecord = row[0]
    return Match(
        match_id=record.id,
        team1=_roster(
            _ref(record.team1_player1_id, row.t1p1_name),
            _ref(record.team1_player2_id, row.t1p2_name),
        ),
        team2=_roster(
            _ref(record.team2_player1_id, row.t2p1_name),
            _ref(record.team2_player2_id, row.t2p2_name),
        ),
        team1_score=record.team1_score,
        team2_score=record.team2_score,
        winner=TeamSide(record.winner),
        created_at=record.created_at,
    )


def _to_history_entry(record: MatchHistoryRecord) -> MatchHistoryEntry:
    return MatchHistoryEntry(
        match_id=record.match_id,
        player_id=record.player_id,
        team=TeamSide(record.team),
        rating_before=record.rating_before,
        rating_after=record.rating_after,
        rating_change=record.rating_change,
        score_difference=record.score_difference,
        is_winner=record.is_winner,
        date=record.date,
    )


def _history_row(entry: MatchHistoryEntry) -> dict[str, Any]:
    return {
        "match_id": entry.match_id,
        "player_id": entry.player_id,
        "team": entry.team.value,
        "rating_before": entry.rating_before,
        "rating_after": entry.rating_after,
        "rating_change": entry.rating_change,
        "score_difference": entry.score_difference,
        "is_winner": entry.is_winner,
        "date": entry.date,
    }


def add_player(
    session: Session,
    name: str,
    *,
    rating: float = DEFAULT_RATING,
) -> Player:
    """Register a new player; the caller commits."""
    cleaned = name.strip()
    if not cleaned:
        raise ValueError("player name must not be empty")
    existing = session.execute(
        select(PlayerRecord.id).where(PlayerRecord.name == cleaned)
    ).scalar_one_or_none()
    if existing is not None:
        raise ValueError(f"player name already exists: {cleaned!r}")

    record = PlayerRecord(
        id=new_id(),
        name=cleaned,
        rating=float(rating),
        matches_played=0,
        wins=0,
        streak_count=0,
    )
    session.add(record)
    session.flush()
    logger.info("added player_id=%s name=%s rating=%s", record.id, record.name, record.rating)
    return _to_player(record)


def find_players_by_name(session: Session, names: Sequence[str]) -> dict[str, Player]:
    """Players keyed by name; unknown names are absent from the result."""
    if not names:
        return {}
    records = session.execute(
        select(PlayerRecord).where(PlayerRecord.name.in_(list(names)))
    ).scalars()
    return {record.name: _to_player(record) for record in records}


class SqlAlchemyMatchStore:
    """``MatchStore`` over one session; ``transaction()`` commits or rolls back."""

    atomic = True

    def __init__(self, session: Session) -> None:
        self.session = session

    @contextmanager
    def transaction(self) -> Iterator[None]:
        try:
            yield
            self.session.commit()
        except Exception:
            self.session.rollback()
            logger.warning("rolled back match store transaction")
            raise

    def list_players(self) -> list[Player]:
        records = self.session.execute(
            select(PlayerRecord).order_by(
                PlayerRecord.rating.desc(),
                PlayerRecord.created_at.asc(),
                PlayerRecord.id.asc(),
            )
        ).scalars()
        return [_to_player(record) for record in records]

    def get_players(
        self,
        player_ids: Sequence[str],
        *,
        for_update: bool = False,
    ) -> dict[str, Player]:
        """Current rows, refreshed past the identity map; ``for_update`` locks them."""
        if not player_ids:
            return {}
        statement = (
            select(PlayerRecord)
            .where(PlayerRecord.id.in_(list(player_ids)))
            .execution_options(populate_existing=True)
        )
        if for_update:
            statement = statement.with_for_update()
        records = self.session.execute(statement).scalars()
        return {record.id: _to_player(record) for record in records}

    def insert_match(self, draft: MatchDraft) -> Match:
        team1 = draft.team1
        team2 = draft.team2
        record = MatchRecord(
            id=new_id(),
            team1_player1_id=team1.first.player_id,
            team1_player2_id=team1.second.player_id if team1.second is not None else None,
            team2_player1_id=team2.first.player_id,
            team2_player2_id=team2.second.player_id if team2.second is not None else None,
            team1_score=draft.team1_score,
            team2_score=draft.team2_score,
            winner=draft.winner.value,
            created_at=draft.created_at,
        )
        self.session.add(record)
        self.session.flush()
        logger.debug("inserted match_id=%s", record.id)
        return Match.from_draft(record.id, draft)

    def update_players(self, players: Sequence[Player], *, match_id: str) -> None:
        for player in players:
            record = self.session.get(PlayerRecord, player.player_id)
            if record is None:
                raise LookupError(f"player_id={player.player_id} does not exist")
            record.rating = player.rating
            record.matches_played = player.matches_played
            record.wins = player.wins
            record.streak_count = player.streak_count
            record.last_played_at = player.last_played_at
            self.session.add(PlayerMatchUpdateRecord(match_id=match_id, player_id=player.player_id))
        self.session.flush()

    def list_updated_player_ids(self, match_id: str) -> frozenset[str]:
        player_ids = self.session.execute(
            select(PlayerMatchUpdateRecord.player_id).where(
                PlayerMatchUpdateRecord.match_id == match_id
            )
        ).scalars()
        return frozenset(player_ids)

    def insert_history_entries(self, entries: Sequence[MatchHistoryEntry]) -> None:
        if not entries:
            return
        self.session.execute(insert(MatchHistoryRecord), [_history_row(entry) for entry in entries])

    def list_matches(self, *, limit: int | None = None) -> list[Match]:
        t1p1 = aliased(PlayerRecord)
        t1p2 = aliased(PlayerRecord)
        t2p1 = aliased(PlayerRecord)
        t2p2 = aliased(PlayerRecord)
        statement = (
            select(
                MatchRecord,
                t1p1.name.label("t1p1_name"),
                t1p2.name.label("t1p2_name"),
                t2p1.name.label("t2p1_name"),
                t2p2.name.label("t2p2_name"),
            )
            .outerjoin(t1p1, MatchRecord.team1_player1_id == t1p1.id)
            .outerjoin(t1p2, MatchRecord.team1_player2_id == t1p2.id)
            .outerjoin(t2p1, MatchRecord.team2_player1_id == t2p1.id)
            .outerjoin(t2p2, MatchRecord.team2_player2_id == t2p2.id)
            .order_by(MatchRecord.created_at.desc(), MatchRecord.id.desc())
        )
        if limit is not None:
            statement = statement.limit(limit)
        return [_row_to_match(row) for row in self.session.execute(statement)]

    def list_match_history(self, *, match_id: str | None = None) -> list[MatchHistoryEntry]:
        statement = select(MatchHistoryRecord).order_by(
            MatchHistoryRecord.date.asc(),
            MatchHistoryRecord.id.asc(),
        )
        if match_id is not None:
            statement = statement.where(MatchHistoryRecord.match_id == match_id)
        return [_to_history_entry(record) for record in self.session.execute(statement).scalars()]


def count_matches(session: Session) -> int:
    return int(session.scalar(select(func.count()).select_from(MatchRecord)) or 0)


__all__ = [
    "SqlAlchemyMatchStore",
    "add_player",
    "count_matches",
    "ensure_schema",
    "find_players_by_name",
    "new_id",
]
