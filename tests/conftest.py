"""Shared fixtures: a SQLite-backed store and an in-memory fake store."""

from __future__ import annotations

import copy
from collections.abc import Iterator, Sequence
from contextlib import contextmanager
from datetime import datetime

import pytest
from sqlalchemy.orm import Session

from db import create_db_engine, create_session_factory
from domain.common import Match, MatchDraft, MatchHistoryEntry, Player, PlayerRef, TeamRoster, TeamSide
from repositories import SqlAlchemyMatchStore, ensure_schema

FIXED_NOW = datetime(2026, 1, 10, 12, 0, 0)


class StoreWriteError(RuntimeError):
    pass


class InMemoryMatchStore:
    """Dict-backed ``MatchStore`` whose writes can be made to fail once.

    ``fail_update_after`` / ``fail_history_after`` write that many rows and
    then raise. With ``atomic=True`` a failed transaction restores the
    snapshot taken when it began.
    """

    def __init__(self, players: Sequence[Player] = (), *, atomic: bool = False) -> None:
        self.atomic = atomic
        self.players: dict[str, Player] = {player.player_id: player for player in players}
        self.matches: list[Match] = []
        self.history: list[MatchHistoryEntry] = []
        self.applied: set[tuple[str, str]] = set()
        self.calls: list[str] = []
        self.fail_insert_match = False
        self.fail_update_after: int | None = None
        self.fail_history_after: int | None = None
        self.fail_reads = False

    @contextmanager
    def transaction(self) -> Iterator[None]:
        snapshot = (dict(self.players), list(self.matches), list(self.history), set(self.applied))
        try:
            yield
        except Exception:
            if self.atomic:
                self.players, self.matches, self.history, self.applied = snapshot
            raise

    def list_players(self) -> list[Player]:
        return sorted(self.players.values(), key=lambda player: player.rating, reverse=True)

    def get_players(self, player_ids: Sequence[str], *, for_update: bool = False) -> dict[str, Player]:
        self.calls.append("get_players")
        if self.fail_reads:
            raise StoreWriteError("reads unavailable")
        return {pid: self.players[pid] for pid in player_ids if pid in self.players}

    def insert_match(self, draft: MatchDraft) -> Match:
        self.calls.append("insert_match")
        if self.fail_insert_match:
            self.fail_insert_match = False
            raise StoreWriteError("insert_match failed")
        match = Match.from_draft(f"m{len(self.matches) + 1}", draft)
        self.matches.append(match)
        return match

    def update_players(self, players: Sequence[Player], *, match_id: str) -> None:
        self.calls.append("update_players")
        for index, player in enumerate(players):
            if self.fail_update_after is not None and index >= self.fail_update_after:
                self.fail_update_after = None
                raise StoreWriteError("update_players failed")
            self.players[player.player_id] = copy.copy(player)
            self.applied.add((match_id, player.player_id))

    def list_updated_player_ids(self, match_id: str) -> frozenset[str]:
        if self.fail_reads:
            raise StoreWriteError("reads unavailable")
        return frozenset(player_id for applied_match, player_id in self.applied if applied_match == match_id)

    def insert_history_entries(self, entries: Sequence[MatchHistoryEntry]) -> None:
        self.calls.append("insert_history_entries")
        for index, entry in enumerate(entries):
            if self.fail_history_after is not None and index >= self.fail_history_after:
                self.fail_history_after = None
                raise StoreWriteError("insert_history_entries failed")
            self.history.append(entry)

    def list_matches(self, *, limit: int | None = None) -> list[Match]:
        ordered = sorted(self.matches, key=lambda match: match.created_at, reverse=True)
        return ordered if limit is None else ordered[:limit]

    def list_match_history(self, *, match_id: str | None = None) -> list[MatchHistoryEntry]:
        if self.fail_reads:
            raise StoreWriteError("reads unavailable")
        entries = sorted(self.history, key=lambda entry: entry.date)
        if match_id is None:
            return entries
        return [entry for entry in entries if entry.match_id == match_id]


def make_player(player_id: str, rating: float = 1000.0, **kwargs: object) -> Player:
    return Player(player_id=player_id, name=kwargs.pop("name", player_id.upper()), rating=rating, **kwargs)  # type: ignore[arg-type]


def make_match(
    match_id: str,
    team1: Sequence[str],
    team2: Sequence[str],
    team1_score: int,
    team2_score: int,
    created_at: datetime = FIXED_NOW,
) -> Match:
    return Match(
        match_id=match_id,
        team1=TeamRoster.from_players([PlayerRef(pid, pid.upper()) for pid in team1]),
        team2=TeamRoster.from_players([PlayerRef(pid, pid.upper()) for pid in team2]),
        team1_score=team1_score,
        team2_score=team2_score,
        winner=TeamSide.TEAM1 if team1_score > team2_score else TeamSide.TEAM2,
        created_at=created_at,
    )


@pytest.fixture
def clock():
    return lambda: FIXED_NOW


@pytest.fixture
def memory_store() -> InMemoryMatchStore:
    return InMemoryMatchStore(
        [
            make_player("a", 1100.0),
            make_player("b", 900.0),
            make_player("c", 1000.0),
            make_player("d", 1000.0),
        ]
    )


@pytest.fixture
def engine():
    """Fresh in-memory SQLite database per test."""
    engine = create_db_engine("sqlite://")
    ensure_schema(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def db_session(engine) -> Iterator[Session]:
    session = create_session_factory(engine)()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def sql_store(db_session: Session) -> SqlAlchemyMatchStore:
    return SqlAlchemyMatchStore(db_session)
