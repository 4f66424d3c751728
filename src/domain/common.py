"""Shared record shapes for players, matches and the rating ledger."""

from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import datetime
from enum import Enum

DEFAULT_RATING = 1000.0


def round_half_up(value: float) -> int:
    """Round to the nearest integer, with .5 always rounding up."""
    return int(math.floor(value + 0.5))


class TeamSide(str, Enum):
    """Which side of a match a roster occupies."""

    TEAM1 = "team1"
    TEAM2 = "team2"

    @property
    def opponent(self) -> TeamSide:
        return TeamSide.TEAM2 if self is TeamSide.TEAM1 else TeamSide.TEAM1


@dataclass(frozen=True)
class PlayerRef:
    """Participant reference embedded in match records."""

    player_id: str
    name: str


@dataclass(frozen=True)
class Player:
    """Current standing of one registered player."""

    player_id: str
    name: str
    rating: float = DEFAULT_RATING
    matches_played: int = 0
    wins: int = 0
    streak_count: int = 0
    last_played_at: datetime | None = None

    @property
    def display_rating(self) -> int:
        return round_half_up(self.rating)

    @property
    def losses(self) -> int:
        return self.matches_played - self.wins

    @property
    def win_rate(self) -> float:
        if self.matches_played == 0:
            return 0.0
        return self.wins / self.matches_played

    def ref(self) -> PlayerRef:
        return PlayerRef(player_id=self.player_id, name=self.name)


@dataclass(frozen=True)
class TeamRoster:
    """One side of a match: a singles player, or a doubles pair."""

    first: PlayerRef
    second: PlayerRef | None = None

    @property
    def is_doubles(self) -> bool:
        return self.second is not None

    @property
    def players(self) -> tuple[PlayerRef, ...]:
        if self.second is None:
            return (self.first,)
        return (self.first, self.second)

    @property
    def player_ids(self) -> tuple[str, ...]:
        return tuple(player.player_id for player in self.players)

    def pair_key(self) -> tuple[str, str] | None:
        """Order-independent key for a doubles pair, ``None`` for singles."""
        if self.second is None:
            return None
        return tuple(sorted((self.first.player_id, self.second.player_id)))  # type: ignore[return-value]

    @classmethod
    def from_players(cls, players: tuple[PlayerRef, ...] | list[PlayerRef]) -> TeamRoster:
        if len(players) == 1:
            return cls(first=players[0])
        if len(players) == 2:
            return cls(first=players[0], second=players[1])
        raise ValueError(f"a roster holds one or two players, got {len(players)}")


@dataclass(frozen=True)
class MatchInput:
    """Unvalidated match submission as entered by a user."""

    team1: tuple[str, ...]
    team2: tuple[str, ...]
    team1_score: int
    team2_score: int
    winner: TeamSide | None = None
    match_date: datetime | None = None


@dataclass(frozen=True)
class MatchDraft:
    """Validated match awaiting an identifier from storage."""

    team1: TeamRoster
    team2: TeamRoster
    team1_score: int
    team2_score: int
    winner: TeamSide
    created_at: datetime


@dataclass(frozen=True)
class Match:
    """Persisted, immutable match outcome."""

    match_id: str
    team1: TeamRoster
    team2: TeamRoster
    team1_score: int
    team2_score: int
    winner: TeamSide
    created_at: datetime

    @property
    def is_singles(self) -> bool:
        return not self.team1.is_doubles and not self.team2.is_doubles

    @property
    def is_doubles(self) -> bool:
        return self.team1.is_doubles and self.team2.is_doubles

    def roster(self, side: TeamSide) -> TeamRoster:
        return self.team1 if side is TeamSide.TEAM1 else self.team2

    def score(self, side: TeamSide) -> int:
        return self.team1_score if side is TeamSide.TEAM1 else self.team2_score

    def score_difference(self, side: TeamSide) -> int:
        """Signed margin from ``side``'s perspective."""
        return self.score(side) - self.score(side.opponent)

    def side_of(self, player_id: str) -> TeamSide | None:
        if player_id in self.team1.player_ids:
            return TeamSide.TEAM1
        if player_id in self.team2.player_ids:
            return TeamSide.TEAM2
        return None

    @classmethod
    def from_draft(cls, match_id: str, draft: MatchDraft) -> Match:
        return cls(
            match_id=match_id,
            team1=draft.team1,
            team2=draft.team2,
            team1_score=draft.team1_score,
            team2_score=draft.team2_score,
            winner=draft.winner,
            created_at=draft.created_at,
        )


@dataclass(frozen=True)
class MatchHistoryEntry:
    """Ledger row: one participant's rating movement in one match."""

    match_id: str
    player_id: str
    team: TeamSide
    rating_before: int
    rating_after: int
    rating_change: int
    score_difference: int
    is_winner: bool
    date: datetime


__all__ = [
    "DEFAULT_RATING",
    "Match",
    "MatchDraft",
    "MatchHistoryEntry",
    "MatchInput",
    "Player",
    "PlayerRef",
    "TeamRoster",
    "TeamSide",
    "round_half_up",
]
