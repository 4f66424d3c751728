"""Doubles partnership effectiveness."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass

from domain.common import Match, PlayerRef, TeamSide

MIN_SYNERGY_MATCHES = 3
TOP_SYNERGIES = 2
CONFIDENCE_MATCHES = 10
WIN_RATE_WEIGHT = 0.7
SCORE_DIFF_WEIGHT = 0.3
SCORE_DIFF_SCALE = 10.0


@dataclass(frozen=True)
class Synergy:
    player1: PlayerRef
    player2: PlayerRef
    matches_played: int
    matches_won: int
    win_rate: float
    average_score_difference: float
    synergy_score: float


def calculate_synergy_score(win_rate: float, average_score_difference: float, matches_played: int) -> float:
    """Weighted win rate and margin, discounted until a pair has ten matches."""
    confidence = min(matches_played / CONFIDENCE_MATCHES, 1.0)
    raw = win_rate * WIN_RATE_WEIGHT + (average_score_difference / SCORE_DIFF_SCALE) * SCORE_DIFF_WEIGHT
    return raw * confidence


@dataclass
class _PairTally:
    player1: PlayerRef
    player2: PlayerRef
    matches_played: int = 0
    matches_won: int = 0
    total_score_difference: int = 0

    def freeze(self) -> Synergy:
        win_rate = self.matches_won / self.matches_played
        average = self.total_score_difference / self.matches_played
        return Synergy(
            player1=self.player1,
            player2=self.player2,
            matches_played=self.matches_played,
            matches_won=self.matches_won,
            win_rate=win_rate,
            average_score_difference=average,
            synergy_score=calculate_synergy_score(win_rate, average, self.matches_played),
        )


def compute_synergies(
    matches: Iterable[Match],
    *,
    min_matches: int = MIN_SYNERGY_MATCHES,
    limit: int | None = TOP_SYNERGIES,
) -> list[Synergy]:
    """Rank doubles pairs by synergy score, highest first.

    Each side of a match is counted independently, so a pair is tallied
    whichever side it played on. Pairs under ``min_matches`` are dropped.
    """
    tallies: dict[tuple[str, str], _PairTally] = {}
    for match in matches:
        for side in (TeamSide.TEAM1, TeamSide.TEAM2):
            roster = match.roster(side)
            key = roster.pair_key()
            if key is None:
                continue
            tally = tallies.get(key)
            if tally is None:
                low, high = sorted(roster.players, key=lambda ref: ref.player_id)
                tally = tallies[key] = _PairTally(player1=low, player2=high)
            tally.matches_played += 1
            tally.matches_won += 1 if match.winner is side else 0
            tally.total_score_difference += match.score_difference(side)

    synergies = [tally.freeze() for tally in tallies.values() if tally.matches_played >= min_matches]
    synergies.sort(
        key=lambda synergy: (
            -synergy.synergy_score,
            -synergy.matches_played,
            synergy.player1.player_id,
            synergy.player2.player_id,
        )
    )
    return synergies if limit is None else synergies[:limit]


__all__ = [
    "CONFIDENCE_MATCHES",
    "MIN_SYNERGY_MATCHES",
    "Synergy",
    "TOP_SYNERGIES",
    "calculate_synergy_score",
    "compute_synergies",
]
