"""Head-to-head rivalries between singles players."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass

from domain.common import Match, PlayerRef, TeamSide

MIN_RIVALRY_MATCHES = 2
TOP_RIVALRIES = 2


@dataclass(frozen=True)
class Rivalry:
    """Aggregate of every singles meeting between two players.

    ``player1`` is the player with the lower id.
    """

    player1: PlayerRef
    player2: PlayerRef
    match_count: int
    average_score_difference: float
    player1_wins: int
    player2_wins: int


@dataclass
class _RivalryTally:
    player1: PlayerRef
    player2: PlayerRef
    match_count: int = 0
    total_score_difference: int = 0
    player1_wins: int = 0
    player2_wins: int = 0

    def add(self, match: Match) -> None:
        self.match_count += 1
        self.total_score_difference += abs(match.team1_score - match.team2_score)
        winner_id = match.roster(match.winner).first.player_id
        if winner_id == self.player1.player_id:
            self.player1_wins += 1
        else:
            self.player2_wins += 1

    def freeze(self) -> Rivalry:
        return Rivalry(
            player1=self.player1,
            player2=self.player2,
            match_count=self.match_count,
            average_score_difference=self.total_score_difference / self.match_count,
            player1_wins=self.player1_wins,
            player2_wins=self.player2_wins,
        )


def compute_rivalries(
    matches: Iterable[Match],
    *,
    min_matches: int = MIN_RIVALRY_MATCHES,
    limit: int | None = TOP_RIVALRIES,
) -> list[Rivalry]:
    """Rank singles pairings by closeness of their games.

    Pairs with fewer than ``min_matches`` meetings are dropped. Ordering is by
    ascending average absolute score difference, then by descending match
    count, then by player ids.
    """
    tallies: dict[tuple[str, str], _RivalryTally] = {}
    for match in matches:
        if not match.is_singles:
            continue
        home = match.roster(TeamSide.TEAM1).first
        away = match.roster(TeamSide.TEAM2).first
        low, high = (home, away) if home.player_id < away.player_id else (away, home)
        key = (low.player_id, high.player_id)
        tally = tallies.get(key)
        if tally is None:
            tally = tallies[key] = _RivalryTally(player1=low, player2=high)
        tally.add(match)

    rivalries = [tally.freeze() for tally in tallies.values() if tally.match_count >= min_matches]
    rivalries.sort(
        key=lambda rivalry: (
            rivalry.average_score_difference,
            -rivalry.match_count,
            rivalry.player1.player_id,
            rivalry.player2.player_id,
        )
    )
    return rivalries if limit is None else rivalries[:limit]


__all__ = ["MIN_RIVALRY_MATCHES", "Rivalry", "TOP_RIVALRIES", "compute_rivalries"]
