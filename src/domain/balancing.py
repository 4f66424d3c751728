"""Snake-draft team balancing over a selected roster.

This is a greedy heuristic, not an optimal partition: players are ranked by
rating and dealt alternately to team A and team B.

The displayed win probability is linear in total rating
(``rating / (rating + opponent)``), unlike the logistic curve the rating
engine uses. Both are reported; ``rating_expected_score`` is the logistic one
on mean ratings.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass

from domain.common import Player
from domain.errors import NotEnoughData
from domain.ratings.elo.calculator import calculate_expected_score

MIN_PLAYERS = 2


@dataclass(frozen=True)
class TeamProjection:
    players: tuple[Player, ...]
    total_rating: float
    win_probability: float
    rating_expected_score: float

    @property
    def mean_rating(self) -> float:
        if not self.players:
            return 0.0
        return self.total_rating / len(self.players)


@dataclass(frozen=True)
class BalancedTeams:
    team_a: TeamProjection
    team_b: TeamProjection

    @property
    def is_balanced(self) -> bool:
        return bool(self.team_a.players) and bool(self.team_b.players)

    @property
    def rating_gap(self) -> float:
        return abs(self.team_a.total_rating - self.team_b.total_rating)


def linear_win_probability(team_rating: float, opponent_rating: float) -> float:
    total = team_rating + opponent_rating
    if total == 0:
        return 0.5
    return team_rating / total


def _project(team: Sequence[Player], opponent: Sequence[Player]) -> TeamProjection:
    total = sum(player.rating for player in team)
    opponent_total = sum(player.rating for player in opponent)
    if team and opponent:
        expected = calculate_expected_score(total / len(team), opponent_total / len(opponent))
    else:
        expected = 0.5
    return TeamProjection(
        players=tuple(team),
        total_rating=total,
        win_probability=linear_win_probability(total, opponent_total),
        rating_expected_score=expected,
    )


def balance_teams(selected: Sequence[Player], *, strict: bool = False) -> BalancedTeams:
    """Split ``selected`` into two teams of comparable total rating.

    Ranks 0, 2, 4, ... go to team A and 1, 3, 5, ... to team B. Equal ratings
    keep their input order. With fewer than two players both teams are empty,
    or ``NotEnoughData`` is raised when ``strict``.
    """
    if len(selected) < MIN_PLAYERS:
        if strict:
            raise NotEnoughData(
                f"need at least {MIN_PLAYERS} players to balance teams, got {len(selected)}"
            )
        return BalancedTeams(team_a=_project([], []), team_b=_project([], []))

    ranked = sorted(selected, key=lambda player: player.rating, reverse=True)
    team_a = ranked[0::2]
    team_b = ranked[1::2]
    return BalancedTeams(team_a=_project(team_a, team_b), team_b=_project(team_b, team_a))


def balance_selection(
    players: Sequence[Player],
    selected_ids: Iterable[str],
    *,
    strict: bool = False,
) -> BalancedTeams:
    """Balance the players of a leaderboard whose ids are in ``selected_ids``.

    Every call recomputes from scratch, so dropping a player from the
    selection simply rebalances the remainder.
    """
    wanted = set(selected_ids)
    return balance_teams([player for player in players if player.player_id in wanted], strict=strict)


__all__ = [
    "BalancedTeams",
    "MIN_PLAYERS",
    "TeamProjection",
    "balance_selection",
    "balance_teams",
    "linear_win_probability",
]
