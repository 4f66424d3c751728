"""Team-level Elo logic.

Each side is rated by the mean of its members' ratings. The resulting team
delta is applied unchanged to every member of that side, so teammates always
move in lockstep. A strong player paired with a weak one therefore gains or
loses exactly as much as their partner; this is intentional.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass

from domain.common import DEFAULT_RATING, Match, MatchDraft, TeamSide, round_half_up
from domain.errors import InvalidRoster
from domain.validation import MAX_TEAM_SIZE, MatchRules, validate_roster, validate_scores


@dataclass(frozen=True)
class EloParameters:
    initial_rating: float = DEFAULT_RATING
    k_factor: float = 32.0
    scale_factor: float = 400.0


@dataclass(frozen=True)
class TeamRatingChange:
    side: TeamSide
    pre_rating: float
    opponent_rating: float
    expected_score: float
    actual_score: float
    post_rating: int
    delta: int


@dataclass(frozen=True)
class MatchRatingDeltas:
    team1: TeamRatingChange
    team2: TeamRatingChange
    k_factor: float
    scale_factor: float

    @property
    def team1_delta(self) -> int:
        return self.team1.delta

    @property
    def team2_delta(self) -> int:
        return self.team2.delta

    @property
    def winner(self) -> TeamSide:
        return TeamSide.TEAM1 if self.team1.actual_score == 1.0 else TeamSide.TEAM2

    def for_side(self, side: TeamSide) -> TeamRatingChange:
        return self.team1 if side is TeamSide.TEAM1 else self.team2


def calculate_expected_score(rating: float, opponent_rating: float, scale_factor: float = 400.0) -> float:
    """Compute the Elo expected score for one side."""
    return 1.0 / (1.0 + 10.0 ** ((opponent_rating - rating) / scale_factor))


def calculate_team_rating(ratings: Sequence[float]) -> float:
    """Arithmetic mean of a one- or two-player team."""
    if not ratings:
        raise InvalidRoster("a team needs at least one player rating")
    if len(ratings) > MAX_TEAM_SIZE:
        raise InvalidRoster(f"a team cannot have more than {MAX_TEAM_SIZE} players, got {len(ratings)}")
    return sum(ratings) / len(ratings)


class TeamEloCalculator:
    """Stateless team Elo calculator with a fixed K-factor."""

    def __init__(self, params: EloParameters | None = None) -> None:
        self.params = params or EloParameters()

    def rate_side(
        self,
        side: TeamSide,
        *,
        rating: float,
        opponent_rating: float,
        won: bool,
    ) -> TeamRatingChange:
        expected = calculate_expected_score(
            rating=rating,
            opponent_rating=opponent_rating,
            scale_factor=self.params.scale_factor,
        )
        actual = 1.0 if won else 0.0
        post_rating = round_half_up(rating + self.params.k_factor * (actual - expected))
        return TeamRatingChange(
            side=side,
            pre_rating=rating,
            opponent_rating=opponent_rating,
            expected_score=expected,
            actual_score=actual,
            post_rating=post_rating,
            delta=post_rating - round_half_up(rating),
        )

    def compute_deltas(
        self,
        team1_rating: float,
        team2_rating: float,
        winner: TeamSide,
    ) -> MatchRatingDeltas:
        """Deltas for both sides given their mean ratings and the winner."""
        winner = TeamSide(winner)
        return MatchRatingDeltas(
            team1=self.rate_side(
                TeamSide.TEAM1,
                rating=team1_rating,
                opponent_rating=team2_rating,
                won=winner is TeamSide.TEAM1,
            ),
            team2=self.rate_side(
                TeamSide.TEAM2,
                rating=team2_rating,
                opponent_rating=team1_rating,
                won=winner is TeamSide.TEAM2,
            ),
            k_factor=self.params.k_factor,
            scale_factor=self.params.scale_factor,
        )

    @staticmethod
    def player_rating_after(rating: float, delta: int) -> int:
        return round_half_up(rating + delta)


def compute_match_ratings(
    match: Match | MatchDraft,
    team_ratings: tuple[Sequence[float], Sequence[float]],
    *,
    params: EloParameters | None = None,
    rules: MatchRules | None = None,
) -> MatchRatingDeltas:
    """Compute both team deltas for a completed match.

    ``team_ratings`` holds the pre-match ratings of each side's players, in
    roster order. Raises ``InvalidMatch`` for ties and ``InvalidRoster`` for
    malformed rosters. Pure; nothing is written.
    """
    validate_roster(match.team1.player_ids, match.team2.player_ids)
    winner = validate_scores(match.team1_score, match.team2_score, rules=rules, winner=match.winner)

    team1_ratings, team2_ratings = team_ratings
    for side, roster, ratings in (
        (TeamSide.TEAM1, match.team1, team1_ratings),
        (TeamSide.TEAM2, match.team2, team2_ratings),
    ):
        if len(ratings) != len(roster.players):
            raise InvalidRoster(
                f"{side.value} has {len(roster.players)} players but {len(ratings)} ratings"
            )

    calculator = TeamEloCalculator(params)
    return calculator.compute_deltas(
        calculate_team_rating(team1_ratings),
        calculate_team_rating(team2_ratings),
        winner,
    )


__all__ = [
    "EloParameters",
    "MatchRatingDeltas",
    "TeamEloCalculator",
    "TeamRatingChange",
    "calculate_expected_score",
    "calculate_team_rating",
    "compute_match_ratings",
]
