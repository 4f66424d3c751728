"""Elo rating modules."""

from domain.ratings.elo.calculator import (
    EloParameters,
    MatchRatingDeltas,
    TeamEloCalculator,
    TeamRatingChange,
    calculate_expected_score,
    calculate_team_rating,
    compute_match_ratings,
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
