"""Roster and score validation applied before any write."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from datetime import datetime

from domain.common import MatchInput, TeamSide
from domain.errors import InvalidMatch, InvalidRoster

MAX_TEAM_SIZE = 2


@dataclass(frozen=True)
class MatchRules:
    """Score bounds and date policy for submitted matches."""

    min_score: int = 0
    max_score: int = 30
    allow_future_dates: bool = False


def validate_roster(team1: Sequence[str], team2: Sequence[str]) -> None:
    """Each team needs one or two distinct players and no player may play both sides."""
    for label, team in (("team1", team1), ("team2", team2)):
        if len(team) == 0:
            raise InvalidRoster(f"{label} must have at least one player")
        if len(team) > MAX_TEAM_SIZE:
            raise InvalidRoster(f"{label} cannot have more than {MAX_TEAM_SIZE} players, got {len(team)}")
        if len(set(team)) != len(team):
            raise InvalidRoster(f"{label} lists the same player twice")

    shared = set(team1) & set(team2)
    if shared:
        raise InvalidRoster(f"players cannot appear on both teams: {', '.join(sorted(shared))}")


def _coerce_score(label: str, value: object) -> int:
    # bool is a subclass of int
    if isinstance(value, bool) or not isinstance(value, int):
        raise InvalidMatch(f"{label} must be an integer, got {value!r}")
    return value


def validate_scores(
    team1_score: object,
    team2_score: object,
    *,
    rules: MatchRules | None = None,
    winner: TeamSide | None = None,
) -> TeamSide:
    """Validate scores and return the winning side."""
    rules = rules or MatchRules()
    score1 = _coerce_score("team1_score", team1_score)
    score2 = _coerce_score("team2_score", team2_score)

    for label, score in (("team1_score", score1), ("team2_score", score2)):
        if score < rules.min_score or score > rules.max_score:
            raise InvalidMatch(
                f"{label} must be between {rules.min_score} and {rules.max_score}, got {score}"
            )

    if score1 == score2:
        raise InvalidMatch("match cannot end in a tie")

    derived = TeamSide.TEAM1 if score1 > score2 else TeamSide.TEAM2
    if winner is not None and TeamSide(winner) is not derived:
        raise InvalidMatch(
            f"winner={TeamSide(winner).value} disagrees with score {score1}-{score2}"
        )
    return derived


def resolve_match_date(
    match_date: datetime | None,
    *,
    now: datetime,
    rules: MatchRules | None = None,
) -> datetime:
    """Default a missing date to ``now`` and reject future dates unless allowed."""
    rules = rules or MatchRules()
    if match_date is None:
        return now
    if not rules.allow_future_dates and match_date > now:
        raise InvalidMatch(f"match date {match_date.isoformat()} is in the future")
    return match_date


def validate_match_input(
    match_input: MatchInput,
    *,
    now: datetime,
    rules: MatchRules | None = None,
) -> tuple[TeamSide, datetime]:
    """Full pre-write validation; returns the winner and effective match date."""
    validate_roster(match_input.team1, match_input.team2)
    winner = validate_scores(
        match_input.team1_score,
        match_input.team2_score,
        rules=rules,
        winner=match_input.winner,
    )
    match_date = resolve_match_date(match_input.match_date, now=now, rules=rules)
    return winner, match_date


__all__ = [
    "MAX_TEAM_SIZE",
    "MatchRules",
    "resolve_match_date",
    "validate_match_input",
    "validate_roster",
    "validate_scores",
]
