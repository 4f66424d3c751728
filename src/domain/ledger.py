"""Append-only rating ledger: one entry per participant per match."""

from __future__ import annotations

from collections import defaultdict
from collections.abc import Iterable, Mapping, Sequence
from dataclasses import replace
from datetime import datetime

from domain.common import Match, MatchHistoryEntry, Player, TeamSide, round_half_up
from domain.ratings.elo.calculator import MatchRatingDeltas, TeamEloCalculator


def apply_match_to_player(
    player: Player,
    *,
    delta: int,
    won: bool,
    played_at: datetime,
) -> Player:
    """Return the player's standing after one match."""
    return replace(
        player,
        rating=float(TeamEloCalculator.player_rating_after(player.rating, delta)),
        matches_played=player.matches_played + 1,
        wins=player.wins + (1 if won else 0),
        streak_count=player.streak_count + 1 if won else 0,
        last_played_at=played_at,
    )


def build_history_entry(
    match: Match,
    player: Player,
    side: TeamSide,
    delta: int,
) -> MatchHistoryEntry:
    rating_before = round_half_up(player.rating)
    rating_after = TeamEloCalculator.player_rating_after(player.rating, delta)
    return MatchHistoryEntry(
        match_id=match.match_id,
        player_id=player.player_id,
        team=side,
        rating_before=rating_before,
        rating_after=rating_after,
        rating_change=delta,
        score_difference=match.score_difference(side),
        is_winner=match.winner is side,
        date=match.created_at,
    )


def build_history_entries(
    match: Match,
    players: Mapping[str, Player],
    deltas: MatchRatingDeltas,
) -> list[MatchHistoryEntry]:
    """Ledger entries for every participant, team1 first, in roster order.

    ``players`` must hold each participant's pre-match standing.
    """
    entries: list[MatchHistoryEntry] = []
    for side in (TeamSide.TEAM1, TeamSide.TEAM2):
        delta = deltas.for_side(side).delta
        for ref in match.roster(side).players:
            entries.append(build_history_entry(match, players[ref.player_id], side, delta))
    return entries


def group_by_match(history: Iterable[MatchHistoryEntry]) -> dict[str, list[MatchHistoryEntry]]:
    grouped: dict[str, list[MatchHistoryEntry]] = defaultdict(list)
    for entry in history:
        grouped[entry.match_id].append(entry)
    return dict(grouped)


def verify_ledger(history: Sequence[MatchHistoryEntry]) -> None:
    """Check that teammates in the same match share one rating change."""
    changes: dict[tuple[str, TeamSide], int] = {}
    seen: set[tuple[str, str]] = set()
    for entry in history:
        if entry.rating_after - entry.rating_before != entry.rating_change:
            raise ValueError(
                f"match_id={entry.match_id} player_id={entry.player_id}: "
                f"rating_change={entry.rating_change} does not equal "
                f"{entry.rating_after} - {entry.rating_before}"
            )
        player_key = (entry.match_id, entry.player_id)
        if player_key in seen:
            raise ValueError(
                f"match_id={entry.match_id} has more than one entry for player_id={entry.player_id}"
            )
        seen.add(player_key)

        team_key = (entry.match_id, entry.team)
        expected = changes.setdefault(team_key, entry.rating_change)
        if expected != entry.rating_change:
            raise ValueError(
                f"match_id={entry.match_id} {entry.team.value}: teammates have different "
                f"rating changes ({expected} vs {entry.rating_change})"
            )


__all__ = [
    "apply_match_to_player",
    "build_history_entries",
    "build_history_entry",
    "group_by_match",
    "verify_ledger",
]
