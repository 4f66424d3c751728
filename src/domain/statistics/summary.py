"""Leaderboard-level aggregates."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass

from domain.common import Match, Player, round_half_up

RECENT_MATCH_LIMIT = 5


@dataclass(frozen=True)
class LeaderboardSummary:
    total_players: int
    total_matches: int
    average_rating: int
    top_player: Player | None


def rank_players(players: Sequence[Player]) -> list[Player]:
    """Players by rating, highest first; equal ratings keep input order."""
    return sorted(players, key=lambda player: player.rating, reverse=True)


def summarize_leaderboard(players: Sequence[Player], matches: Sequence[Match]) -> LeaderboardSummary:
    ranked = rank_players(players)
    average = round_half_up(sum(p.rating for p in ranked) / len(ranked)) if ranked else 0
    return LeaderboardSummary(
        total_players=len(ranked),
        total_matches=len(matches),
        average_rating=average,
        top_player=ranked[0] if ranked else None,
    )


def recent_matches(matches: Sequence[Match], limit: int = RECENT_MATCH_LIMIT) -> list[Match]:
    """Newest matches first."""
    return sorted(matches, key=lambda match: match.created_at, reverse=True)[:limit]


__all__ = [
    "LeaderboardSummary",
    "RECENT_MATCH_LIMIT",
    "rank_players",
    "recent_matches",
    "summarize_leaderboard",
]
