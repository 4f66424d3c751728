"""Replay the rating ledger into a per-day, carry-forward series for charting."""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from datetime import date

from domain.common import MatchHistoryEntry, Player
from domain.statistics.summary import rank_players

# Leaderboard rank windows charted by the dashboard and the statistics view.
DASHBOARD_RANKS = (0, 2)
STATISTICS_RANKS = (2, 8)


@dataclass(frozen=True)
class TrendRow:
    """Known ratings of the tracked players at the end of ``day``.

    A value of ``None`` means the player has no recorded rating yet.
    """

    day: date
    ratings: dict[str, int | None]


def tracked_players(players: Sequence[Player], start: int = 0, stop: int = 2) -> list[Player]:
    """A rank-bounded slice of the leaderboard."""
    return rank_players(players)[start:stop]


def build_rating_trend(
    history: Iterable[MatchHistoryEntry],
    tracked_player_ids: Sequence[str],
) -> list[TrendRow]:
    """One row per distinct ledger date, oldest first.

    Each row starts from the previous row's ratings and is overwritten by any
    ``rating_after`` recorded for a tracked player that day. Rows are emitted
    for every ledger date, including days when no tracked player played.
    """
    tracked = list(dict.fromkeys(tracked_player_ids))
    tracked_set = set(tracked)
    ordered = sorted(history, key=lambda entry: entry.date)

    rows: list[TrendRow] = []
    current: dict[str, int | None] = {player_id: None for player_id in tracked}
    for entry in ordered:
        day = entry.date.date()
        if not rows or rows[-1].day != day:
            rows.append(TrendRow(day=day, ratings=dict(current)))
        if entry.player_id in tracked_set:
            current[entry.player_id] = entry.rating_after
            rows[-1].ratings[entry.player_id] = entry.rating_after
    return rows


__all__ = [
    "DASHBOARD_RANKS",
    "STATISTICS_RANKS",
    "TrendRow",
    "build_rating_trend",
    "tracked_players",
]
