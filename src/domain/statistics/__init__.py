"""Corpus-wide statistics: rivalries, synergies and leaderboard summaries."""

from __future__ import annotations

from domain.protocol import MatchStore
from domain.statistics.rivalry import (
    MIN_RIVALRY_MATCHES,
    TOP_RIVALRIES,
    Rivalry,
    compute_rivalries,
)
from domain.statistics.summary import (
    LeaderboardSummary,
    rank_players,
    recent_matches,
    summarize_leaderboard,
)
from domain.statistics.synergy import (
    MIN_SYNERGY_MATCHES,
    TOP_SYNERGIES,
    Synergy,
    calculate_synergy_score,
    compute_synergies,
)


class FullScanStatistics:
    """Rescans every stored match on each call; nothing is cached."""

    def __init__(
        self,
        store: MatchStore,
        *,
        min_rivalry_matches: int = MIN_RIVALRY_MATCHES,
        min_synergy_matches: int = MIN_SYNERGY_MATCHES,
        top_n: int = TOP_RIVALRIES,
    ) -> None:
        self.store = store
        self.min_rivalry_matches = min_rivalry_matches
        self.min_synergy_matches = min_synergy_matches
        self.top_n = top_n

    def rivalries(self) -> list[Rivalry]:
        return compute_rivalries(
            self.store.list_matches(),
            min_matches=self.min_rivalry_matches,
            limit=self.top_n,
        )

    def synergies(self) -> list[Synergy]:
        return compute_synergies(
            self.store.list_matches(),
            min_matches=self.min_synergy_matches,
            limit=self.top_n,
        )


__all__ = [
    "FullScanStatistics",
    "LeaderboardSummary",
    "MIN_RIVALRY_MATCHES",
    "MIN_SYNERGY_MATCHES",
    "Rivalry",
    "Synergy",
    "TOP_RIVALRIES",
    "TOP_SYNERGIES",
    "calculate_synergy_score",
    "compute_rivalries",
    "compute_synergies",
    "rank_players",
    "recent_matches",
    "summarize_leaderboard",
]
