"""Rating, ledger, balancing and statistics domain modules."""

from domain.common import (
    Match,
    MatchDraft,
    MatchHistoryEntry,
    MatchInput,
    Player,
    PlayerRef,
    TeamRoster,
    TeamSide,
)

__all__ = [
    "Match",
    "MatchDraft",
    "MatchHistoryEntry",
    "MatchInput",
    "Player",
    "PlayerRef",
    "TeamRoster",
    "TeamSide",
]
