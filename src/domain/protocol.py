"""Contracts for the storage collaborator and statistics providers."""

from __future__ import annotations

from collections.abc import Sequence
from contextlib import AbstractContextManager
from typing import Protocol, runtime_checkable

from domain.common import Match, MatchDraft, MatchHistoryEntry, Player


@runtime_checkable
class MatchStore(Protocol):
    """Storage for players, matches and the rating ledger.

    ``atomic`` is true when ``transaction()`` rolls every write back on error.
    ``get_players(..., for_update=True)`` returns fresh rows locked until the
    transaction ends. ``update_players`` records, together with each player
    row, that the player's update for ``match_id`` has been applied.
    """

    atomic: bool

    def transaction(self) -> AbstractContextManager[None]: ...

    def list_players(self) -> list[Player]: ...

    def get_players(
        self,
        player_ids: Sequence[str],
        *,
        for_update: bool = False,
    ) -> dict[str, Player]: ...

    def insert_match(self, draft: MatchDraft) -> Match: ...

    def update_players(self, players: Sequence[Player], *, match_id: str) -> None: ...

    def list_updated_player_ids(self, match_id: str) -> frozenset[str]: ...

    def insert_history_entries(self, entries: Sequence[MatchHistoryEntry]) -> None: ...

    def list_matches(self, *, limit: int | None = None) -> list[Match]: ...

    def list_match_history(self, *, match_id: str | None = None) -> list[MatchHistoryEntry]: ...


@runtime_checkable
class StatisticsProvider(Protocol):
    """Source of rivalry and synergy rankings."""

    def rivalries(self) -> list: ...

    def synergies(self) -> list: ...


__all__ = ["MatchStore", "StatisticsProvider"]
