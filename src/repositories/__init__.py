"""Database repository helpers."""

from repositories.repository import (
    SqlAlchemyMatchStore,
    add_player,
    count_matches,
    ensure_schema,
    find_players_by_name,
    new_id,
)

__all__ = [
    "SqlAlchemyMatchStore",
    "add_player",
    "count_matches",
    "ensure_schema",
    "find_players_by_name",
    "new_id",
]
