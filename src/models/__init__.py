"""ORM models."""

from models.base import Base
from models.match import MatchRecord
from models.match_history import MatchHistoryRecord
from models.player import PlayerRecord
from models.player_match_update import PlayerMatchUpdateRecord

__all__ = [
    "Base",
    "MatchHistoryRecord",
    "MatchRecord",
    "PlayerMatchUpdateRecord",
    "PlayerRecord",
]
