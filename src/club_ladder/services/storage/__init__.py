from .database import LadderDatabase
from .match_repository import MatchRepository
from .memory_store import (
    InMemoryLadderStore,
    InMemoryMatchStore,
    TransactionalInMemoryLadderStore,
)
from .player_repository import PlayerRepository

__all__ = [
    "InMemoryLadderStore",
    "InMemoryMatchStore",
    "LadderDatabase",
    "MatchRepository",
    "PlayerRepository",
    "TransactionalInMemoryLadderStore",
]
