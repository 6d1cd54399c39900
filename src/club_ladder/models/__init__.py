from .match import Match
from .player import Player

__all__ = ["Match", "Player"]
