"""Store protocols consumed by the rank resolver and the ladder service."""

from __future__ import annotations

from collections.abc import Sequence
from datetime import datetime
from typing import Protocol, runtime_checkable

from club_ladder.models import Match, Player


@runtime_checkable
class LadderStore(Protocol):
    """Protocol for the ordered player collection.

    Implementations hold one player per rank and expose single-record rank
    writes. Ranks must stay unique on every write.
    """

    async def list_players_by_rank(self) -> list[Player]:
        """Get all players ordered by rank ascending.

        Returns:
            Fresh list of players, rank 1 first.
        """
        ...

    async def set_player_rank(self, player_id: str, rank: int) -> None:
        """Write a new rank for one player.

        Args:
            player_id: Player identifier.
            rank: New rank value.

        Raises:
            Exception: Any store error; callers wrap it in StoreWriteFailure.
        """
        ...

    async def max_rank(self) -> int:
        """Get the highest rank in use, or 0 for an empty ladder."""
        ...


@runtime_checkable
class TransactionalLadderStore(LadderStore, Protocol):
    """Ladder store that can commit several rank writes as one unit."""

    async def apply_rank_changes(self, assignments: Sequence[tuple[str, int]]) -> None:
        """Apply ``(player_id, rank)`` assignments atomically.

        Either every assignment is committed or none is.
        """
        ...


@runtime_checkable
class PlayerStore(LadderStore, Protocol):
    """Ladder store with the administrative player operations."""

    async def get_player(self, player_id: str) -> Player:
        """Get one player. Raises PlayerNotFound if absent."""
        ...

    async def create_player(self, name: str) -> Player:
        """Add a player at the bottom of the ladder (``max_rank() + 1``)."""
        ...

    async def rename_player(self, player_id: str, name: str) -> Player:
        """Change a player's display name."""
        ...

    async def delete_player(self, player_id: str) -> None:
        """Remove a player and move everyone below them up one place."""
        ...

    async def reorder_ranks(self, assignments: Sequence[tuple[str, int]]) -> None:
        """Replace the whole ladder order with ``(player_id, rank)`` assignments."""
        ...

    async def seed_players(self, names: Sequence[str]) -> list[Player]:
        """Create players ranked in the given order on an empty ladder."""
        ...


@runtime_checkable
class MatchStore(Protocol):
    """Protocol for the append-only match audit log."""

    async def record_match(
        self,
        winner_id: str,
        loser_id: str,
        winner_score: int,
        loser_score: int,
    ) -> Match:
        """Insert a match and return the stored record."""
        ...

    async def find_recent_match(
        self, winner_id: str, loser_id: str, since: datetime
    ) -> Match | None:
        """Get the newest match for this winner/loser pair created at or after ``since``."""
        ...

    async def list_matches(self, limit: int = 100) -> list[Match]:
        """Get the most recent matches, newest first."""
        ...
