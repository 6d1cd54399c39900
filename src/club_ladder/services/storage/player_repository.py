"""Database persistence for players and their ladder ranks."""

from __future__ import annotations

from collections.abc import Sequence
from datetime import UTC, datetime
from typing import TYPE_CHECKING

import structlog
from sqlmodel import Session, col, func, select

from club_ladder.core.errors import LadderNotEmpty, PlayerNotFound
from club_ladder.models import Player
from club_ladder.ranking.validation import check_dense_ordering

from .repository import AsyncRepository

if TYPE_CHECKING:
    from sqlalchemy import Engine

logger = structlog.get_logger()


def _get_or_raise(session: Session, player_id: str) -> Player:
    player = session.get(Player, player_id)
    if player is None:
        raise PlayerNotFound(player_id)
    return player


def _reassign(session: Session, assignments: Sequence[tuple[str, int]]) -> None:
    """Move players to new ranks inside the caller's transaction.

    The unique rank index is checked row by row, so every player is first
    parked on a negative placeholder and then written to its final rank,
    flushing after each row to fix the statement order.
    """
    players = []
    for index, (player_id, _) in enumerate(assignments, start=1):
        player = _get_or_raise(session, player_id)
        player.rank = -index
        session.add(player)
        session.flush()
        players.append(player)

    now = datetime.now(UTC)
    for player, (_, rank) in zip(players, assignments, strict=True):
        player.rank = rank
        player.updated_at = now
        session.add(player)
        session.flush()


class PlayerRepository(AsyncRepository):
    """Persist and query players ordered by ladder rank."""

    def __init__(self, engine: Engine) -> None:
        super().__init__(engine)

    async def list_players_by_rank(self) -> list[Player]:
        """Get all players, rank 1 first."""

        def _get(session: Session) -> list[Player]:
            statement = select(Player).order_by(col(Player.rank))
            return list(session.exec(statement).all())

        return await self._run_session(_get)

    async def max_rank(self) -> int:
        """Get the highest rank in use, or 0 for an empty ladder."""

        def _get(session: Session) -> int:
            return session.exec(select(func.max(Player.rank))).one() or 0

        return await self._run_session(_get)

    async def get_player(self, player_id: str) -> Player:
        """Get one player by id."""
        return await self._run_session(lambda session: _get_or_raise(session, player_id))

    async def set_player_rank(self, player_id: str, rank: int) -> None:
        """Write a single player's rank in its own transaction."""

        def _set(session: Session) -> None:
            player = _get_or_raise(session, player_id)
            player.rank = rank
            player.updated_at = datetime.now(UTC)
            session.add(player)

        await self._run_transaction(_set)

    async def apply_rank_changes(self, assignments: Sequence[tuple[str, int]]) -> None:
        """Apply several rank writes in one transaction."""

        def _apply(session: Session) -> None:
            _reassign(session, assignments)

        await self._run_transaction(_apply)
        logger.debug("rank_changes_committed", changes=len(assignments))

    async def create_player(self, name: str) -> Player:
        """Insert a player at the bottom of the ladder."""

        def _create(session: Session) -> Player:
            current = session.exec(select(func.max(Player.rank))).one() or 0
            player = Player(name=name, rank=current + 1)
            session.add(player)
            return player

        player = await self._run_transaction(_create)
        logger.info("player_created", player_id=player.id, rank=player.rank)
        return player

    async def rename_player(self, player_id: str, name: str) -> Player:
        """Change a player's display name."""

        def _rename(session: Session) -> Player:
            player = _get_or_raise(session, player_id)
            player.name = name
            player.updated_at = datetime.now(UTC)
            session.add(player)
            return player

        return await self._run_transaction(_rename)

    async def delete_player(self, player_id: str) -> None:
        """Remove a player and close the gap they leave."""

        def _delete(session: Session) -> int:
            player = _get_or_raise(session, player_id)
            removed_rank = player.rank
            session.delete(player)
            session.flush()

            statement = (
                select(Player).where(Player.rank > removed_rank).order_by(col(Player.rank))
            )
            now = datetime.now(UTC)
            for below in session.exec(statement).all():
                below.rank -= 1
                below.updated_at = now
                session.add(below)
                session.flush()
            return removed_rank

        removed_rank = await self._run_transaction(_delete)
        logger.info("player_deleted", player_id=player_id, rank=removed_rank)

    async def reorder_ranks(self, assignments: Sequence[tuple[str, int]]) -> None:
        """Replace the full ladder order in one transaction."""

        def _reorder(session: Session) -> None:
            player_ids = session.exec(select(Player.id)).all()
            check_dense_ordering(assignments, player_ids)
            _reassign(session, sorted(assignments, key=lambda a: a[1]))

        await self._run_transaction(_reorder)
        logger.info("ladder_reordered", players=len(assignments))

    async def seed_players(self, names: Sequence[str]) -> list[Player]:
        """Create players ranked 1..N in the given order on an empty ladder."""

        def _seed(session: Session) -> list[Player]:
            existing = session.exec(select(Player.id)).all()
            if existing:
                raise LadderNotEmpty(len(existing))
            players = [Player(name=name, rank=i) for i, name in enumerate(names, 1)]
            session.add_all(players)
            return players

        players = await self._run_transaction(_seed)
        logger.info("ladder_seeded", players=len(players))
        return players
