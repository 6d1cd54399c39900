"""Commit strategies that write a rank resolution to a ladder store."""

from __future__ import annotations

import structlog

from club_ladder.core.errors import StoreWriteFailure
from club_ladder.ranking.base import LadderStore, TransactionalLadderStore
from club_ladder.ranking.resolver import RankResolution

logger = structlog.get_logger()

DEFAULT_STAGING_OFFSET = 1000


def plan_staged_writes(
    resolution: RankResolution,
    max_rank: int,
    offset: int = DEFAULT_STAGING_OFFSET,
) -> list[tuple[str, int]]:
    """Build the ordered write list for a two-phase staged commit.

    Phase 1 parks every affected player on a placeholder rank above
    ``max_rank + offset``, highest old rank first. Phase 2 writes the final
    ranks: winner, loser, then shifted players by ascending old rank. No
    prefix of the list leaves two players on the same rank.

    Args:
        resolution: Output of ``resolve``.
        max_rank: Highest rank in the snapshot.
        offset: Distance between ``max_rank`` and the first placeholder.

    Returns:
        List of (player_id, rank) writes in execution order.
    """
    if not resolution.changes:
        return []

    writes: list[tuple[str, int]] = []
    placeholder = max_rank + offset
    for change in sorted(resolution.changes, key=lambda c: c.old_rank, reverse=True):
        writes.append((change.player_id, placeholder))
        placeholder += 1

    writes.extend((c.player_id, c.new_rank) for c in resolution.changes)
    return writes


async def commit_staged(
    store: LadderStore,
    resolution: RankResolution,
    *,
    max_rank: int,
    offset: int = DEFAULT_STAGING_OFFSET,
    compensate: bool = False,
) -> list[tuple[str, int]]:
    """Apply a resolution one player write at a time.

    Writes are awaited sequentially in the order of ``plan_staged_writes``.
    The first failing write aborts the commit. With ``compensate`` the
    writes already applied are replayed backwards to restore the snapshot
    ranks; otherwise they are left in place.

    Returns:
        The writes that were applied.

    Raises:
        StoreWriteFailure: If any write fails.
    """
    writes = plan_staged_writes(resolution, max_rank, offset)
    current = {c.player_id: c.old_rank for c in resolution.changes}
    # (player_id, rank written, rank before the write)
    applied: list[tuple[str, int, int]] = []

    for player_id, rank in writes:
        try:
            await store.set_player_rank(player_id, rank)
        except Exception as exc:
            logger.error(
                "staged_write_failed",
                player_id=player_id,
                rank=rank,
                applied=len(applied),
                error=str(exc),
            )
            done = [(pid, r) for pid, r, _ in applied]
            compensated = False
            if compensate and applied:
                compensated = await _compensate(store, applied)
            raise StoreWriteFailure(
                player_id, rank, done, cause=exc, compensated=compensated
            ) from exc
        applied.append((player_id, rank, current[player_id]))
        current[player_id] = rank
        logger.debug("staged_write", player_id=player_id, rank=rank)

    return [(pid, r) for pid, r, _ in applied]


async def _compensate(store: LadderStore, applied: list[tuple[str, int, int]]) -> bool:
    """Undo applied writes newest first. Returns False if an undo write fails."""
    for player_id, _, previous in reversed(applied):
        try:
            await store.set_player_rank(player_id, previous)
        except Exception as exc:
            logger.error(
                "compensation_failed",
                player_id=player_id,
                rank=previous,
                error=str(exc),
            )
            return False
    logger.warning("compensation_applied", writes=len(applied))
    return True


async def commit_atomic(
    store: TransactionalLadderStore,
    resolution: RankResolution,
) -> list[tuple[str, int]]:
    """Apply every rank change of a resolution in one store transaction.

    Returns:
        The committed (player_id, rank) assignments.

    Raises:
        StoreWriteFailure: If the transaction fails. Nothing is applied.
    """
    assignments = [(c.player_id, c.new_rank) for c in resolution.changes]
    if not assignments:
        return []

    try:
        await store.apply_rank_changes(assignments)
    except Exception as exc:
        logger.error("atomic_commit_failed", changes=len(assignments), error=str(exc))
        raise StoreWriteFailure(None, None, (), cause=exc) from exc
    return assignments
