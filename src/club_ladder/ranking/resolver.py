"""Challenge-rule rank resolution for the ladder."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from typing import Protocol

from club_ladder.core.errors import InvalidMatch, ParticipantNotFound


class _Ranked(Protocol):
    id: str
    rank: int


class _MatchLike(Protocol):
    winner_id: str
    loser_id: str


@dataclass(frozen=True)
class RankChange:
    """A single player's move on the ladder.

    Attributes:
        player_id: Player identifier.
        old_rank: Rank in the snapshot the resolution was computed from.
        new_rank: Rank after the resolution is committed.
    """

    player_id: str
    old_rank: int
    new_rank: int


@dataclass(frozen=True)
class RankResolution:
    """Outcome of resolving one match against a ladder snapshot.

    ``changes`` is ordered winner, loser, then shifted players by ascending
    old rank. It is empty when the winner was already ranked above the loser.
    """

    winner_id: str
    loser_id: str
    winner_rank: int
    loser_rank: int
    changes: tuple[RankChange, ...] = ()

    @property
    def is_upset(self) -> bool:
        """Whether the match moved anyone."""
        return bool(self.changes)

    @property
    def shifted(self) -> tuple[RankChange, ...]:
        """Changes for players other than the winner and loser."""
        return self.changes[2:]

    def new_rank_of(self, player_id: str) -> int | None:
        """Get the post-resolution rank of a player, or None if unaffected."""
        for change in self.changes:
            if change.player_id == player_id:
                return change.new_rank
        return None


def resolve(match: _MatchLike, ordering: Sequence[_Ranked]) -> RankResolution:
    """Compute the rank changes a match result causes.

    When the winner was ranked below the loser (an upset) the winner takes
    the loser's slot, the loser drops one place, and everyone strictly
    between the two old positions drops one place to make room. Players
    above the loser or below the winner keep their ranks, so a dense ladder
    stays dense.

    Args:
        match: Match with ``winner_id`` and ``loser_id``.
        ordering: Snapshot of every player on the ladder.

    Returns:
        RankResolution describing every rank that changes.

    Raises:
        InvalidMatch: If winner and loser are the same player.
        ParticipantNotFound: If winner or loser is not in the snapshot.
    """
    if match.winner_id == match.loser_id:
        raise InvalidMatch("winner and loser must be different players")

    ranks = {p.id: p.rank for p in ordering}
    if match.winner_id not in ranks:
        raise ParticipantNotFound(match.winner_id, "winner")
    if match.loser_id not in ranks:
        raise ParticipantNotFound(match.loser_id, "loser")

    winner_rank = ranks[match.winner_id]
    loser_rank = ranks[match.loser_id]
    resolution = RankResolution(
        winner_id=match.winner_id,
        loser_id=match.loser_id,
        winner_rank=winner_rank,
        loser_rank=loser_rank,
    )
    if winner_rank <= loser_rank:
        return resolution

    changes = [
        RankChange(match.winner_id, winner_rank, loser_rank),
        RankChange(match.loser_id, loser_rank, loser_rank + 1),
    ]
    between = sorted(
        (
            p
            for p in ordering
            if loser_rank < p.rank < winner_rank
            and p.id not in (match.winner_id, match.loser_id)
        ),
        key=lambda p: p.rank,
    )
    changes.extend(RankChange(p.id, p.rank, p.rank + 1) for p in between)

    return RankResolution(
        winner_id=match.winner_id,
        loser_id=match.loser_id,
        winner_rank=winner_rank,
        loser_rank=loser_rank,
        changes=tuple(changes),
    )


def apply_resolution(
    ordering: Sequence[_Ranked], resolution: RankResolution
) -> list[tuple[str, int]]:
    """Project a resolution onto a snapshot.

    Args:
        ordering: Snapshot the resolution was computed from.
        resolution: Result of ``resolve``.

    Returns:
        List of (player_id, rank) tuples sorted by rank.
    """
    moved = {c.player_id: c.new_rank for c in resolution.changes}
    entries = [(p.id, moved.get(p.id, p.rank)) for p in ordering]
    return sorted(entries, key=lambda x: x[1])
