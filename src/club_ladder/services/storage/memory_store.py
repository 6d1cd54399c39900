"""In-memory stores for tests and dry runs."""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from datetime import UTC, datetime

from club_ladder.core.errors import LadderNotEmpty, PlayerNotFound
from club_ladder.models import Match, Player
from club_ladder.ranking.validation import check_dense_ordering


def _copy(player: Player) -> Player:
    return Player(
        id=player.id,
        name=player.name,
        rank=player.rank,
        created_at=player.created_at,
        updated_at=player.updated_at,
    )


class InMemoryLadderStore:
    """Dict-backed ladder that enforces unique ranks on every write.

    Reads return copies, so a snapshot never changes under the caller.
    Only single-player writes are offered; see
    ``TransactionalInMemoryLadderStore`` for batch commits.

    Args:
        players: Initial players; ranks must be unique.
        fail_on_write: 1-based number of the rank write that raises
            ``ConnectionError``. ``None`` never fails.
        keep_failing: Also fail every rank write after that one.
    """

    def __init__(
        self,
        players: Iterable[Player] = (),
        *,
        fail_on_write: int | None = None,
        keep_failing: bool = False,
    ) -> None:
        self._players: dict[str, Player] = {}
        for player in players:
            self._check_free(player.rank, player.id)
            self._players[player.id] = _copy(player)
        self.writes: list[tuple[str, int]] = []
        self.fail_on_write = fail_on_write
        self.keep_failing = keep_failing
        self.write_calls = 0

    def _count_write(self) -> None:
        """Count a rank write and raise if it is configured to fail."""
        self.write_calls += 1
        if self.fail_on_write is None:
            return
        if self.write_calls == self.fail_on_write or (
            self.keep_failing and self.write_calls > self.fail_on_write
        ):
            raise ConnectionError(f"store unavailable (write {self.write_calls})")

    def _check_free(self, rank: int, player_id: str) -> None:
        for other in self._players.values():
            if other.rank == rank and other.id != player_id:
                msg = f"rank {rank} is already held by player {other.id}"
                raise ValueError(msg)

    def _get(self, player_id: str) -> Player:
        player = self._players.get(player_id)
        if player is None:
            raise PlayerNotFound(player_id)
        return player

    def ranks(self) -> dict[str, int]:
        """Get the current rank of every player by id."""
        return {pid: p.rank for pid, p in self._players.items()}

    async def list_players_by_rank(self) -> list[Player]:
        return sorted((_copy(p) for p in self._players.values()), key=lambda p: p.rank)

    async def max_rank(self) -> int:
        return max((p.rank for p in self._players.values()), default=0)

    async def get_player(self, player_id: str) -> Player:
        return _copy(self._get(player_id))

    async def set_player_rank(self, player_id: str, rank: int) -> None:
        self._count_write()
        player = self._get(player_id)
        self._check_free(rank, player_id)
        player.rank = rank
        player.updated_at = datetime.now(UTC)
        self.writes.append((player_id, rank))

    async def create_player(self, name: str) -> Player:
        player = Player(name=name, rank=await self.max_rank() + 1)
        self._players[player.id] = player
        return _copy(player)

    async def rename_player(self, player_id: str, name: str) -> Player:
        player = self._get(player_id)
        player.name = name
        player.updated_at = datetime.now(UTC)
        return _copy(player)

    async def delete_player(self, player_id: str) -> None:
        removed = self._players.pop(self._get(player_id).id)
        for player in sorted(self._players.values(), key=lambda p: p.rank):
            if player.rank > removed.rank:
                player.rank -= 1

    async def reorder_ranks(self, assignments: Sequence[tuple[str, int]]) -> None:
        check_dense_ordering(assignments, self._players)
        for player_id, rank in assignments:
            self._players[player_id].rank = rank

    async def seed_players(self, names: Sequence[str]) -> list[Player]:
        if self._players:
            raise LadderNotEmpty(len(self._players))
        players = [Player(name=name, rank=i) for i, name in enumerate(names, 1)]
        self._players = {p.id: p for p in players}
        return [_copy(p) for p in players]


class TransactionalInMemoryLadderStore(InMemoryLadderStore):
    """In-memory ladder that also commits batches of rank writes atomically."""

    async def apply_rank_changes(self, assignments: Sequence[tuple[str, int]]) -> None:
        self._count_write()
        proposed = self.ranks()
        for player_id, rank in assignments:
            self._get(player_id)
            proposed[player_id] = rank
        if len(set(proposed.values())) != len(proposed):
            msg = "rank changes would leave two players on the same rank"
            raise ValueError(msg)
        now = datetime.now(UTC)
        for player_id, rank in assignments:
            self._players[player_id].rank = rank
            self._players[player_id].updated_at = now
        self.writes.extend(assignments)


class InMemoryMatchStore:
    """List-backed append-only match log."""

    def __init__(self) -> None:
        self.matches: list[Match] = []

    async def record_match(
        self,
        winner_id: str,
        loser_id: str,
        winner_score: int,
        loser_score: int,
    ) -> Match:
        match = Match(
            winner_id=winner_id,
            loser_id=loser_id,
            winner_score=winner_score,
            loser_score=loser_score,
        )
        self.matches.append(match)
        return match

    async def find_recent_match(
        self, winner_id: str, loser_id: str, since: datetime
    ) -> Match | None:
        for match in reversed(self.matches):
            if (
                match.winner_id == winner_id
                and match.loser_id == loser_id
                and match.created_at >= since
            ):
                return match
        return None

    async def list_matches(self, limit: int = 100) -> list[Match]:
        return sorted(self.matches, key=lambda m: m.created_at, reverse=True)[:limit]
