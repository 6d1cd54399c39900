"""Tests for challenge-rule rank resolution."""

import itertools

import pytest

from club_ladder.core.errors import InvalidMatch, ParticipantNotFound
from club_ladder.models import Match, Player
from club_ladder.ranking.resolver import RankChange, apply_resolution, resolve


def _ladder(*ids: str) -> list[Player]:
    """Build a ladder with ranks 1..N in the given order."""
    return [Player(id=pid, name=pid.upper(), rank=i) for i, pid in enumerate(ids, 1)]


def _match(winner_id: str, loser_id: str) -> Match:
    return Match(winner_id=winner_id, loser_id=loser_id, winner_score=3, loser_score=1)


def _reranked(ordering: list[Player], match: Match) -> list[Player]:
    """Resolve a match and rebuild the ladder it produces."""
    names = {p.id: p.name for p in ordering}
    result = apply_resolution(ordering, resolve(match, ordering))
    return [Player(id=pid, name=names[pid], rank=rank) for pid, rank in result]


@pytest.fixture
def five():
    """Ladder A1, B2, C3, D4, E5."""
    return _ladder("a", "b", "c", "d", "e")


class TestResolveScenarios:
    """Tests for the worked ladder scenarios."""

    def test_adjacent_upset(self, five):
        """Test D (4) beating C (3) swaps just those two."""
        resolution = resolve(_match("d", "c"), five)

        assert resolution.is_upset
        assert apply_resolution(five, resolution) == [
            ("a", 1),
            ("b", 2),
            ("d", 3),
            ("c", 4),
            ("e", 5),
        ]
        assert resolution.shifted == ()

    def test_three_place_upset(self, five):
        """Test D (4) beating A (1) rotates the top four and leaves E alone."""
        resolution = resolve(_match("d", "a"), five)

        assert apply_resolution(five, resolution) == [
            ("d", 1),
            ("a", 2),
            ("b", 3),
            ("c", 4),
            ("e", 5),
        ]
        assert resolution.new_rank_of("e") is None

    def test_favourite_wins_is_noop(self, five):
        """Test A (1) beating C (3) changes nothing."""
        resolution = resolve(_match("a", "c"), five)

        assert not resolution.is_upset
        assert resolution.changes == ()
        assert resolution.winner_rank == 1
        assert resolution.loser_rank == 3
        assert apply_resolution(five, resolution) == [(p.id, p.rank) for p in five]

    def test_missing_loser(self, five):
        """Test an unknown loser raises ParticipantNotFound."""
        with pytest.raises(ParticipantNotFound) as exc_info:
            resolve(_match("d", "zed"), five)

        assert exc_info.value.player_id == "zed"
        assert exc_info.value.role == "loser"

    def test_missing_winner(self, five):
        """Test an unknown winner raises ParticipantNotFound."""
        with pytest.raises(ParticipantNotFound, match="Winner 'zed'"):
            resolve(_match("zed", "a"), five)

    def test_same_player_rejected(self, five):
        """Test a player cannot beat themselves."""
        with pytest.raises(InvalidMatch, match="different players"):
            resolve(_match("c", "c"), five)


class TestResolutionShape:
    """Tests for the structure of a resolution."""

    def test_change_order(self, five):
        """Test changes list winner, loser, then shifted players by old rank."""
        resolution = resolve(_match("e", "b"), five)

        assert resolution.changes == (
            RankChange("e", 5, 2),
            RankChange("b", 2, 3),
            RankChange("c", 3, 4),
            RankChange("d", 4, 5),
        )

    def test_unsorted_snapshot(self):
        """Test the snapshot does not need to arrive sorted by rank."""
        ordering = list(reversed(_ladder("a", "b", "c", "d")))
        resolution = resolve(_match("d", "b"), ordering)

        assert apply_resolution(ordering, resolution) == [
            ("a", 1),
            ("d", 2),
            ("b", 3),
            ("c", 4),
        ]

    def test_scores_do_not_matter(self, five):
        """Test only the winner and loser identities drive the result."""
        close = Match(winner_id="d", loser_id="a", winner_score=11, loser_score=10)
        rout = Match(winner_id="d", loser_id="a", winner_score=21, loser_score=1)

        assert resolve(close, five).changes == resolve(rout, five).changes


class TestResolveProperties:
    """Exhaustive checks over every pairing on small ladders."""

    @pytest.mark.parametrize("size", [2, 3, 4, 5, 7])
    def test_invariants(self, size):
        """Test density, slot rules and idempotence for every winner/loser pair."""
        ids = [f"p{i}" for i in range(1, size + 1)]
        ordering = _ladder(*ids)
        old = {p.id: p.rank for p in ordering}

        for winner, loser in itertools.permutations(ids, 2):
            match = _match(winner, loser)
            rebuilt = _reranked(ordering, match)
            new = {p.id: p.rank for p in rebuilt}

            assert sorted(new.values()) == list(range(1, size + 1))

            rw, rl = old[winner], old[loser]
            if rw < rl:
                assert new == old
            else:
                assert new[winner] == rl
                assert new[loser] == rl + 1
                for pid in ids:
                    if pid in (winner, loser):
                        continue
                    if rl < old[pid] < rw:
                        assert new[pid] == old[pid] + 1
                    else:
                        assert new[pid] == old[pid]

            assert resolve(match, rebuilt).changes == ()
