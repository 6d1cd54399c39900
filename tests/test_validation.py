"""Tests for match validation and the challenge rule."""

import pytest

from club_ladder.core.errors import InvalidMatch, InvalidOrdering, ParticipantNotFound
from club_ladder.models import Player
from club_ladder.ranking.validation import (
    challengeable_targets,
    check_challenge,
    check_dense_ordering,
    validate_match,
    validate_scores,
)


@pytest.fixture
def ordering():
    """Ladder a1..f6."""
    return [Player(id=pid, name=pid, rank=i) for i, pid in enumerate("abcdef", 1)]


class TestValidateScores:
    """Tests for score checks."""

    def test_valid_scores(self):
        """Test a normal result passes."""
        validate_scores(3, 1)
        validate_scores(2, 1)

    @pytest.mark.parametrize(("winner", "loser"), [(2, 2), (1, 3), (5, 11)])
    def test_winner_must_outscore_loser(self, winner, loser):
        """Test equal or reversed scores are rejected."""
        with pytest.raises(InvalidMatch, match="higher than loser"):
            validate_scores(winner, loser)

    @pytest.mark.parametrize(("winner", "loser"), [(3, 0), (3, -1), (0, -2)])
    def test_non_positive_score_rejected(self, winner, loser):
        """Test a zero or negative score is rejected."""
        with pytest.raises(InvalidMatch, match="must be positive"):
            validate_scores(winner, loser)

    @pytest.mark.parametrize("score", [2.5, "3", True])
    def test_non_integer_rejected(self, score):
        """Test non-integer scores are rejected."""
        with pytest.raises(InvalidMatch, match="whole number"):
            validate_scores(score, 1)


class TestCheckChallenge:
    """Tests for challenge direction and spread."""

    def test_within_spread(self):
        """Test challenges one to three places up are allowed."""
        for target in (3, 4, 5):
            check_challenge(6, target, spread=3)

    def test_too_far(self):
        """Test challenging four places up is rejected."""
        with pytest.raises(InvalidMatch, match="up to 3 ranks"):
            check_challenge(6, 2, spread=3)

    def test_downward_challenge(self):
        """Test challenging a lower-ranked player is rejected."""
        with pytest.raises(InvalidMatch, match="ranked below you"):
            check_challenge(2, 4)

    def test_custom_spread(self):
        """Test the spread is configurable."""
        check_challenge(6, 1, spread=5)
        with pytest.raises(InvalidMatch, match="up to 1 ranks"):
            check_challenge(3, 1, spread=1)


class TestChallengeableTargets:
    """Tests for listing challenge targets."""

    def test_targets_above(self, ordering):
        """Test the three players directly above are listed."""
        targets = challengeable_targets(ordering, "f")
        assert [p.id for p in targets] == ["c", "d", "e"]

    def test_near_top(self, ordering):
        """Test a player near the top only sees those above."""
        assert [p.id for p in challengeable_targets(ordering, "b")] == ["a"]
        assert challengeable_targets(ordering, "a") == []

    def test_unknown_challenger(self, ordering):
        """Test an unknown challenger raises ParticipantNotFound."""
        with pytest.raises(ParticipantNotFound):
            challengeable_targets(ordering, "zed")


class TestValidateMatch:
    """Tests for full match validation."""

    def test_upset_by_challenger(self, ordering):
        """Test the winner is treated as challenger by default."""
        validate_match("e", "b", 3, 1, ordering)

    def test_winner_below_spread(self, ordering):
        """Test a winner more than three places down is rejected."""
        with pytest.raises(InvalidMatch, match="up to 3 ranks"):
            validate_match("f", "a", 3, 1, ordering)

    def test_default_challenger_must_be_lower(self, ordering):
        """Test a higher-ranked winner needs an explicit challenger."""
        with pytest.raises(InvalidMatch, match="ranked below you"):
            validate_match("a", "c", 3, 1, ordering)

    def test_challenger_loses(self, ordering):
        """Test a defended challenge is valid when the loser challenged."""
        validate_match("a", "c", 3, 1, ordering, challenger_id="c")

    def test_challenger_must_play(self, ordering):
        """Test a third player cannot be the challenger."""
        with pytest.raises(InvalidMatch, match="one of the two players"):
            validate_match("d", "b", 3, 1, ordering, challenger_id="f")

    def test_same_player(self, ordering):
        """Test winner and loser must differ."""
        with pytest.raises(InvalidMatch, match="different players"):
            validate_match("c", "c", 3, 1, ordering)

    def test_unknown_player(self, ordering):
        """Test participants must be on the ladder."""
        with pytest.raises(ParticipantNotFound):
            validate_match("c", "zed", 3, 1, ordering)

    def test_scores_checked_first(self, ordering):
        """Test bad scores are reported even for unknown players."""
        with pytest.raises(InvalidMatch, match="higher than loser"):
            validate_match("c", "zed", 1, 1, ordering)


class TestCheckDenseOrdering:
    """Tests for full reorder validation."""

    def test_valid(self):
        """Test a permutation of 1..N passes."""
        check_dense_ordering([("b", 1), ("a", 2), ("c", 3)], ["a", "b", "c"])

    def test_gap(self):
        """Test a gap in the ranks is rejected."""
        with pytest.raises(InvalidOrdering, match="exactly 1..3"):
            check_dense_ordering([("a", 1), ("b", 2), ("c", 4)], ["a", "b", "c"])

    def test_missing_player(self):
        """Test every player must be listed."""
        with pytest.raises(InvalidOrdering, match="missing player"):
            check_dense_ordering([("a", 1), ("b", 2)], ["a", "b", "c"])

    def test_unknown_player(self):
        """Test unknown ids are rejected."""
        with pytest.raises(InvalidOrdering, match="unknown player"):
            check_dense_ordering([("a", 1), ("x", 2)], ["a"])

    def test_repeated_player(self):
        """Test a player cannot appear twice."""
        with pytest.raises(InvalidOrdering, match="more than once"):
            check_dense_ordering([("a", 1), ("a", 2)], ["a", "b"])
