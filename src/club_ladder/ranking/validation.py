"""Match validation and the challenge rule."""

from __future__ import annotations

from collections.abc import Iterable, Sequence

from club_ladder.core.errors import InvalidMatch, InvalidOrdering, ParticipantNotFound
from club_ladder.models import Player

DEFAULT_CHALLENGE_SPREAD = 3


def validate_scores(winner_score: int, loser_score: int) -> None:
    """Reject scores that cannot describe a completed match.

    Args:
        winner_score: Winner's score.
        loser_score: Loser's score.

    Raises:
        InvalidMatch: If a score is not an integer, is not positive, or the
            winner did not outscore the loser.
    """
    for label, score in (("winner", winner_score), ("loser", loser_score)):
        if isinstance(score, bool) or not isinstance(score, int):
            raise InvalidMatch(f"{label} score must be a whole number")
        if score <= 0:
            raise InvalidMatch(f"{label} score must be positive")
    if winner_score <= loser_score:
        raise InvalidMatch(
            "winner score must be higher than loser score",
            "Check that winner and loser were not swapped.",
        )


def check_challenge(
    challenger_rank: int,
    target_rank: int,
    spread: int = DEFAULT_CHALLENGE_SPREAD,
) -> None:
    """Enforce the challenge rule.

    A player may only challenge someone ranked above them (a lower rank
    number), at most ``spread`` places up the ladder.

    Raises:
        InvalidMatch: If the challenge is not allowed.
    """
    if challenger_rank <= target_rank:
        raise InvalidMatch("you cannot challenge players ranked below you")
    if challenger_rank - target_rank > spread:
        raise InvalidMatch(f"you can only challenge players up to {spread} ranks above you")


def challengeable_targets(
    ordering: Sequence[Player],
    challenger_id: str,
    spread: int = DEFAULT_CHALLENGE_SPREAD,
) -> list[Player]:
    """List the players a challenger may challenge, best rank first."""
    challenger = next((p for p in ordering if p.id == challenger_id), None)
    if challenger is None:
        raise ParticipantNotFound(challenger_id, "challenger")
    return sorted(
        (
            p
            for p in ordering
            if p.id != challenger_id and 0 < challenger.rank - p.rank <= spread
        ),
        key=lambda p: p.rank,
    )


def check_dense_ordering(
    assignments: Sequence[tuple[str, int]],
    player_ids: Iterable[str],
) -> None:
    """Ensure a full reorder names every player once with ranks exactly 1..N.

    Raises:
        InvalidOrdering: If players are missing, unknown or repeated, or the
            ranks are not a permutation of 1..N.
    """
    known = set(player_ids)
    ids = [pid for pid, _ in assignments]
    ranks = [rank for _, rank in assignments]
    if len(set(ids)) != len(ids):
        raise InvalidOrdering("a player appears more than once")
    unknown = set(ids) - known
    if unknown:
        raise InvalidOrdering(f"unknown player(s): {', '.join(sorted(unknown))}")
    missing = known - set(ids)
    if missing:
        raise InvalidOrdering(f"missing player(s): {', '.join(sorted(missing))}")
    if sorted(ranks) != list(range(1, len(ranks) + 1)):
        raise InvalidOrdering(f"ranks must be exactly 1..{len(ranks)}")


def validate_match(
    winner_id: str,
    loser_id: str,
    winner_score: int,
    loser_score: int,
    ordering: Sequence[Player],
    *,
    challenger_id: str | None = None,
    spread: int = DEFAULT_CHALLENGE_SPREAD,
) -> None:
    """Check every precondition of a match before it is recorded.

    Args:
        winner_id: Winning player.
        loser_id: Losing player.
        winner_score: Winner's score.
        loser_score: Loser's score.
        ordering: Current ladder snapshot.
        challenger_id: Player who issued the challenge. Defaults to the
            winner, in which case the match must be an upset within range.
        spread: Maximum challenge spread.

    Raises:
        InvalidMatch: If scores, participants or the challenge are invalid.
        ParticipantNotFound: If a participant is not on the ladder.
    """
    if winner_id == loser_id:
        raise InvalidMatch("winner and loser must be different players")
    validate_scores(winner_score, loser_score)

    ranks = {p.id: p.rank for p in ordering}
    if winner_id not in ranks:
        raise ParticipantNotFound(winner_id, "winner")
    if loser_id not in ranks:
        raise ParticipantNotFound(loser_id, "loser")

    challenger = challenger_id or winner_id
    if challenger not in (winner_id, loser_id):
        raise InvalidMatch("challenger must be one of the two players")
    target = loser_id if challenger == winner_id else winner_id
    check_challenge(ranks[challenger], ranks[target], spread)
