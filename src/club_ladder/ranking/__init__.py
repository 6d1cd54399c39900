"""Ranking module for the club ladder.

Provides the challenge-rule resolver, match validation and the commit
strategies that write rank changes to a store.
"""

from __future__ import annotations

from club_ladder.ranking.base import (
    LadderStore,
    MatchStore,
    PlayerStore,
    TransactionalLadderStore,
)
from club_ladder.ranking.commit import (
    DEFAULT_STAGING_OFFSET,
    commit_atomic,
    commit_staged,
    plan_staged_writes,
)
from club_ladder.ranking.resolver import (
    RankChange,
    RankResolution,
    apply_resolution,
    resolve,
)
from club_ladder.ranking.validation import (
    DEFAULT_CHALLENGE_SPREAD,
    challengeable_targets,
    check_dense_ordering,
    check_challenge,
    validate_match,
    validate_scores,
)

__all__ = [
    "DEFAULT_CHALLENGE_SPREAD",
    "DEFAULT_STAGING_OFFSET",
    "LadderStore",
    "MatchStore",
    "PlayerStore",
    "RankChange",
    "RankResolution",
    "TransactionalLadderStore",
    "apply_resolution",
    "challengeable_targets",
    "check_dense_ordering",
    "check_challenge",
    "commit_atomic",
    "commit_staged",
    "plan_staged_writes",
    "resolve",
    "validate_match",
    "validate_scores",
]
