"""Ladder service for recording matches and applying rank changes."""

from __future__ import annotations

import asyncio
from collections.abc import Sequence
from datetime import UTC, datetime, timedelta

import structlog

from club_ladder.core.config import LadderConfig
from club_ladder.core.errors import (
    ConfigurationError,
    DuplicateMatch,
    InvalidOrdering,
    LadderError,
)
from club_ladder.models import Match, Player
from club_ladder.ranking import (
    MatchStore,
    PlayerStore,
    RankResolution,
    TransactionalLadderStore,
    challengeable_targets,
    commit_atomic,
    commit_staged,
    resolve,
    validate_match,
)

logger = structlog.get_logger()


def _clean_name(name: str) -> str:
    cleaned = name.strip()
    if not cleaned:
        raise LadderError("Player name cannot be empty")
    return cleaned


class LadderService:
    """Orchestrates match validation, recording, rank resolution and commits.

    Every operation that changes ranks runs under one ``asyncio.Lock``, so
    resolutions and administrative reorders issued through the same service
    never interleave their writes. A second lock covers the duplicate check
    and the insert in ``record_match``, so two submissions of the same pair
    cannot both pass the check.
    """

    def __init__(
        self,
        config: LadderConfig,
        players: PlayerStore,
        matches: MatchStore,
    ) -> None:
        """Initialize ladder service.

        Args:
            config: Ladder configuration.
            players: Store holding the ranked players.
            matches: Append-only match log.
        """
        self.config = config
        self.players = players
        self.matches = matches
        self._write_lock = asyncio.Lock()
        self._record_lock = asyncio.Lock()

    @property
    def commit_mode(self) -> str:
        """Resolve the configured commit mode against the store's capabilities."""
        mode = self.config.ranking.commit_mode
        transactional = isinstance(self.players, TransactionalLadderStore)
        if mode == "auto":
            return "atomic" if transactional else "staged"
        if mode == "atomic" and not transactional:
            raise ConfigurationError(
                "Atomic commits need a store with transactional batch writes",
                "Set ranking.commit_mode to 'staged' or 'auto'.",
            )
        return mode

    async def standings(self) -> list[Player]:
        """Get the ladder, rank 1 first."""
        return await self.players.list_players_by_rank()

    async def challengeable(self, challenger_id: str) -> list[Player]:
        """List the players a challenger may challenge."""
        ordering = await self.players.list_players_by_rank()
        return challengeable_targets(
            ordering, challenger_id, self.config.ranking.challenge_spread
        )

    async def history(self, limit: int | None = None) -> list[Match]:
        """Get recent matches, newest first."""
        return await self.matches.list_matches(limit or self.config.history_limit)

    async def record_match(
        self,
        winner_id: str,
        loser_id: str,
        winner_score: int,
        loser_score: int,
        *,
        challenger_id: str | None = None,
    ) -> Match:
        """Validate and store a match without touching ranks.

        Args:
            winner_id: Winning player.
            loser_id: Losing player.
            winner_score: Winner's score.
            loser_score: Loser's score.
            challenger_id: Player who issued the challenge (defaults to winner).

        Returns:
            The stored match.

        Raises:
            InvalidMatch: If the scores, players or challenge are invalid.
            ParticipantNotFound: If either player is not on the ladder.
            DuplicateMatch: If the pair was recorded inside the cooldown window.
        """
        ordering = await self.players.list_players_by_rank()
        validate_match(
            winner_id,
            loser_id,
            winner_score,
            loser_score,
            ordering,
            challenger_id=challenger_id,
            spread=self.config.ranking.challenge_spread,
        )

        window = self.config.ranking.duplicate_window_seconds
        async with self._record_lock:
            if window > 0:
                since = datetime.now(UTC) - timedelta(seconds=window)
                recent = await self.matches.find_recent_match(winner_id, loser_id, since)
                if recent is not None:
                    logger.warning(
                        "duplicate_match_rejected",
                        winner_id=winner_id,
                        loser_id=loser_id,
                        previous_match=recent.id,
                    )
                    raise DuplicateMatch(winner_id, loser_id, window)

            match = await self.matches.record_match(
                winner_id, loser_id, winner_score, loser_score
            )
        logger.info(
            "match_recorded",
            match_id=match.id,
            winner_id=winner_id,
            loser_id=loser_id,
            score=f"{winner_score}-{loser_score}",
        )
        return match

    async def process_match_result(self, match: Match) -> RankResolution:
        """Resolve a recorded match against a fresh snapshot and commit it.

        Args:
            match: Recorded match.

        Returns:
            The applied resolution (empty when the winner was already ahead).

        Raises:
            ParticipantNotFound: If winner or loser left the ladder. Nothing
                is written.
            StoreWriteFailure: If the commit fails.
        """
        async with self._write_lock:
            ordering = await self.players.list_players_by_rank()
            resolution = resolve(match, ordering)
            logger.info(
                "rank_resolution",
                match_id=match.id,
                winner_rank=resolution.winner_rank,
                loser_rank=resolution.loser_rank,
                upset=resolution.is_upset,
                changes=len(resolution.changes),
            )
            if not resolution.is_upset:
                return resolution

            if self.commit_mode == "atomic":
                await commit_atomic(self.players, resolution)
            else:
                await commit_staged(
                    self.players,
                    resolution,
                    max_rank=max(p.rank for p in ordering),
                    offset=self.config.ranking.staging_offset,
                    compensate=self.config.ranking.compensate_on_failure,
                )
            logger.info("ranks_updated", match_id=match.id, mode=self.commit_mode)
            return resolution

    async def submit_match(
        self,
        winner_id: str,
        loser_id: str,
        winner_score: int,
        loser_score: int,
        *,
        challenger_id: str | None = None,
    ) -> tuple[Match, RankResolution]:
        """Record a match and apply its rank changes.

        The match stays recorded even if the rank commit then fails.
        """
        match = await self.record_match(
            winner_id,
            loser_id,
            winner_score,
            loser_score,
            challenger_id=challenger_id,
        )
        resolution = await self.process_match_result(match)
        return match, resolution

    # ==================== Player administration ====================

    async def add_player(self, name: str) -> Player:
        """Add a player at the bottom of the ladder."""
        async with self._write_lock:
            return await self.players.create_player(_clean_name(name))

    async def rename_player(self, player_id: str, name: str) -> Player:
        """Change a player's display name."""
        return await self.players.rename_player(player_id, _clean_name(name))

    async def remove_player(self, player_id: str) -> None:
        """Remove a player; everyone below moves up one place."""
        async with self._write_lock:
            await self.players.delete_player(player_id)

    async def reorder(self, player_ids: Sequence[str]) -> None:
        """Set the ladder order explicitly, best player first."""
        if len(set(player_ids)) != len(player_ids):
            raise InvalidOrdering("a player appears more than once")
        assignments = [(pid, rank) for rank, pid in enumerate(player_ids, 1)]
        async with self._write_lock:
            await self.players.reorder_ranks(assignments)

    async def seed_sample_players(self, names: Sequence[str] | None = None) -> list[Player]:
        """Fill an empty ladder with sample players."""
        chosen = [_clean_name(n) for n in (names or self.config.sample_players)]
        async with self._write_lock:
            return await self.players.seed_players(chosen)
