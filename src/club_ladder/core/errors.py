"""Custom exceptions for ladder operations and configuration errors."""

from __future__ import annotations

from collections.abc import Sequence


class LadderError(Exception):
    """Base exception for ladder errors with optional suggestions."""

    label = "Ladder Error"

    def __init__(self, message: str, suggestion: str | None = None) -> None:
        self.message = message
        self.suggestion = suggestion
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        msg = f"[{self.label}] {self.message}"
        if self.suggestion:
            msg += f"\n[Suggestion] {self.suggestion}"
        return msg


class ConfigurationError(LadderError):
    """Base exception for configuration errors."""

    label = "Configuration Error"


class ValidationError(ConfigurationError):
    """Error when configuration validation fails."""

    def __init__(self, field: str, reason: str) -> None:
        super().__init__(
            f"Invalid value for '{field}'",
            f"{reason}",
        )


class InvalidMatch(LadderError):
    """A match result was rejected before touching the ladder."""

    def __init__(self, reason: str, suggestion: str | None = None) -> None:
        self.reason = reason
        super().__init__(f"Invalid match: {reason}", suggestion)


class ParticipantNotFound(LadderError):
    """Winner or loser is missing from the current ladder snapshot."""

    def __init__(self, player_id: str, role: str) -> None:
        self.player_id = player_id
        self.role = role
        super().__init__(
            f"{role.capitalize()} '{player_id}' is not on the ladder",
            "Reload the ladder; the player may have been removed.",
        )


class PlayerNotFound(LadderError):
    """An administrative operation referenced an unknown player."""

    def __init__(self, player_id: str) -> None:
        self.player_id = player_id
        super().__init__(f"Player '{player_id}' does not exist")


class DuplicateMatch(LadderError):
    """The same winner/loser pair was recorded inside the cooldown window."""

    def __init__(self, winner_id: str, loser_id: str, window_seconds: int) -> None:
        self.winner_id = winner_id
        self.loser_id = loser_id
        self.window_seconds = window_seconds
        if window_seconds % 60:
            wait = f"{window_seconds} second(s)"
        else:
            wait = f"{window_seconds // 60} minute(s)"
        super().__init__(
            "A match between these players was recently recorded",
            f"Please wait {wait} before submitting it again.",
        )


class InvalidOrdering(LadderError):
    """A requested ladder order does not cover every player with ranks 1..N."""

    def __init__(self, reason: str) -> None:
        self.reason = reason
        super().__init__(
            f"Invalid ladder order: {reason}",
            "Provide every player exactly once with ranks 1..N.",
        )


class LadderNotEmpty(LadderError):
    """Seeding was requested for a ladder that already has players."""

    def __init__(self, count: int) -> None:
        self.count = count
        super().__init__(
            f"Ladder already has {count} player(s)",
            "Clear the players first to seed.",
        )


class StoreWriteFailure(LadderError):
    """A single rank write failed while committing a resolution.

    Attributes:
        player_id: Player whose write failed.
        rank: Rank that was being written.
        applied: ``(player_id, rank)`` writes completed before the failure.
        compensated: Whether the applied writes were undone afterwards.
    """

    def __init__(
        self,
        player_id: str | None,
        rank: int | None,
        applied: Sequence[tuple[str, int]] = (),
        cause: BaseException | None = None,
        compensated: bool = False,
    ) -> None:
        self.player_id = player_id
        self.rank = rank
        self.applied = list(applied)
        self.cause = cause
        self.compensated = compensated
        if player_id is None:
            message = "Failed to commit rank changes"
        else:
            message = f"Failed to move player {player_id} to rank {rank}"
        if cause is not None:
            message += f": {cause}"
        if compensated:
            suggestion = "Previous ranks were restored; retry the submission."
        elif self.applied:
            suggestion = (
                f"{len(self.applied)} write(s) were already applied; "
                "the ladder needs manual correction."
            )
        else:
            suggestion = "No rank changes were applied; retry the submission."
        super().__init__(message, suggestion)
