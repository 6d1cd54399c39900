"""Core configuration and errors for the club ladder."""

from club_ladder.core.config import (
    DATABASE_URL_ENV,
    DEFAULT_DATABASE_URL,
    LadderConfig,
    RankingConfig,
    load_config,
)
from club_ladder.core.errors import (
    ConfigurationError,
    DuplicateMatch,
    InvalidMatch,
    InvalidOrdering,
    LadderError,
    LadderNotEmpty,
    ParticipantNotFound,
    PlayerNotFound,
    StoreWriteFailure,
    ValidationError,
)

__all__ = [
    "DATABASE_URL_ENV",
    "DEFAULT_DATABASE_URL",
    "LadderConfig",
    "RankingConfig",
    "load_config",
    "ConfigurationError",
    "DuplicateMatch",
    "InvalidMatch",
    "InvalidOrdering",
    "LadderError",
    "LadderNotEmpty",
    "ParticipantNotFound",
    "PlayerNotFound",
    "StoreWriteFailure",
    "ValidationError",
]
