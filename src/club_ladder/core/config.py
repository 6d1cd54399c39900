"""Configuration schemas and loading for the club ladder."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Literal

import yaml
from pydantic import BaseModel, Field, field_validator

from club_ladder.core.errors import ValidationError

DEFAULT_DATABASE_URL = "sqlite:///ladder.db"
DATABASE_URL_ENV = "CLUB_LADDER_DATABASE_URL"


class RankingConfig(BaseModel):
    """Challenge rule and commit strategy configuration.

    Attributes:
        challenge_spread: Maximum number of places a challenger may look up
            the ladder.
        staging_offset: Distance above the current maximum rank where
            placeholder ranks start during a staged commit.
        commit_mode: How rank changes reach the store:
            - "auto": atomic when the store supports transactions, else staged.
            - "atomic": one transaction for every change.
            - "staged": one write per player through placeholder ranks.
        compensate_on_failure: Undo already applied staged writes when a
            later write fails.
        duplicate_window_seconds: Cooldown during which the same
            winner/loser pair cannot be recorded twice. 0 disables the guard.
    """

    challenge_spread: int = Field(default=3, ge=1)
    staging_offset: int = Field(default=1000, ge=1)
    commit_mode: Literal["auto", "atomic", "staged"] = "auto"
    compensate_on_failure: bool = True
    duplicate_window_seconds: int = Field(default=300, ge=0)


class LadderConfig(BaseModel):
    """Complete ladder configuration."""

    club_name: str = "Club Ladder"
    database_url: str | None = None
    audit_log: str | None = None
    ranking: RankingConfig = Field(default_factory=RankingConfig)
    history_limit: int = Field(default=100, ge=1)
    sample_players: list[str] = Field(
        default_factory=lambda: [
            "Alex Johnson",
            "Sarah Williams",
            "Michael Brown",
            "Emily Davis",
            "David Miller",
            "Jessica Wilson",
            "James Moore",
            "Amanda Taylor",
        ]
    )

    @field_validator("sample_players")
    @classmethod
    def validate_sample_names(cls, v: list[str]) -> list[str]:
        """Ensure sample player names are non-empty strings."""
        for name in v:
            if not name or not name.strip():
                msg = "Player names cannot be empty"
                raise ValueError(msg)
        return v

    def get_database_url(self) -> str:
        """Get database URL from environment or config."""
        return os.environ.get(DATABASE_URL_ENV) or self.database_url or DEFAULT_DATABASE_URL


def load_config(path: str | Path | None = None) -> LadderConfig:
    """Load and validate configuration from YAML file.

    Args:
        path: Path to YAML configuration file. ``None`` returns defaults.

    Returns:
        Validated LadderConfig instance.

    Raises:
        FileNotFoundError: If config file doesn't exist.
        ValidationError: If the file is not a YAML mapping.
        pydantic.ValidationError: If config is invalid.
    """
    if path is None:
        return LadderConfig()

    config_path = Path(path)
    if not config_path.exists():
        msg = f"Configuration file not found: {config_path}"
        raise FileNotFoundError(msg)

    with config_path.open() as f:
        data = yaml.safe_load(f) or {}

    if not isinstance(data, dict):
        raise ValidationError(str(config_path), "The top level of the file must be a mapping.")

    return LadderConfig.model_validate(data)
