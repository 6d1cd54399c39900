"""Database engine setup for the ladder repositories."""

from __future__ import annotations

from pathlib import Path

import structlog
from sqlalchemy.pool import NullPool, StaticPool
from sqlmodel import SQLModel, create_engine

from club_ladder.core.config import LadderConfig

from .match_repository import MatchRepository
from .player_repository import PlayerRepository

logger = structlog.get_logger()


def _is_memory_sqlite(url: str) -> bool:
    return url in ("sqlite://", "sqlite:///:memory:")


class LadderDatabase:
    """Own the engine and the player and match repositories built on it."""

    def __init__(self, config: LadderConfig, database_url: str | None = None) -> None:
        """Initialize the database.

        Args:
            config: Ladder configuration.
            database_url: Optional URL overriding the configured one.
        """
        self.config = config
        self.url = database_url or config.get_database_url()
        self._engine = None
        self._init_db()
        audit_path = Path(config.audit_log) if config.audit_log else None
        self.players = PlayerRepository(self._engine)
        self.matches = MatchRepository(self._engine, audit_path=audit_path)

    def _init_db(self) -> None:
        """Create the engine and tables."""
        if _is_memory_sqlite(self.url):
            # One shared connection, otherwise each thread sees an empty database
            self._engine = create_engine(
                self.url,
                connect_args={"check_same_thread": False},
                poolclass=StaticPool,
            )
        else:
            self._engine = create_engine(self.url, poolclass=NullPool)
        SQLModel.metadata.create_all(self._engine)
        logger.info("database_init", url=self._engine.url.render_as_string(hide_password=True))

    async def close(self) -> None:
        """Dispose of the database engine."""
        if self._engine:
            self._engine.dispose()
            self._engine = None
