"""Database persistence for match records."""

from __future__ import annotations

import asyncio
import json
from datetime import datetime
from pathlib import Path
from typing import TYPE_CHECKING

import structlog
from sqlmodel import Session, col, select

from club_ladder.models import Match

from .repository import AsyncRepository

if TYPE_CHECKING:
    from sqlalchemy import Engine

logger = structlog.get_logger()


class MatchRepository(AsyncRepository):
    """Persist and query the append-only match log.

    Args:
        engine: SQLAlchemy engine.
        audit_path: Optional JSONL file that receives a copy of every
            recorded match.
    """

    def __init__(self, engine: Engine, audit_path: Path | None = None) -> None:
        super().__init__(engine)
        self._audit_path = audit_path

    async def record_match(
        self,
        winner_id: str,
        loser_id: str,
        winner_score: int,
        loser_score: int,
    ) -> Match:
        """Save a match result to the database and the JSONL backup."""

        def _db_save(session: Session) -> Match:
            match = Match(
                winner_id=winner_id,
                loser_id=loser_id,
                winner_score=winner_score,
                loser_score=loser_score,
            )
            session.add(match)
            return match

        match = await self._run_transaction(_db_save)

        if self._audit_path is not None:
            audit_path = self._audit_path

            def _save_jsonl() -> None:
                audit_path.parent.mkdir(parents=True, exist_ok=True)
                with audit_path.open("a", encoding="utf-8") as f:
                    f.write(json.dumps(match.model_dump(), default=str) + "\n")

            await asyncio.to_thread(_save_jsonl)

        logger.debug("match_saved", match_id=match.id)
        return match

    async def find_recent_match(
        self, winner_id: str, loser_id: str, since: datetime
    ) -> Match | None:
        """Get the newest match for a winner/loser pair recorded since ``since``."""

        def _get(session: Session) -> Match | None:
            statement = (
                select(Match)
                .where(
                    Match.winner_id == winner_id,
                    Match.loser_id == loser_id,
                    Match.created_at >= since,
                )
                .order_by(col(Match.created_at).desc())
            )
            return session.exec(statement).first()

        return await self._run_session(_get)

    async def list_matches(self, limit: int = 100) -> list[Match]:
        """Get recent matches, newest first."""

        def _get(session: Session) -> list[Match]:
            statement = select(Match).order_by(col(Match.created_at).desc()).limit(limit)
            return list(session.exec(statement).all())

        return await self._run_session(_get)
