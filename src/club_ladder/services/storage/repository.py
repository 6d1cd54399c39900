"""Shared async repository helpers for SQLModel session work."""

from __future__ import annotations

import asyncio
from collections.abc import Callable
from typing import TYPE_CHECKING, TypeVar

from sqlmodel import Session

if TYPE_CHECKING:
    from sqlalchemy import Engine

T = TypeVar("T")


class AsyncRepository:
    """Run sync SQLModel session work on a worker thread for async callers.

    Every call gets its own Session. Loaded rows stay readable after the
    session closes, so callers receive plain detached players and matches.
    """

    def __init__(self, engine: Engine) -> None:
        self._engine = engine

    def _session(self) -> Session:
        return Session(self._engine, expire_on_commit=False)

    async def _run_session(self, fn: Callable[[Session], T]) -> T:
        """Run a read-only function inside a Session on a worker thread."""

        def _run() -> T:
            with self._session() as session:
                return fn(session)

        return await asyncio.to_thread(_run)

    async def _run_transaction(self, fn: Callable[[Session], T]) -> T:
        """Run ``fn`` in one transaction and commit once it returns.

        If ``fn`` raises, nothing it wrote is committed.
        """

        def _run() -> T:
            with self._session() as session, session.begin():
                return fn(session)

        return await asyncio.to_thread(_run)
