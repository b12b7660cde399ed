"""Async SQLAlchemy engine and session management.

The :class:`Database` owns one engine and hands out short-lived sessions to
the repositories. Each session commits when its block exits cleanly and rolls
back otherwise.

Usage::

    database = Database("sqlite+aiosqlite:///./patient_records.db")
    await database.create_schema()
    async with database.session() as session:
        ...
    await database.dispose()
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import Any, AsyncIterator

from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import StaticPool

from repositories.orm import Base
from shared.observability.logger import get_logger

__all__ = ["Database"]

logger = get_logger(__name__)


def _engine_options(database_url: str, echo: bool) -> dict[str, Any]:
    options: dict[str, Any] = {"echo": echo}
    url = make_url(database_url)
    if url.get_backend_name() == "sqlite" and url.database in (None, "", ":memory:"):
        # A single shared connection keeps the in-memory database alive.
        options["poolclass"] = StaticPool
    else:
        options["pool_pre_ping"] = True
    return options


class Database:
    """Engine plus session factory for the patient record store."""

    def __init__(
        self,
        database_url: str,
        *,
        echo: bool = False,
    ) -> None:
        self.engine: AsyncEngine = create_async_engine(
            database_url, **_engine_options(database_url, echo)
        )
        self._sessionmaker = async_sessionmaker(
            self.engine,
            class_=AsyncSession,
            expire_on_commit=False,
        )

    @asynccontextmanager
    async def session(self) -> AsyncIterator[AsyncSession]:
        """Yield a session scoped to a single unit of work."""

        async with self._sessionmaker() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    async def create_schema(self) -> None:
        """Create every table registered on the ORM metadata."""

        async with self.engine.begin() as connection:
            await connection.run_sync(Base.metadata.create_all)
        logger.info("database_schema_ready", url=self.engine.url.render_as_string())

    async def dispose(self) -> None:
        """Close all pooled connections."""

        await self.engine.dispose()
