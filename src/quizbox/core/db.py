"""
Async SQLAlchemy engine and session management.

`database_manager` is created once per process. Request handlers get sessions
through `quizbox.commons.depends.database_session`; services commit, the
manager only rolls back on error.
"""

from __future__ import annotations

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from typing import Any

import sqlalchemy as sa  # type: ignore[import-not-found]
from sqlalchemy import event  # type: ignore[import-not-found]
from sqlalchemy.ext.asyncio import (  # type: ignore[import-not-found]
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import StaticPool  # type: ignore[import-not-found]

from quizbox.commons.exceptions import BaseCoreException
from quizbox.commons.logging import logger
from quizbox.core.settings import settings


class DatabaseException(BaseCoreException):
    pass


def _enable_sqlite_foreign_keys(dbapi_connection, connection_record) -> None:  # type: ignore[no-untyped-def]
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def engine_options(url: str) -> dict[str, Any]:
    options: dict[str, Any] = {"echo": settings.DATABASE_ECHO}
    if url.startswith("sqlite"):
        options["connect_args"] = {"check_same_thread": False}
        if ":memory:" in url:
            # An in-memory db lives and dies with its connection; share one.
            options["poolclass"] = StaticPool
        return options
    options["pool_pre_ping"] = True
    options["pool_size"] = settings.DATABASE_POOL_SIZE
    return options


class DatabaseManager:
    def __init__(self) -> None:
        self.engine: AsyncEngine | None = None
        self.sessionmaker: async_sessionmaker[AsyncSession] | None = None

    async def initialize(self, url: str | None = None) -> None:
        if self.engine is not None:
            return
        url = url or settings.DATABASE_URL
        try:
            self.engine = create_async_engine(url, **engine_options(url))
        except Exception as exc:
            raise DatabaseException("Failed to initialize database", str(exc)) from exc
        if self.engine.dialect.name == "sqlite":
            # SQLite ignores ON DELETE CASCADE unless asked per connection.
            event.listen(self.engine.sync_engine, "connect", _enable_sqlite_foreign_keys)
        self.sessionmaker = async_sessionmaker(self.engine, expire_on_commit=False)
        logger.info("Database initialized (%s)", self.engine.url.render_as_string(hide_password=True))

    async def shutdown(self) -> None:
        if self.engine is None:
            return
        await self.engine.dispose()
        self.engine = None
        self.sessionmaker = None
        logger.info("Database shut down")

    async def ping(self) -> None:
        await self.initialize()
        async with self.session() as session:
            await session.execute(sa.text("SELECT 1"))

    @asynccontextmanager
    async def session(self) -> AsyncGenerator[AsyncSession, None]:
        if self.sessionmaker is None:
            raise DatabaseException("Database is not initialized")
        async with self.sessionmaker() as session:
            try:
                yield session
            except Exception:
                await session.rollback()
                raise


database_manager = DatabaseManager()
