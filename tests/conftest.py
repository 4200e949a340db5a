"""
Global pytest fixtures.

Store-backed tests run against in-memory SQLite (aiosqlite, one shared
connection via StaticPool). Config is forced through the environment BEFORE
any quizbox import, since settings are read at import time.
"""

import os

os.environ.setdefault("JWT_SIGNING_KEY", "test-signing-key-for-quizbox-0123456789abcdef")
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
# Keep hashing cheap in tests.
os.environ.setdefault("PASSWORD_HASH_ITERATIONS", "1000")

import datetime as dt

import httpx
import pytest  # type: ignore[import-not-found]
import sqlalchemy as sa  # type: ignore[import-not-found]
from fastapi import FastAPI
from sqlalchemy.ext.asyncio import AsyncSession  # type: ignore[import-not-found]

from quizbox.api.main import build_app
from quizbox.auth.depends import get_auth_service
from quizbox.auth.models import Base, Session, User, UserStatus
from quizbox.auth.passwords import hash_password
from quizbox.auth.service import AuthService
from quizbox.core.db import database_manager

# Registers the questions and votes tables on Base.metadata.
import quizbox.questions.models  # noqa: F401
import quizbox.votes.models  # noqa: F401

PASSWORD = "correct-horse-9"


@pytest.fixture(scope="session")
def anyio_backend() -> str:
    """Default AnyIO backend for async tests."""
    return "asyncio"


@pytest.fixture()
async def engine():
    # DATABASE_URL is in-memory SQLite, so the manager shares one connection.
    await database_manager.initialize()
    async with database_manager.engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield database_manager.engine
    await database_manager.shutdown()


@pytest.fixture()
async def db_session(engine) -> AsyncSession:
    async with database_manager.session() as session:
        yield session


@pytest.fixture()
def auth_service() -> AuthService:
    return get_auth_service()


@pytest.fixture()
def create_user(engine):
    """Insert a user directly, bypassing registration rules."""

    async def _create(
        email: str = "ada@example.com",
        *,
        password: str = PASSWORD,
        status: UserStatus = UserStatus.ACTIVE,
    ) -> User:
        async with database_manager.session() as session:
            user = User(
                first_name="Ada",
                last_name="Lovelace",
                email=email,
                password_hash=hash_password(password, iterations=1000),
                status=status,
                email_verified=status is UserStatus.ACTIVE,
            )
            session.add(user)
            await session.commit()
            await session.refresh(user)
            return user

    return _create


@pytest.fixture()
def create_session(engine):
    """Insert a session row directly (optionally with a fixed id)."""

    async def _create(
        user_id: int,
        *,
        session_id: int | None = None,
        deactivated_at: dt.datetime | None = None,
        expires_at: dt.datetime | None = None,
    ) -> Session:
        now = dt.datetime.now(dt.UTC)
        async with database_manager.session() as session:
            s = Session(
                user_id=user_id,
                deactivated_at=deactivated_at,
                expires_at=expires_at,
                ip_address="127.0.0.1",
                user_agent="pytest",
                last_refreshed_at=now,
                created_at=now,
            )
            if session_id is not None:
                s.id = session_id
            session.add(s)
            await session.commit()
            await session.refresh(s)
            return s

    return _create


@pytest.fixture()
def count_sessions(engine):
    async def _count() -> int:
        async with database_manager.session() as session:
            res = await session.execute(sa.select(sa.func.count()).select_from(Session))
            return int(res.scalar_one())

    return _count


@pytest.fixture()
def app(engine) -> FastAPI:
    return build_app()


@pytest.fixture()
async def client(app: FastAPI):
    async with httpx.AsyncClient(
        transport=httpx.ASGITransport(app=app),
        base_url="http://test",
    ) as client:
        yield client
