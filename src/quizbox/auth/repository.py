from __future__ import annotations

import datetime as dt
from collections.abc import Sequence
from dataclasses import dataclass

import sqlalchemy as sa  # type: ignore[import-not-found]
from sqlalchemy.ext.asyncio import AsyncSession  # type: ignore[import-not-found]

from quizbox.auth.models import Session, User, UserStatus


def as_utc(value: dt.datetime | None) -> dt.datetime | None:
    # SQLite hands back naive datetimes even for timezone-aware columns.
    if value is None or value.tzinfo is not None:
        return value
    return value.replace(tzinfo=dt.UTC)


@dataclass(frozen=True)
class FullSession:
    """A session row joined with its owner's current status."""

    id: int
    user_id: int
    user_status: UserStatus
    deactivated_at: dt.datetime | None
    expires_at: dt.datetime | None
    ip_address: str
    last_refreshed_at: dt.datetime
    user_agent: str
    created_at: dt.datetime
    updated_at: dt.datetime | None


@dataclass(frozen=True)
class AuthRepository:
    async def get_user_by_email(
        self, session: AsyncSession, *, email: str
    ) -> User | None:
        stmt = sa.select(User).where(sa.func.lower(User.email) == email.strip().lower())
        res = await session.execute(stmt)
        return res.scalar_one_or_none()

    async def get_user_by_id(self, session: AsyncSession, *, user_id: int) -> User | None:
        stmt = sa.select(User).where(User.id == user_id)
        res = await session.execute(stmt)
        return res.scalar_one_or_none()

    async def insert_user(
        self,
        session: AsyncSession,
        *,
        first_name: str,
        last_name: str,
        email: str,
        password_hash: str,
        status: UserStatus,
    ) -> User:
        user = User(
            first_name=first_name.strip(),
            last_name=last_name.strip(),
            email=email.strip().lower(),
            password_hash=password_hash,
            status=status,
            email_verified=False,
        )
        session.add(user)
        await session.flush()
        await session.refresh(user)
        return user

    async def list_users(
        self, session: AsyncSession, *, limit: int, offset: int
    ) -> Sequence[User]:
        stmt = sa.select(User).order_by(User.id.asc()).limit(limit).offset(offset)
        res = await session.execute(stmt)
        return res.scalars().all()

    async def count_users(self, session: AsyncSession) -> int:
        res = await session.execute(sa.select(sa.func.count()).select_from(User))
        return int(res.scalar_one())

    async def delete_user(self, session: AsyncSession, *, user_id: int) -> int:
        # Sessions, questions, answers and votes go with the row (ON DELETE CASCADE).
        res = await session.execute(sa.delete(User).where(User.id == user_id))
        await session.flush()
        return int(res.rowcount or 0)

    async def update_user(
        self,
        session: AsyncSession,
        *,
        user: User,
        first_name: str,
        last_name: str,
        email: str,
        now: dt.datetime,
    ) -> User:
        user.first_name = first_name.strip()
        user.last_name = last_name.strip()
        user.email = email.strip().lower()
        user.updated_at = now
        await session.flush()
        return user

    async def insert_session(
        self,
        session: AsyncSession,
        *,
        user_id: int,
        ip_address: str,
        user_agent: str,
        expires_at: dt.datetime | None,
        now: dt.datetime,
    ) -> Session:
        s = Session(
            user_id=user_id,
            ip_address=ip_address,
            user_agent=user_agent,
            expires_at=expires_at,
            last_refreshed_at=now,
            created_at=now,
        )
        session.add(s)
        await session.flush()
        await session.refresh(s)
        return s

    async def get_session_by_id(
        self, session: AsyncSession, *, session_id: int
    ) -> Session | None:
        stmt = sa.select(Session).where(Session.id == session_id)
        res = await session.execute(stmt)
        return res.scalar_one_or_none()

    async def get_full_session_by_id(
        self, session: AsyncSession, *, session_id: int
    ) -> FullSession | None:
        stmt = (
            sa.select(
                Session.id,
                Session.user_id,
                User.status,
                Session.deactivated_at,
                Session.expires_at,
                Session.ip_address,
                Session.last_refreshed_at,
                Session.user_agent,
                Session.created_at,
                Session.updated_at,
            )
            .join(User, User.id == Session.user_id)
            .where(Session.id == session_id)
        )
        res = await session.execute(stmt)
        row = res.one_or_none()
        if row is None:
            return None
        return FullSession(
            id=row.id,
            user_id=row.user_id,
            user_status=row.status,
            deactivated_at=as_utc(row.deactivated_at),
            expires_at=as_utc(row.expires_at),
            ip_address=row.ip_address,
            last_refreshed_at=as_utc(row.last_refreshed_at),
            user_agent=row.user_agent,
            created_at=as_utc(row.created_at),
            updated_at=as_utc(row.updated_at),
        )

    async def mark_session_refreshed(
        self, session: AsyncSession, *, session_id: int, now: dt.datetime
    ) -> None:
        stmt = (
            sa.update(Session)
            .where(Session.id == session_id)
            .values(last_refreshed_at=now, updated_at=now)
        )
        await session.execute(stmt)
        await session.flush()

    async def deactivate_session(
        self, session: AsyncSession, *, session_id: int, now: dt.datetime
    ) -> int:
        # Only the first deactivation sticks; later calls match no rows.
        stmt = (
            sa.update(Session)
            .where(Session.id == session_id)
            .where(Session.deactivated_at.is_(None))
            .values(deactivated_at=now, updated_at=now)
        )
        res = await session.execute(stmt)
        await session.flush()
        return int(res.rowcount or 0)
