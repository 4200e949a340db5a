from __future__ import annotations

import contextlib
import datetime as dt
import re
import secrets
from collections.abc import Sequence
from dataclasses import dataclass, field

from sqlalchemy.exc import IntegrityError  # type: ignore[import-not-found]
from sqlalchemy.ext.asyncio import AsyncSession  # type: ignore[import-not-found]

from quizbox.auth.exceptions import (
    AuthServiceConflictException,
    AuthServiceNotFoundException,
    AuthServiceUnauthorizedException,
    AuthServiceUnprocessableException,
    PasswordMismatchException,
    SessionDeactivatedException,
    UserInactiveException,
    UserUnverifiedException,
)
from quizbox.auth.models import Session, User, UserStatus
from quizbox.auth.passwords import hash_password, validate_password, verify_password
from quizbox.auth.repository import AuthRepository, FullSession
from quizbox.auth.tokens import TokenClaims, TokenCodec
from quizbox.commons.logging import logger
from quizbox.core.settings import settings

EMAIL_RE = re.compile(r"^[a-z0-9._%+\-]+@[a-z0-9.\-]+\.[a-z]{2,10}$")
MAX_EMAIL_LENGTH = 30

INVALID_CREDENTIALS = "invalid email or password"


def _utcnow() -> dt.datetime:
    return dt.datetime.now(dt.UTC)


def validate_profile(first_name: str, last_name: str, email: str) -> list[str]:
    errors: list[str] = []
    if not first_name.strip() or not last_name.strip():
        errors.append("name cannot be empty")
    email = email.strip().lower()
    if not 1 <= len(email) <= MAX_EMAIL_LENGTH:
        errors.append("email cannot be too short or too long")
    if not EMAIL_RE.match(email):
        errors.append("invalid email provided")
    return errors


def session_validation_error(
    full: FullSession | None,
    claims: TokenClaims,
    *,
    require_active_user: bool,
    now: dt.datetime,
) -> str | None:
    """
    The single validity predicate for a token's session.

    Returns a reason string when the session must not authorize the request,
    or None when it may. Checks run in a fixed order so the logged reason is
    the first one that failed.
    """
    if full is None:
        return f"session_id={claims.session_id} not found"
    if full.user_id != claims.user_id:
        return (
            f"session_id={claims.session_id} belongs to user_id={full.user_id}, "
            f"token has user_id={claims.user_id}"
        )
    if require_active_user and not full.user_status.is_active:
        return f"user_id={full.user_id} is {full.user_status.value}"
    if full.deactivated_at is not None:
        return f"session_id={full.id} is deactivated"
    if full.expires_at is not None and full.expires_at <= now:
        return f"session_id={full.id} expired"
    return None


@dataclass
class AuthService:
    repo: AuthRepository
    codec: TokenCodec
    session_ttl: dt.timedelta | None = None
    password_iterations: int = 24_000
    # Unknown emails are checked against this, so every failed login costs one PBKDF2 run.
    _dummy_hash: str = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self._dummy_hash = hash_password(
            secrets.token_urlsafe(16), iterations=self.password_iterations
        )

    @classmethod
    def create(cls) -> "AuthService":
        ttl_hours = settings.AUTH_SESSION_TTL_HOURS
        return cls(
            repo=AuthRepository(),
            codec=TokenCodec(
                settings.JWT_SIGNING_KEY,
                algorithm=settings.JWT_ALGORITHM,
                ttl=dt.timedelta(days=settings.AUTH_TOKEN_TTL_DAYS),
                refresh_after=dt.timedelta(minutes=settings.AUTH_TOKEN_REFRESH_MINUTES),
            ),
            session_ttl=dt.timedelta(hours=ttl_hours) if ttl_hours else None,
            password_iterations=settings.PASSWORD_HASH_ITERATIONS,
        )

    async def register(
        self,
        session: AsyncSession,
        *,
        first_name: str,
        last_name: str,
        email: str,
        password: str,
        password_confirmation: str,
    ) -> User:
        errors = validate_profile(first_name, last_name, email)
        if errors:
            raise AuthServiceUnprocessableException("could not register user", ", ".join(errors))
        validate_password(password, password_confirmation)

        existing = await self.repo.get_user_by_email(session, email=email)
        if existing is not None:
            raise AuthServiceConflictException(
                "email_taken", "that email is already registered"
            )

        try:
            user = await self.repo.insert_user(
                session,
                first_name=first_name,
                last_name=last_name,
                email=email,
                password_hash=hash_password(password, iterations=self.password_iterations),
                status=UserStatus.ACTIVE,
            )
            await session.commit()
        except IntegrityError as exc:
            await session.rollback()
            raise AuthServiceConflictException(
                "email_taken", "that email is already registered"
            ) from exc
        logger.info("Registered user_id=%s", user.id)
        return user

    async def login(
        self,
        session: AsyncSession,
        *,
        email: str,
        password: str,
        ip_address: str = "",
        user_agent: str = "",
        now: dt.datetime | None = None,
    ) -> tuple[str, User, Session]:
        now = now or _utcnow()

        user = await self.repo.get_user_by_email(session, email=email)
        if user is None:
            with contextlib.suppress(PasswordMismatchException):
                verify_password(self._dummy_hash, password)
            logger.warning("Login rejected: unknown email")
            raise AuthServiceUnauthorizedException(INVALID_CREDENTIALS)

        try:
            verify_password(user.password_hash, password)
        except PasswordMismatchException as exc:
            logger.warning("Login rejected: wrong password for user_id=%s", user.id)
            raise AuthServiceUnauthorizedException(INVALID_CREDENTIALS) from exc

        if user.status.is_unverified:
            raise UserUnverifiedException("user is unverified")
        if not user.status.is_active:
            raise UserInactiveException("user is inactive")

        s = await self.repo.insert_session(
            session,
            user_id=user.id,
            ip_address=ip_address,
            user_agent=user_agent,
            expires_at=now + self.session_ttl if self.session_ttl else None,
            now=now,
        )
        await session.commit()

        token = self.codec.issue(
            session_id=s.id, user_id=user.id, status=user.status, now=now
        )
        logger.info("Logged in user_id=%s session_id=%s", user.id, s.id)
        return token, user, s

    async def refresh(
        self,
        session: AsyncSession,
        *,
        session_id: int,
        now: dt.datetime | None = None,
    ) -> tuple[str, Session]:
        now = now or _utcnow()

        s = await self.repo.get_session_by_id(session, session_id=session_id)
        if s is None:
            raise AuthServiceNotFoundException("session not found")
        if s.deactivated_at is not None:
            raise SessionDeactivatedException("session is deactivated")

        user = await self.repo.get_user_by_id(session, user_id=s.user_id)
        if user is None:
            raise AuthServiceNotFoundException("user not found")
        if not user.status.is_active:
            raise UserInactiveException("user is inactive")

        await self.repo.mark_session_refreshed(session, session_id=s.id, now=now)
        await session.commit()

        token = self.codec.issue(
            session_id=s.id, user_id=user.id, status=user.status, now=now
        )
        logger.info("Refreshed token for session_id=%s", s.id)
        return token, s

    async def logout(
        self,
        session: AsyncSession,
        *,
        session_id: int,
        now: dt.datetime | None = None,
    ) -> None:
        s = await self.repo.get_session_by_id(session, session_id=session_id)
        if s is None:
            raise AuthServiceNotFoundException("session not found")
        updated = await self.repo.deactivate_session(
            session, session_id=session_id, now=now or _utcnow()
        )
        await session.commit()
        if updated:
            logger.info("Deactivated session_id=%s", session_id)

    async def validate_session(
        self,
        session: AsyncSession,
        *,
        claims: TokenClaims,
        require_active_user: bool,
        now: dt.datetime | None = None,
    ) -> FullSession:
        now = now or _utcnow()
        full = await self.repo.get_full_session_by_id(session, session_id=claims.session_id)
        reason = session_validation_error(
            full, claims, require_active_user=require_active_user, now=now
        )
        if reason is not None:
            raise AuthServiceUnauthorizedException("session rejected", reason)
        assert full is not None
        return full

    async def get_user(self, session: AsyncSession, *, user_id: int) -> User:
        user = await self.repo.get_user_by_id(session, user_id=user_id)
        if user is None:
            raise AuthServiceNotFoundException("user not found")
        return user

    async def update_user(
        self,
        session: AsyncSession,
        *,
        user_id: int,
        first_name: str,
        last_name: str,
        email: str,
    ) -> User:
        errors = validate_profile(first_name, last_name, email)
        if errors:
            raise AuthServiceUnprocessableException("could not update user", ", ".join(errors))

        user = await self.get_user(session, user_id=user_id)
        other = await self.repo.get_user_by_email(session, email=email)
        if other is not None and other.id != user.id:
            raise AuthServiceConflictException(
                "email_taken", "that email is already registered"
            )

        try:
            user = await self.repo.update_user(
                session,
                user=user,
                first_name=first_name,
                last_name=last_name,
                email=email,
                now=_utcnow(),
            )
            await session.commit()
        except IntegrityError as exc:
            await session.rollback()
            raise AuthServiceConflictException(
                "email_taken", "that email is already registered"
            ) from exc
        return user

    async def list_users(
        self, session: AsyncSession, *, limit: int, offset: int
    ) -> tuple[Sequence[User], int]:
        users = await self.repo.list_users(session, limit=limit, offset=offset)
        return users, await self.repo.count_users(session)

    async def delete_user(self, session: AsyncSession, *, user_id: int) -> None:
        deleted = await self.repo.delete_user(session, user_id=user_id)
        if not deleted:
            raise AuthServiceNotFoundException("user not found")
        await session.commit()
        logger.info("Deleted user_id=%s", user_id)
