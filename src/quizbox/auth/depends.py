"""
Access control for protected routes.

`allow_only_active_user`, `allow_only_active_user_no_refresh` and
`allow_with_session` are FastAPI dependencies. All three read the signed
token from the `X-Auth-Token` header, reject bad tokens before touching the
database, then validate the referenced session with one store lookup. The
rejection reason is logged; callers only ever see the generic "you have to
log in" message.
"""

from __future__ import annotations

import datetime as dt
from dataclasses import dataclass
from functools import lru_cache
from typing import Annotated

from fastapi import Depends, Request, Response  # type: ignore[import-not-found]
from sqlalchemy.ext.asyncio import AsyncSession  # type: ignore[import-not-found]

from quizbox.auth.exceptions import (
    AuthServiceUnauthorizedException,
    InvalidTokenException,
    TokenNotProvidedException,
)
from quizbox.auth.repository import FullSession
from quizbox.auth.service import AuthService
from quizbox.auth.tokens import TokenClaims
from quizbox.commons.depends import database_session
from quizbox.commons.exceptions import BaseServiceException
from quizbox.commons.logging import logger
from quizbox.core.settings import settings

MUST_LOG_IN = "failed to validate session, you have to log in"


@dataclass(frozen=True)
class AuthContext:
    claims: TokenClaims
    session: FullSession

    @property
    def user_id(self) -> int:
        return self.session.user_id

    @property
    def session_id(self) -> int:
        return self.session.id


@lru_cache
def get_auth_service() -> AuthService:
    return AuthService.create()


def _utcnow() -> dt.datetime:
    return dt.datetime.now(dt.UTC)


async def token_claims_optional(
    request: Request,
    svc: Annotated[AuthService, Depends(get_auth_service)],
) -> TokenClaims | None:
    """Decoded claims, or None when no token was sent at all."""
    token = request.headers.get(settings.AUTH_TOKEN_HEADER)
    if not token:
        return None
    try:
        return svc.codec.parse(token)
    except InvalidTokenException as exc:
        logger.warning("Rejected token on %s: %s %s", request.url.path, exc.message, exc.details or "")
        raise AuthServiceUnauthorizedException(MUST_LOG_IN) from exc


async def token_claims_required(
    claims: Annotated[TokenClaims | None, Depends(token_claims_optional)],
) -> TokenClaims:
    if claims is None:
        raise TokenNotProvidedException("token not provided")
    return claims


async def _validated_context(
    session: AsyncSession,
    svc: AuthService,
    claims: TokenClaims,
    *,
    require_active_user: bool,
    now: dt.datetime,
) -> AuthContext:
    try:
        full = await svc.validate_session(
            session, claims=claims, require_active_user=require_active_user, now=now
        )
    except AuthServiceUnauthorizedException as exc:
        logger.warning("Could not validate session: %s", exc.details or exc.message)
        raise AuthServiceUnauthorizedException(MUST_LOG_IN) from exc
    return AuthContext(claims=claims, session=full)


async def allow_with_session(
    claims: Annotated[TokenClaims, Depends(token_claims_required)],
    session: Annotated[AsyncSession, Depends(database_session)],
    svc: Annotated[AuthService, Depends(get_auth_service)],
) -> AuthContext:
    """Any logged-in user, whatever their status."""
    return await _validated_context(
        session, svc, claims, require_active_user=False, now=_utcnow()
    )


async def allow_only_active_user(
    # Declared first: a bad token is rejected before a db session is opened.
    claims: Annotated[TokenClaims, Depends(token_claims_required)],
    response: Response,
    session: Annotated[AsyncSession, Depends(database_session)],
    svc: Annotated[AuthService, Depends(get_auth_service)],
) -> AuthContext:
    """Active users only; renews the token once its refresh-by time has passed."""
    now = _utcnow()
    ctx = await _validated_context(
        session, svc, claims, require_active_user=True, now=now
    )

    if claims.requires_refresh(now):
        try:
            token, _ = await svc.refresh(session, session_id=claims.session_id, now=now)
        except BaseServiceException as exc:
            logger.warning(
                "Could not refresh token for session_id=%s: %s",
                claims.session_id,
                exc.details or exc.message,
            )
            raise AuthServiceUnauthorizedException(MUST_LOG_IN) from exc
        response.headers[settings.AUTH_TOKEN_HEADER] = token

    return ctx


async def allow_only_active_user_no_refresh(
    claims: Annotated[TokenClaims, Depends(token_claims_required)],
    session: Annotated[AsyncSession, Depends(database_session)],
    svc: Annotated[AuthService, Depends(get_auth_service)],
) -> AuthContext:
    """Active users only, without renewal. For routes that end the session or the account."""
    return await _validated_context(
        session, svc, claims, require_active_user=True, now=_utcnow()
    )
