"""
Signed session tokens.

A token is a stateless HS256 JWT that references exactly one `sessions` row:

    exp         absolute expiry (epoch seconds)
    refresh     refresh-by time (epoch seconds), earlier than exp
    session_id  sessions.id
    status      owner's status when the token was issued
    user_id     users.id

The signature is always verified before any claim is read. Claim decoding is
total: a claim that is missing or has the wrong type rejects the token.
"""

from __future__ import annotations

import datetime as dt
import math
from dataclasses import dataclass
from typing import Any

import jwt  # type: ignore[import-not-found]

from quizbox.auth.exceptions import (
    InvalidSignatureException,
    MalformedTokenException,
    TokenExpiredException,
)
from quizbox.auth.models import UserStatus

DEFAULT_TTL = dt.timedelta(days=365)
DEFAULT_REFRESH_AFTER = dt.timedelta(hours=1)


def _utcnow() -> dt.datetime:
    return dt.datetime.now(dt.UTC)


@dataclass(frozen=True)
class TokenClaims:
    session_id: int
    user_id: int
    status: UserStatus
    exp: dt.datetime
    refresh: dt.datetime

    def is_expired(self, now: dt.datetime) -> bool:
        return now >= self.exp

    def requires_refresh(self, now: dt.datetime) -> bool:
        return self.refresh <= now < self.exp


def _number_claim(payload: dict[str, Any], key: str) -> int:
    if key not in payload:
        raise MalformedTokenException("malformed token", f"missing claim {key!r}")
    value = payload[key]
    # bool is an int subclass; a JSON true/false is never a valid number here.
    if isinstance(value, bool):
        raise MalformedTokenException("malformed token", f"claim {key!r} is not a number")
    if isinstance(value, int):
        return value
    if isinstance(value, float) and math.isfinite(value):
        return int(value)
    raise MalformedTokenException("malformed token", f"claim {key!r} is not a number")


def _id_claim(payload: dict[str, Any], key: str) -> int:
    raw = payload.get(key)
    value = _number_claim(payload, key)
    if isinstance(raw, float) and not raw.is_integer():
        raise MalformedTokenException("malformed token", f"claim {key!r} is not an integer")
    if value <= 0:
        raise MalformedTokenException("malformed token", f"claim {key!r} must be positive")
    return value


def _time_claim(payload: dict[str, Any], key: str) -> dt.datetime:
    seconds = _number_claim(payload, key)
    try:
        return dt.datetime.fromtimestamp(seconds, tz=dt.UTC)
    except (OverflowError, OSError, ValueError) as exc:
        raise MalformedTokenException(
            "malformed token", f"claim {key!r} is out of range"
        ) from exc


def _status_claim(payload: dict[str, Any]) -> UserStatus:
    value = payload.get("status")
    if not isinstance(value, str):
        raise MalformedTokenException("malformed token", "claim 'status' is not a string")
    try:
        return UserStatus(value)
    except ValueError as exc:
        raise MalformedTokenException(
            "malformed token", f"unknown status {value!r}"
        ) from exc


def claims_from_payload(payload: dict[str, Any]) -> TokenClaims:
    claims = TokenClaims(
        session_id=_id_claim(payload, "session_id"),
        user_id=_id_claim(payload, "user_id"),
        status=_status_claim(payload),
        exp=_time_claim(payload, "exp"),
        refresh=_time_claim(payload, "refresh"),
    )
    if claims.refresh > claims.exp:
        raise MalformedTokenException("malformed token", "refresh is later than exp")
    return claims


class TokenCodec:
    def __init__(
        self,
        signing_key: str,
        *,
        algorithm: str = "HS256",
        ttl: dt.timedelta = DEFAULT_TTL,
        refresh_after: dt.timedelta = DEFAULT_REFRESH_AFTER,
    ) -> None:
        if not signing_key:
            raise ValueError("token signing key must not be empty")
        if refresh_after >= ttl:
            raise ValueError("refresh_after must be shorter than ttl")
        self._signing_key = signing_key
        self.algorithm = algorithm
        self.ttl = ttl
        self.refresh_after = refresh_after

    def issue(
        self,
        *,
        session_id: int,
        user_id: int,
        status: UserStatus | str,
        now: dt.datetime | None = None,
    ) -> str:
        now = now or _utcnow()
        payload = {
            "exp": int((now + self.ttl).timestamp()),
            "refresh": int((now + self.refresh_after).timestamp()),
            "session_id": session_id,
            "status": UserStatus(status).value,
            "user_id": user_id,
        }
        return jwt.encode(payload, self._signing_key, algorithm=self.algorithm)

    def parse(self, token: str, *, now: dt.datetime | None = None) -> TokenClaims:
        try:
            payload = jwt.decode(
                token,
                self._signing_key,
                algorithms=[self.algorithm],
                # exp is checked below against the caller's clock.
                options={"verify_exp": False},
            )
        except jwt.InvalidSignatureError as exc:
            raise InvalidSignatureException("invalid token signature") from exc
        except (jwt.DecodeError, jwt.InvalidAlgorithmError) as exc:
            raise InvalidSignatureException("invalid token", str(exc)) from exc
        except jwt.InvalidTokenError as exc:
            raise MalformedTokenException("malformed token", str(exc)) from exc

        claims = claims_from_payload(payload)
        if claims.is_expired(now or _utcnow()):
            raise TokenExpiredException("token expired")
        return claims
