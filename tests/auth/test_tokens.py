import base64
import datetime as dt

import jwt  # type: ignore[import-not-found]
import pytest  # type: ignore[import-not-found]

from quizbox.auth.exceptions import (
    InvalidSignatureException,
    MalformedTokenException,
    TokenExpiredException,
)
from quizbox.auth.models import UserStatus
from quizbox.auth.tokens import TokenCodec

KEY = "unit-test-signing-key-0123456789abcdefghij"
NOW = dt.datetime(2026, 3, 1, 12, 0, tzinfo=dt.UTC)


@pytest.fixture()
def codec() -> TokenCodec:
    return TokenCodec(KEY)


def _payload(**overrides):
    payload = {
        "exp": int((NOW + dt.timedelta(days=365)).timestamp()),
        "refresh": int((NOW + dt.timedelta(hours=1)).timestamp()),
        "session_id": 7,
        "status": "active",
        "user_id": 3,
    }
    payload.update(overrides)
    return {k: v for k, v in payload.items() if v is not ...}


def _flip_signature_bit(token: str, byte_index: int) -> str:
    header, payload, signature = token.split(".")
    raw = bytearray(base64.urlsafe_b64decode(signature + "=" * (-len(signature) % 4)))
    raw[byte_index] ^= 0x01
    tampered = base64.urlsafe_b64encode(bytes(raw)).decode("ascii").rstrip("=")
    return f"{header}.{payload}.{tampered}"


def test_issue_then_parse_recovers_claims(codec: TokenCodec) -> None:
    token = codec.issue(session_id=42, user_id=9, status=UserStatus.ACTIVE, now=NOW)
    claims = codec.parse(token, now=NOW)
    assert claims.session_id == 42
    assert claims.user_id == 9
    assert claims.status is UserStatus.ACTIVE
    assert claims.exp == NOW + dt.timedelta(days=365)
    assert claims.refresh == NOW + dt.timedelta(hours=1)
    assert claims.refresh < claims.exp


def test_issue_uses_the_documented_wire_claims(codec: TokenCodec) -> None:
    token = codec.issue(session_id=1, user_id=2, status="unverified", now=NOW)
    payload = jwt.decode(token, KEY, algorithms=["HS256"], options={"verify_exp": False})
    assert set(payload) == {"exp", "refresh", "session_id", "status", "user_id"}
    assert payload["status"] == "unverified"


@pytest.mark.parametrize("byte_index", [0, 15, -1])
def test_flipped_signature_bit_is_rejected(codec: TokenCodec, byte_index: int) -> None:
    token = codec.issue(session_id=1, user_id=2, status=UserStatus.ACTIVE, now=NOW)
    with pytest.raises(InvalidSignatureException):
        codec.parse(_flip_signature_bit(token, byte_index), now=NOW)


def test_token_signed_with_another_key_is_rejected(codec: TokenCodec) -> None:
    other = TokenCodec("a-completely-different-key-0123456789abcdef")
    token = other.issue(session_id=1, user_id=2, status=UserStatus.ACTIVE, now=NOW)
    with pytest.raises(InvalidSignatureException):
        codec.parse(token, now=NOW)


@pytest.mark.parametrize("token", ["", "garbage", "a.b.c", "x" * 40])
def test_corrupt_tokens_are_rejected(codec: TokenCodec, token: str) -> None:
    with pytest.raises(InvalidSignatureException):
        codec.parse(token, now=NOW)


def test_unsigned_token_is_rejected(codec: TokenCodec) -> None:
    token = jwt.encode(_payload(), None, algorithm="none")
    with pytest.raises(InvalidSignatureException):
        codec.parse(token, now=NOW)


def test_expired_token_is_rejected(codec: TokenCodec) -> None:
    token = codec.issue(session_id=1, user_id=2, status=UserStatus.ACTIVE, now=NOW)
    with pytest.raises(TokenExpiredException):
        codec.parse(token, now=NOW + dt.timedelta(days=366))


def test_float_numeric_claims_are_accepted(codec: TokenCodec) -> None:
    payload = _payload(
        session_id=7.0,
        user_id=3.0,
        exp=float(int((NOW + dt.timedelta(days=1)).timestamp())) + 0.5,
    )
    claims = codec.parse(jwt.encode(payload, KEY, algorithm="HS256"), now=NOW)
    assert claims.session_id == 7
    assert claims.user_id == 3


@pytest.mark.parametrize(
    "overrides",
    [
        {"session_id": "7"},
        {"user_id": True},
        {"user_id": None},
        {"session_id": 0},
        {"user_id": -4},
        {"session_id": 7.5},
        {"status": "superuser"},
        {"status": 1},
        {"refresh": "soon"},
        {"session_id": ...},
        {"status": ...},
        {"refresh": ...},
    ],
)
def test_mistyped_or_missing_claims_fail_closed(codec: TokenCodec, overrides) -> None:
    token = jwt.encode(_payload(**overrides), KEY, algorithm="HS256")
    with pytest.raises(MalformedTokenException):
        codec.parse(token, now=NOW)


def test_refresh_later_than_exp_is_malformed(codec: TokenCodec) -> None:
    payload = _payload(
        exp=int((NOW + dt.timedelta(hours=1)).timestamp()),
        refresh=int((NOW + dt.timedelta(hours=2)).timestamp()),
    )
    with pytest.raises(MalformedTokenException):
        codec.parse(jwt.encode(payload, KEY, algorithm="HS256"), now=NOW)


def test_requires_refresh_only_between_refresh_and_exp(codec: TokenCodec) -> None:
    token = codec.issue(session_id=1, user_id=2, status=UserStatus.ACTIVE, now=NOW)
    claims = codec.parse(token, now=NOW)
    assert not claims.requires_refresh(NOW)
    assert claims.requires_refresh(NOW + dt.timedelta(hours=2))
    assert not claims.requires_refresh(NOW + dt.timedelta(days=400))


def test_empty_signing_key_fails_fast() -> None:
    with pytest.raises(ValueError):
        TokenCodec("")


def test_refresh_window_must_be_shorter_than_ttl() -> None:
    with pytest.raises(ValueError):
        TokenCodec(KEY, ttl=dt.timedelta(hours=1), refresh_after=dt.timedelta(hours=1))
