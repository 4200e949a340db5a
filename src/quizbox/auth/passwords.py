from __future__ import annotations

import base64
import binascii
import hashlib
import hmac
import re
import secrets

from quizbox.auth.exceptions import (
    AuthServiceUnprocessableException,
    MalformedHashException,
    PasswordMismatchException,
)

ALGORITHM = "pbkdf2_sha256"
DEFAULT_ITERATIONS = 24_000
KEY_LENGTH = 32
MIN_PASSWORD_LENGTH = 8

# Anything outside printable, non-space ASCII.
_INVALID_PASSWORD_RE = re.compile(r"[^\x21-\x7e]")


def generate_salt() -> str:
    # token_urlsafe never yields "$", so the encoded hash stays splittable.
    return secrets.token_urlsafe(12)


def _derive(password: str, salt: str, iterations: int, dklen: int) -> bytes:
    return hashlib.pbkdf2_hmac(
        "sha256", password.encode("utf-8"), salt.encode("utf-8"), iterations, dklen=dklen
    )


def hash_password(password: str, *, iterations: int = DEFAULT_ITERATIONS) -> str:
    """
    PBKDF2-SHA256 password hash:
      pbkdf2_sha256$<iterations>$<salt>$<hash_b64>
    """
    if not password:
        raise ValueError("password must be non-empty")
    salt = generate_salt()
    dk = _derive(password, salt, iterations, KEY_LENGTH)
    encoded = base64.b64encode(dk).decode("ascii")
    return f"{ALGORITHM}${iterations}${salt}${encoded}"


def verify_password(encoded: str, password: str) -> None:
    """
    Check `password` against an encoded hash produced by `hash_password`.

    Raises MalformedHashException when `encoded` cannot be parsed and
    PasswordMismatchException when the password does not match.
    """
    parts = encoded.split("$")
    if len(parts) != 4:
        raise MalformedHashException("invalid password hash", "expected 4 fields")

    scheme, iters_s, salt, hash_b64 = parts
    if scheme != ALGORITHM:
        raise MalformedHashException("invalid password hash", f"unknown algorithm {scheme!r}")

    try:
        iterations = int(iters_s)
    except ValueError as exc:
        raise MalformedHashException("invalid password hash", "bad iteration count") from exc
    if iterations <= 0:
        raise MalformedHashException("invalid password hash", "bad iteration count")

    try:
        expected = base64.b64decode(hash_b64, validate=True)
    except (binascii.Error, ValueError) as exc:
        raise MalformedHashException("invalid password hash", "bad derived key") from exc
    if not salt or not expected:
        raise MalformedHashException("invalid password hash", "empty salt or key")

    dk = _derive(password, salt, iterations, len(expected))
    if not hmac.compare_digest(dk, expected):
        raise PasswordMismatchException("invalid password")


def validate_password(password: str, confirmation: str | None = None) -> None:
    errors: list[str] = []
    if len(password.strip()) < MIN_PASSWORD_LENGTH:
        errors.append("invalid password length")
    if _INVALID_PASSWORD_RE.search(password):
        errors.append("invalid password provided")
    if confirmation is not None and password != confirmation:
        errors.append("password and password confirmation must be the same")
    if errors:
        raise AuthServiceUnprocessableException("invalid password", ", ".join(errors))
