import pytest  # type: ignore[import-not-found]

from quizbox.auth.exceptions import (
    AuthServiceUnprocessableException,
    MalformedHashException,
    PasswordMismatchException,
)
from quizbox.auth.passwords import (
    DEFAULT_ITERATIONS,
    hash_password,
    validate_password,
    verify_password,
)


def test_hash_then_verify_accepts_the_same_password() -> None:
    encoded = hash_password("s3cret-pass", iterations=1000)
    verify_password(encoded, "s3cret-pass")


def test_verify_rejects_a_different_password() -> None:
    encoded = hash_password("s3cret-pass", iterations=1000)
    with pytest.raises(PasswordMismatchException):
        verify_password(encoded, "s3cret-pasS")


def test_hash_uses_a_fresh_salt_each_time() -> None:
    a = hash_password("same-password", iterations=1000)
    b = hash_password("same-password", iterations=1000)
    assert a != b
    verify_password(a, "same-password")
    verify_password(b, "same-password")


def test_encoded_hash_is_self_describing() -> None:
    scheme, iterations, salt, key = hash_password("pw-12345678").split("$")
    assert scheme == "pbkdf2_sha256"
    assert int(iterations) == DEFAULT_ITERATIONS
    assert salt
    assert key


def test_verify_accepts_hash_with_other_iteration_count() -> None:
    encoded = hash_password("pw-12345678", iterations=1500)
    assert encoded.split("$")[1] == "1500"
    verify_password(encoded, "pw-12345678")


@pytest.mark.parametrize(
    "encoded",
    [
        "",
        "pbkdf2_sha256$1000$salt",
        "pbkdf2_sha256$1000$salt$key$extra",
        "bcrypt$1000$salt$c2VjcmV0",
        "pbkdf2_sha256$many$salt$c2VjcmV0",
        "pbkdf2_sha256$0$salt$c2VjcmV0",
        "pbkdf2_sha256$1000$salt$not*base64",
        "pbkdf2_sha256$1000$$c2VjcmV0",
    ],
)
def test_verify_rejects_malformed_hashes(encoded: str) -> None:
    with pytest.raises(MalformedHashException):
        verify_password(encoded, "whatever")


def test_hash_rejects_empty_password() -> None:
    with pytest.raises(ValueError):
        hash_password("")


def test_validate_password_accepts_a_reasonable_password() -> None:
    validate_password("longenough1", "longenough1")


@pytest.mark.parametrize(
    ("password", "confirmation", "fragment"),
    [
        ("short", "short", "invalid password length"),
        ("has spaces in it", "has spaces in it", "invalid password provided"),
        ("longenough1", "longenough2", "must be the same"),
    ],
)
def test_validate_password_reports_rule_violations(
    password: str, confirmation: str, fragment: str
) -> None:
    with pytest.raises(AuthServiceUnprocessableException) as exc_info:
        validate_password(password, confirmation)
    assert fragment in (exc_info.value.details or "")
