import datetime as dt

import pytest  # type: ignore[import-not-found]

from quizbox.auth.depends import MUST_LOG_IN
from quizbox.auth.models import UserStatus
from quizbox.core.db import database_manager

pytestmark = pytest.mark.anyio

HEADER = "X-Auth-Token"
PASSWORD = "correct-horse-9"

REGISTRATION = {
    "first_name": "Grace",
    "last_name": "Hopper",
    "email": "grace@navy.mil",
    "password": "cobol-4-ever",
    "password_confirmation": "cobol-4-ever",
}


async def test_register_login_me_logout_flow(client) -> None:
    r = await client.post("/api/v1/users", json=REGISTRATION)
    assert r.status_code == 201
    body = r.json()
    assert body["success"] is True
    assert body["data"]["email"] == "grace@navy.mil"
    assert body["data"]["status"] == "active"
    assert "password_hash" not in body["data"]

    r = await client.post(
        "/api/v1/users/login",
        json={"email": "GRACE@navy.mil", "password": "cobol-4-ever"},
        headers={"User-Agent": "flow-test"},
    )
    assert r.status_code == 200
    token = r.headers[HEADER]
    assert r.json()["data"]["token"] == token
    assert r.json()["data"]["user"]["first_name"] == "Grace"

    r = await client.get("/api/v1/users/me", headers={HEADER: token})
    assert r.status_code == 200
    assert r.json()["data"]["email"] == "grace@navy.mil"

    r = await client.delete("/api/v1/users/logout", headers={HEADER: token})
    assert r.status_code == 200
    assert r.json()["success"] is True

    r = await client.get("/api/v1/users/me", headers={HEADER: token})
    assert r.status_code == 401
    assert r.json()["message"] == MUST_LOG_IN


async def test_register_duplicate_email_conflicts(client) -> None:
    assert (await client.post("/api/v1/users", json=REGISTRATION)).status_code == 201
    r = await client.post(
        "/api/v1/users", json={**REGISTRATION, "email": "Grace@Navy.mil"}
    )
    assert r.status_code == 409
    assert r.json()["success"] is False


async def test_register_password_mismatch_is_unprocessable(client) -> None:
    r = await client.post(
        "/api/v1/users", json={**REGISTRATION, "password_confirmation": "something-else"}
    )
    assert r.status_code == 422
    assert r.json()["success"] is False


async def test_register_missing_field_uses_envelope(client) -> None:
    r = await client.post("/api/v1/users", json={"email": "x@example.com"})
    assert r.status_code == 422
    body = r.json()
    assert body["success"] is False
    assert body["message"] == "invalid request provided"


async def test_login_failures_share_one_message(client, create_user) -> None:
    await create_user()
    wrong = await client.post(
        "/api/v1/users/login", json={"email": "ada@example.com", "password": "wrong-pass"}
    )
    unknown = await client.post(
        "/api/v1/users/login", json={"email": "who@example.com", "password": PASSWORD}
    )
    assert wrong.status_code == unknown.status_code == 401
    assert wrong.json() == unknown.json()
    assert HEADER not in wrong.headers


async def test_login_records_client_details(client, create_user, auth_service) -> None:
    await create_user()
    r = await client.post(
        "/api/v1/users/login",
        json={"email": "ada@example.com", "password": PASSWORD},
        headers={"User-Agent": "quizbox-cli/1.0", "X-Forwarded-For": "203.0.113.9, 10.0.0.1"},
    )
    assert r.status_code == 200

    claims = auth_service.codec.parse(r.headers[HEADER])
    async with database_manager.session() as session:
        s = await auth_service.repo.get_session_by_id(session, session_id=claims.session_id)
    assert s.user_agent == "quizbox-cli/1.0"
    assert s.ip_address == "203.0.113.9"


async def test_logout_requires_a_token(client) -> None:
    r = await client.delete("/api/v1/users/logout")
    assert r.status_code == 401
    assert r.json()["message"] == "token not provided"


async def test_logout_never_hands_out_a_new_token(
    client, auth_service, create_user, create_session
) -> None:
    user = await create_user()
    s = await create_session(user.id)
    stale = auth_service.codec.issue(
        session_id=s.id,
        user_id=user.id,
        status=UserStatus.ACTIVE,
        now=dt.datetime.now(dt.UTC) - dt.timedelta(hours=2),
    )
    assert auth_service.codec.parse(stale).requires_refresh(dt.datetime.now(dt.UTC))

    r = await client.delete("/api/v1/users/logout", headers={HEADER: stale})

    assert r.status_code == 200
    assert HEADER not in r.headers
    r = await client.get("/api/v1/users/me", headers={HEADER: stale})
    assert r.status_code == 401
