import datetime as dt

import pytest  # type: ignore[import-not-found]

from quizbox.auth.depends import MUST_LOG_IN
from quizbox.auth.models import UserStatus
from quizbox.commons.depends import database_session

pytestmark = pytest.mark.anyio

HEADER = "X-Auth-Token"
QUESTION = {"title": "Why?", "body": "Because.", "tags": "meta"}


def _now() -> dt.datetime:
    return dt.datetime.now(dt.UTC)


async def test_missing_token_is_reported_distinctly(client) -> None:
    r = await client.post("/api/v1/questions", json=QUESTION)
    assert r.status_code == 401
    assert r.json() == {"success": False, "message": "token not provided"}


async def test_invalid_token_is_rejected_before_any_database_access(app, client) -> None:
    opened: list[bool] = []

    async def _tracking_session():
        opened.append(True)
        yield None

    app.dependency_overrides[database_session] = _tracking_session

    r = await client.post(
        "/api/v1/questions", json=QUESTION, headers={HEADER: "not.a.token"}
    )

    assert r.status_code == 401
    assert r.json()["message"] == MUST_LOG_IN
    assert opened == []


async def test_deactivated_session_never_authorizes(
    client, auth_service, create_user, create_session
) -> None:
    user = await create_user()
    await create_session(user.id, session_id=42, deactivated_at=_now() - dt.timedelta(minutes=5))
    token = auth_service.codec.issue(
        session_id=42, user_id=user.id, status=UserStatus.ACTIVE
    )
    assert auth_service.codec.parse(token).exp > _now()

    for method, path in (("GET", "/api/v1/users/me"), ("POST", "/api/v1/questions")):
        r = await client.request(method, path, json=QUESTION, headers={HEADER: token})
        assert r.status_code == 401
        assert r.json() == {"success": False, "message": MUST_LOG_IN}


async def test_token_for_someone_elses_session_is_rejected(
    client, auth_service, create_user, create_session
) -> None:
    owner = await create_user("owner@example.com")
    intruder = await create_user("intruder@example.com")
    s = await create_session(owner.id)
    token = auth_service.codec.issue(
        session_id=s.id, user_id=intruder.id, status=UserStatus.ACTIVE
    )

    r = await client.get("/api/v1/users/me", headers={HEADER: token})
    assert r.status_code == 401


async def test_unknown_session_is_rejected(client, auth_service, create_user) -> None:
    user = await create_user()
    token = auth_service.codec.issue(session_id=777, user_id=user.id, status=UserStatus.ACTIVE)
    r = await client.get("/api/v1/users/me", headers={HEADER: token})
    assert r.status_code == 401


async def test_inactive_user_is_rejected_only_where_active_is_required(
    client, auth_service, create_user, create_session
) -> None:
    user = await create_user(status=UserStatus.INACTIVE)
    s = await create_session(user.id)
    token = auth_service.codec.issue(session_id=s.id, user_id=user.id, status=UserStatus.ACTIVE)

    r = await client.post("/api/v1/questions", json=QUESTION, headers={HEADER: token})
    assert r.status_code == 401
    assert r.json()["message"] == MUST_LOG_IN

    r = await client.get("/api/v1/users/me", headers={HEADER: token})
    assert r.status_code == 200
    assert r.json()["data"]["status"] == "inactive"


async def test_expired_session_is_rejected(
    client, auth_service, create_user, create_session
) -> None:
    user = await create_user()
    s = await create_session(user.id, expires_at=_now() - dt.timedelta(seconds=1))
    token = auth_service.codec.issue(session_id=s.id, user_id=user.id, status=UserStatus.ACTIVE)
    r = await client.get("/api/v1/users/me", headers={HEADER: token})
    assert r.status_code == 401


async def test_fresh_token_is_not_renewed(
    client, auth_service, create_user, create_session
) -> None:
    user = await create_user()
    s = await create_session(user.id)
    token = auth_service.codec.issue(session_id=s.id, user_id=user.id, status=UserStatus.ACTIVE)

    r = await client.post("/api/v1/questions", json=QUESTION, headers={HEADER: token})
    assert r.status_code == 201
    assert HEADER not in r.headers


async def test_token_past_refresh_by_is_renewed_transparently(
    client, auth_service, create_user, create_session
) -> None:
    user = await create_user()
    s = await create_session(user.id)
    old_token = auth_service.codec.issue(
        session_id=s.id,
        user_id=user.id,
        status=UserStatus.ACTIVE,
        now=_now() - dt.timedelta(hours=2),
    )
    old = auth_service.codec.parse(old_token)
    assert old.requires_refresh(_now())

    r = await client.post("/api/v1/questions", json=QUESTION, headers={HEADER: old_token})

    assert r.status_code == 201
    assert r.json()["data"]["user_id"] == user.id
    new = auth_service.codec.parse(r.headers[HEADER])
    assert new.session_id == s.id
    assert new.refresh > old.refresh
    assert new.exp > old.exp


async def test_failed_refresh_rejects_the_request(
    app, client, auth_service, create_user, create_session
) -> None:
    from quizbox.auth.depends import get_auth_service
    from quizbox.auth.exceptions import SessionDeactivatedException

    user = await create_user()
    s = await create_session(user.id)
    old_token = auth_service.codec.issue(
        session_id=s.id,
        user_id=user.id,
        status=UserStatus.ACTIVE,
        now=_now() - dt.timedelta(hours=2),
    )

    class FailingRefresh:
        codec = auth_service.codec

        async def validate_session(self, session, **kwargs):  # type: ignore[no-untyped-def]
            return await auth_service.validate_session(session, **kwargs)

        async def refresh(self, session, *, session_id, now=None):  # type: ignore[no-untyped-def]
            raise SessionDeactivatedException("session is deactivated")

    app.dependency_overrides[get_auth_service] = lambda: FailingRefresh()

    r = await client.post("/api/v1/questions", json=QUESTION, headers={HEADER: old_token})
    assert r.status_code == 401
    assert r.json()["message"] == MUST_LOG_IN
