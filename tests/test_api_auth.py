"""
tests.test_api_auth

HTTP contract of the auth endpoints and the authorizer-guarded user routes.
"""

from __future__ import annotations

import httpx
import pytest

from clinic_auth.auth.deps import get_resolver
from clinic_auth.auth.errors import StoreUnavailable
from clinic_auth.auth.models import Role
from clinic_auth.auth.resolver import PrincipalResolver
from clinic_auth.db.repositories.users import UserRepo


async def _login(client: httpx.AsyncClient, email: str, password: str) -> httpx.Response:
    return await client.post("/api/login", json={"email": email, "password": password})


def _client_with_token(app, settings, token: str) -> httpx.AsyncClient:
    return httpx.AsyncClient(
        transport=httpx.ASGITransport(app=app),
        base_url="http://testserver",
        cookies={settings.session_cookie_name: token},
    )


@pytest.mark.asyncio
async def test_admin_login(client, accounts, settings) -> None:
    await accounts.admin(email="boss@clinic.test", password="admin-pw")

    r = await _login(client, "boss@clinic.test", "admin-pw")

    assert r.status_code == 200
    body = r.json()
    assert body["kind"] == "admin"
    assert body["email"] == "boss@clinic.test"
    assert body["role"] is None
    assert "password" not in body and "password_hash" not in body
    assert r.cookies.get(settings.session_cookie_name)
    set_cookie = r.headers["set-cookie"].lower()
    assert "httponly" in set_cookie
    assert "samesite=lax" in set_cookie


@pytest.mark.asyncio
async def test_user_login_reports_role(client, accounts) -> None:
    await accounts.user(email="doc@clinic.test", password="pw", role=Role.doctor)

    r = await _login(client, "doc@clinic.test", "pw")

    assert r.status_code == 200
    assert r.json()["kind"] == "user"
    assert r.json()["role"] == "doctor"


@pytest.mark.asyncio
async def test_wrong_secret_is_401(client, accounts, settings) -> None:
    await accounts.admin(email="boss@clinic.test", password="admin-pw")

    r = await _login(client, "boss@clinic.test", "nope")

    assert r.status_code == 401
    assert r.json()["error"] == "invalid_credentials"
    assert settings.session_cookie_name not in r.cookies


@pytest.mark.asyncio
async def test_unknown_email_is_401(client) -> None:
    r = await _login(client, "ghost@clinic.test", "pw")

    assert r.status_code == 401
    assert r.json()["error"] == "invalid_credentials"


@pytest.mark.asyncio
async def test_inactive_account_is_403_without_session(client, accounts, settings) -> None:
    await accounts.user(email="old@clinic.test", password="pw", is_active=False)

    r = await _login(client, "old@clinic.test", "pw")

    assert r.status_code == 403
    assert r.json()["error"] == "account_inactive"
    assert settings.session_cookie_name not in r.cookies


@pytest.mark.asyncio
async def test_login_validates_body(client) -> None:
    r = await client.post("/api/login", json={"email": "x@clinic.test"})
    assert r.status_code == 422


@pytest.mark.asyncio
async def test_login_records_last_login(client, accounts, app, db) -> None:
    user = await accounts.user(email="doc@clinic.test", password="pw")

    assert (await _login(client, "doc@clinic.test", "pw")).status_code == 200
    await app.state.last_login_recorder.drain()

    assert (await UserRepo(db).get_by_id(user.id)).last_login is not None


@pytest.mark.asyncio
async def test_current_principal(client, accounts) -> None:
    user = await accounts.user(email="desk@clinic.test", password="pw", role=Role.receptionist)

    assert (await client.get("/api/user")).status_code == 401

    await _login(client, "desk@clinic.test", "pw")
    r = await client.get("/api/user")

    assert r.status_code == 200
    assert r.json()["id"] == user.id
    assert r.json()["role"] == "receptionist"


@pytest.mark.asyncio
async def test_logout_destroys_session(client, accounts, app, settings) -> None:
    await accounts.user(email="doc@clinic.test", password="pw")
    token = (await _login(client, "doc@clinic.test", "pw")).cookies[settings.session_cookie_name]

    r = await client.post("/api/logout")

    assert r.status_code == 200
    assert (await client.get("/api/user")).status_code == 401
    # Replaying the old cookie fails too: the session is gone server-side.
    async with _client_with_token(app, settings, token) as replay:
        assert (await replay.get("/api/user")).status_code == 401


@pytest.mark.asyncio
async def test_logout_without_session_is_200(client, app, settings) -> None:
    assert (await client.post("/api/logout")).status_code == 200
    async with _client_with_token(app, settings, "not-a-token!") as other:
        assert (await other.post("/api/logout")).status_code == 200


@pytest.mark.asyncio
async def test_malformed_cookie_is_rejected(app, settings) -> None:
    async with _client_with_token(app, settings, "not-a-token!") as other:
        r = await other.get("/api/users/1")

    assert r.status_code == 401
    assert r.json()["error"] == "malformed_session"


@pytest.mark.asyncio
async def test_deactivation_between_requests(client, accounts) -> None:
    user = await accounts.user(email="doc@clinic.test", password="pw", role=Role.doctor)
    await _login(client, "doc@clinic.test", "pw")
    assert (await client.get(f"/api/users/{user.id}")).status_code == 200

    await accounts.update_user(user.id, is_active=False)
    r = await client.get(f"/api/users/{user.id}")

    assert r.status_code == 403
    assert r.json()["error"] == "account_inactive"


@pytest.mark.asyncio
async def test_self_or_admin_route(client, accounts) -> None:
    await accounts.user(email="five@clinic.test", password="pw", id=5)
    await accounts.user(email="seven@clinic.test", password="pw", id=7, role=Role.doctor)

    await _login(client, "seven@clinic.test", "pw")

    assert (await client.get("/api/users/7")).status_code == 200
    r = await client.get("/api/users/5")
    assert r.status_code == 403
    assert r.json()["error"] == "insufficient_role"


@pytest.mark.asyncio
async def test_administrator_reads_any_user(client, accounts) -> None:
    await accounts.user(email="five@clinic.test", password="pw", id=5)
    await accounts.admin(email="boss@clinic.test", password="pw")

    await _login(client, "boss@clinic.test", "pw")

    r = await client.get("/api/users/5")
    assert r.status_code == 200
    assert r.json()["email"] == "five@clinic.test"
    assert (await client.get("/api/users/404")).status_code == 404


@pytest.mark.asyncio
async def test_listing_requires_admin_role(client, accounts) -> None:
    await accounts.user(email="doc@clinic.test", password="pw", role=Role.doctor)
    await accounts.user(email="lead@clinic.test", password="pw", role=Role.admin)

    await _login(client, "doc@clinic.test", "pw")
    r = await client.get("/api/users")
    assert r.status_code == 403
    assert r.json() == {
        "error": "insufficient_role",
        "detail": "Insufficient permissions",
        "required": "admin",
        "current": "doctor",
    }

    await client.post("/api/logout")
    await _login(client, "lead@clinic.test", "pw")
    r = await client.get("/api/users")
    assert r.status_code == 200
    assert {u["email"] for u in r.json()} == {"doc@clinic.test", "lead@clinic.test"}


@pytest.mark.asyncio
async def test_promotion_applies_to_existing_session(client, accounts) -> None:
    doctor = await accounts.user(email="doc@clinic.test", password="pw", role=Role.doctor)
    await _login(client, "doc@clinic.test", "pw")
    assert (await client.get("/api/users")).status_code == 403

    await accounts.update_user(doctor.id, role=Role.admin)

    assert (await client.get("/api/users")).status_code == 200


@pytest.mark.asyncio
async def test_administrator_lists_users(client, accounts) -> None:
    await accounts.admin(email="boss@clinic.test", password="pw")
    await accounts.user(email="doc@clinic.test", password="pw", role=Role.doctor)

    await _login(client, "boss@clinic.test", "pw")
    r = await client.get("/api/users")

    assert r.status_code == 200
    assert [u["email"] for u in r.json()] == ["doc@clinic.test"]


@pytest.mark.asyncio
async def test_store_outage_is_internal_error(client, app) -> None:
    class _DownStore:
        async def get_by_email(self, email):
            raise StoreUnavailable("admin store unavailable")

    app.dependency_overrides[get_resolver] = lambda: PrincipalResolver(
        admins=_DownStore(), users=_DownStore(), hasher=app.state.hasher
    )
    try:
        r = await _login(client, "boss@clinic.test", "pw")
    finally:
        app.dependency_overrides.clear()

    assert r.status_code == 500
    assert r.json() == {"error": "internal_error", "detail": "Internal server error"}
