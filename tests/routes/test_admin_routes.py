"""Tests for operator login and the /admin API."""

import bcrypt
import pytest
from httpx import ASGITransport, AsyncClient

from conftest import ZONE_ID
from route53_ddns.main import create_app
from route53_ddns.services.auth_service import AuthService
from route53_ddns.services.rate_limiter import AbuseLimiter
from route53_ddns.services.record_service import RecordService
from route53_ddns.services.update_service import UpdateService

PASSWORD = "operator-password"
HOST = "home.example.com"


@pytest.fixture(autouse=True)
def fast_bcrypt(monkeypatch):
    real_gensalt = bcrypt.gensalt
    monkeypatch.setattr(bcrypt, "gensalt", lambda: real_gensalt(rounds=4))


@pytest.fixture
def app(record_repo, event_repo, counter_repo, session_repo, dns_backend, clock):
    """Application with every service over in-memory collaborators."""
    application = create_app()
    limiter = AbuseLimiter(counter_repo, clock=clock)
    application.state.update_service = UpdateService(
        record_repo, event_repo, limiter, dns_backend, clock=clock
    )
    application.state.record_service = RecordService(
        record_repo, event_repo, dns_backend, clock=clock
    )
    application.state.auth_service = AuthService(
        session_repo, limiter, username="admin", password=PASSWORD, clock=clock
    )
    return application


@pytest.fixture
async def client(app):
    async with AsyncClient(
        transport=ASGITransport(app=app), base_url="https://testserver"
    ) as client:
        yield client


@pytest.fixture
async def operator(client):
    """Client with a logged-in operator session cookie."""
    response = await client.post(
        "/auth/login", json={"username": "admin", "password": PASSWORD}
    )
    assert response.status_code == 200
    return client


async def create_record(client, hostname=HOST, **extra):
    body = {"hostname": hostname, "zone_id": ZONE_ID}
    body.update(extra)
    return await client.post("/admin/records", json=body)


@pytest.mark.asyncio
async def test_admin_requires_session(client):
    """Without a session cookie the admin API is closed."""
    response = await client.get("/admin/records")

    assert response.status_code == 401
    assert response.json()["error_code"] == "UNAUTHORIZED"


@pytest.mark.asyncio
async def test_login_sets_hardened_cookie(client):
    """The session cookie is HttpOnly, Secure and SameSite=Strict."""
    response = await client.post(
        "/auth/login", json={"username": "admin", "password": PASSWORD}
    )

    assert response.status_code == 200
    assert response.json()["username"] == "admin"
    cookie = response.headers["set-cookie"].lower()
    assert "httponly" in cookie
    assert "secure" in cookie
    assert "samesite=strict" in cookie


@pytest.mark.asyncio
async def test_login_wrong_password(client):
    response = await client.post(
        "/auth/login", json={"username": "admin", "password": "wrong"}
    )

    assert response.status_code == 401


@pytest.mark.asyncio
async def test_login_lockout(client):
    """Five failed logins from one address are followed by 429."""
    for _ in range(5):
        await client.post("/auth/login", json={"username": "admin", "password": "wrong"})

    response = await client.post(
        "/auth/login", json={"username": "admin", "password": PASSWORD}
    )

    assert response.status_code == 429
    assert response.headers["Retry-After"] == "900"


@pytest.mark.asyncio
async def test_login_lockout_survives_rotating_forwarded_for(client):
    """A new X-Forwarded-For per guess does not reset the lockout."""
    for octet in range(5):
        await client.post(
            "/auth/login",
            json={"username": "admin", "password": "wrong"},
            headers={"X-Forwarded-For": f"198.51.100.{octet}"},
        )

    response = await client.post(
        "/auth/login",
        json={"username": "admin", "password": PASSWORD},
        headers={"X-Forwarded-For": "203.0.113.99"},
    )

    assert response.status_code == 429


@pytest.mark.asyncio
async def test_logout_ends_session(operator):
    response = await operator.post("/auth/logout")
    assert response.status_code == 204

    assert (await operator.get("/admin/records")).status_code == 401


@pytest.mark.asyncio
async def test_create_record_returns_credential_once(operator):
    """Creation returns the plaintext credential and never the hash."""
    response = await create_record(operator, ttl=120)

    assert response.status_code == 201
    data = response.json()
    assert data["credential"]
    assert data["record"]["hostname"] == HOST
    assert data["record"]["ttl"] == 120
    assert "credential_hash" not in data["record"]

    fetched = await operator.get(f"/admin/records/{HOST}")
    assert "credential" not in fetched.json()
    assert "credential_hash" not in fetched.json()


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "hostname,extra,status_code",
    [
        (HOST, {"ttl": 5}, 400),
        ("home.example.org", {}, 400),
        (HOST, {"zone_id": "ZNOPE"}, 404),
    ],
)
async def test_create_record_rejections(operator, hostname, extra, status_code):
    response = await create_record(operator, hostname, **extra)

    assert response.status_code == status_code


@pytest.mark.asyncio
async def test_create_duplicate_conflicts(operator):
    await create_record(operator)

    response = await create_record(operator)

    assert response.status_code == 409


@pytest.mark.asyncio
async def test_list_get_update_delete(operator, dns_backend):
    """Record lifecycle through the admin API."""
    await create_record(operator)
    await create_record(operator, "office.example.com")

    listed = await operator.get("/admin/records")
    assert [r["hostname"] for r in listed.json()["records"]] == [
        HOST,
        "office.example.com",
    ]

    patched = await operator.patch(
        f"/admin/records/{HOST}", json={"ttl": 300, "enabled": False}
    )
    assert patched.status_code == 200
    assert patched.json()["ttl"] == 300
    assert patched.json()["enabled"] is False

    deleted = await operator.delete(f"/admin/records/{HOST}")
    assert deleted.status_code == 204
    assert (await operator.get(f"/admin/records/{HOST}")).status_code == 404
    assert (await operator.delete(f"/admin/records/{HOST}")).status_code == 404


@pytest.mark.asyncio
async def test_created_credential_drives_updates(operator):
    """A freshly created credential works on the update endpoint; regenerating revokes it."""
    created = await create_record(operator)
    credential = created.json()["credential"]
    headers = {"X-Forwarded-For": "203.0.113.5"}
    params = {"hostname": HOST}

    first = await operator.get(
        "/nic/update", params=params, auth=("x", credential), headers=headers
    )
    assert first.text == "good 203.0.113.5"

    regenerated = await operator.post(f"/admin/records/{HOST}/regenerate-credential")
    assert regenerated.status_code == 200
    new_credential = regenerated.json()["credential"]

    stale = await operator.get(
        "/nic/update", params=params, auth=("x", credential), headers=headers
    )
    assert stale.text == "badauth"

    fresh = await operator.get(
        "/nic/update", params=params, auth=("x", new_credential), headers=headers
    )
    assert fresh.text == "nochg 203.0.113.5"

    history = await operator.get(f"/admin/records/{HOST}/history", params={"limit": 2})
    assert history.status_code == 200
    assert [e["status"] for e in history.json()["events"]] == ["nochg", "badauth"]


@pytest.mark.asyncio
async def test_history_limit_validation(operator):
    await create_record(operator)

    response = await operator.get(f"/admin/records/{HOST}/history", params={"limit": 0})

    assert response.status_code == 400


@pytest.mark.asyncio
async def test_zone_listing(operator):
    zones = await operator.get("/admin/zones")
    assert zones.json()["zones"][0]["zone_id"] == ZONE_ID

    records = await operator.get(f"/admin/zones/{ZONE_ID}/records")
    assert records.json()["records"][0]["type"] == "NS"

    missing = await operator.get("/admin/zones/ZNOPE/records")
    assert missing.status_code == 404
