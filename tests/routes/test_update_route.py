"""Tests for the DynDNS2 update endpoint and GET /ip."""

import pytest
from httpx import ASGITransport, AsyncClient

from conftest import CREDENTIAL
from route53_ddns.main import create_app
from route53_ddns.services.rate_limiter import AbuseLimiter
from route53_ddns.services.update_service import UpdateService

SOURCE = "203.0.113.5"
FORWARDED = {"X-Forwarded-For": f"{SOURCE}, 10.0.0.1"}


@pytest.fixture
def app(record_repo, event_repo, counter_repo, dns_backend, clock):
    """Application with the update pipeline over in-memory collaborators."""
    application = create_app()
    limiter = AbuseLimiter(counter_repo, limit=3, window_seconds=60, clock=clock)
    application.state.update_service = UpdateService(
        record_repo, event_repo, limiter, dns_backend, clock=clock
    )
    return application


@pytest.fixture
async def client(app):
    async with AsyncClient(
        transport=ASGITransport(app=app), base_url="https://testserver"
    ) as client:
        yield client


@pytest.fixture
async def stored(record_repo, make_record):
    record = make_record()
    await record_repo.create(record)
    return record


async def send_update(client, params=None, auth=("router", CREDENTIAL), headers=None):
    query = {"hostname": "home.example.com"}
    query.update(params or {})
    return await client.get(
        "/nic/update",
        params=query,
        auth=auth,
        headers=FORWARDED if headers is None else headers,
    )


@pytest.mark.asyncio
async def test_update_binds_source_address(client, stored, record_repo):
    """Omitted myip binds the forwarded source address."""
    response = await send_update(client)

    assert response.status_code == 200
    assert response.text == f"good {SOURCE}"
    assert response.headers["content-type"].startswith("text/plain")
    assert response.headers["X-RateLimit-Limit"] == "3"
    assert response.headers["X-RateLimit-Remaining"] == "2"
    assert (await record_repo.get("home.example.com")).current_address == SOURCE


@pytest.mark.asyncio
async def test_update_then_nochg(client, stored, dns_backend):
    """Repeating the same update does not touch DNS again."""
    await send_update(client, {"myip": SOURCE})
    response = await send_update(client, {"myip": SOURCE})

    assert response.status_code == 200
    assert response.text == f"nochg {SOURCE}"
    assert len(dns_backend.mutations("upsert")) == 1


@pytest.mark.asyncio
@pytest.mark.parametrize("auth", [None, ("router", "")])
async def test_missing_credential_is_badauth(client, stored, dns_backend, auth):
    """No Basic credential means badauth with a challenge."""
    response = await send_update(client, auth=auth)

    assert response.status_code == 401
    assert response.text == "badauth"
    assert response.headers["WWW-Authenticate"] == 'Basic realm="DynDNS"'
    assert dns_backend.calls == []


@pytest.mark.asyncio
async def test_wrong_credential_is_badauth(client, stored):
    response = await send_update(client, auth=("router", "wrong"))

    assert response.status_code == 401
    assert response.text == "badauth"


@pytest.mark.asyncio
async def test_unknown_hostname_is_nohost(client, stored):
    response = await send_update(client, {"hostname": "nope.example.com"})

    assert response.status_code == 200
    assert response.text == "nohost"


@pytest.mark.asyncio
async def test_missing_hostname_is_nohost(client):
    response = await client.get("/nic/update", auth=("router", CREDENTIAL))

    assert response.status_code == 200
    assert response.text == "nohost"


@pytest.mark.asyncio
async def test_spoofed_address_is_abuse(client, stored, dns_backend):
    """A myip different from the source address is refused."""
    response = await send_update(client, {"myip": "198.51.100.99"})

    assert response.status_code == 429
    assert response.text == "abuse"
    assert dns_backend.calls == []


@pytest.mark.asyncio
async def test_rate_limit_is_abuse_with_retry_after(client, stored):
    """The request after the per-window limit is refused."""
    for _ in range(3):
        assert (await send_update(client)).status_code == 200

    response = await send_update(client)

    assert response.status_code == 429
    assert response.text == "abuse"
    assert response.headers["Retry-After"] == "60"
    assert response.headers["X-RateLimit-Remaining"] == "0"


@pytest.mark.asyncio
async def test_malformed_address_is_911(client, stored):
    """A source that is not an address cannot be bound."""
    response = await send_update(
        client, {"myip": "not-an-ip"}, headers={"X-Forwarded-For": "not-an-ip"}
    )

    assert response.status_code == 200
    assert response.text == "911"


@pytest.mark.asyncio
async def test_dns_failure_is_911(client, stored, dns_backend, record_repo):
    """A failed DNS write is a server error and nothing is committed."""
    dns_backend.fail_upsert = True

    response = await send_update(client)

    assert response.text == "911"
    assert (await record_repo.get("home.example.com")).current_address is None


@pytest.mark.asyncio
async def test_ip_echoes_forwarded_source(client):
    response = await client.get("/ip", headers=FORWARDED)

    assert response.status_code == 200
    assert response.text == SOURCE


@pytest.mark.asyncio
async def test_ip_falls_back_to_peer(client):
    """Without forwarding headers the peer address is used."""
    response = await client.get("/ip")

    assert response.text == "127.0.0.1"
