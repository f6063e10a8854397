"""Tests for GET /status and the root endpoint."""

from typing import Any

import pytest
from httpx import ASGITransport, AsyncClient

from route53_ddns.main import app


@pytest.mark.asyncio
async def test_status_endpoint_returns_ok() -> None:
    """Status answers 200 without authentication."""
    async with AsyncClient(
        transport=ASGITransport(app=app), base_url="http://test"
    ) as client:
        response = await client.get("/status")

    assert response.status_code == 200
    assert response.headers["content-type"] == "application/json"
    data: dict[str, Any] = response.json()
    assert data["status"] == "ok"
    assert data["service"] == "Dynamic Route 53 DNS"


@pytest.mark.asyncio
async def test_status_fields_have_expected_types() -> None:
    async with AsyncClient(
        transport=ASGITransport(app=app), base_url="http://test"
    ) as client:
        response = await client.get("/status")

    data: dict[str, Any] = response.json()
    assert isinstance(data["version"], str)
    assert len(data["version"]) > 0
    assert isinstance(data["uptime_seconds"], int)
    assert data["uptime_seconds"] >= 0


@pytest.mark.asyncio
async def test_status_carries_request_id() -> None:
    """Every response carries a request ID."""
    async with AsyncClient(
        transport=ASGITransport(app=app), base_url="http://test"
    ) as client:
        response = await client.get("/status")

    assert response.headers["X-Request-ID"]


@pytest.mark.asyncio
async def test_root_points_at_update_path() -> None:
    async with AsyncClient(
        transport=ASGITransport(app=app), base_url="http://test"
    ) as client:
        response = await client.get("/")

    assert response.json()["update"] == "/nic/update"
