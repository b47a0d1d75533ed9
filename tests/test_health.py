"""
Health endpoint tests using pytest-asyncio and httpx.AsyncClient.
"""

import pytest
from httpx import AsyncClient


@pytest.mark.asyncio
async def test_health_endpoint(test_client: AsyncClient):
    """Test the health check endpoint returns expected structure."""
    response = await test_client.get("/api/v1/health")

    assert response.status_code == 200
    data = response.json()

    assert "status" in data
    assert "uptime" in data
    assert "checks" in data
    assert isinstance(data["checks"], dict)

    # No schedule config yet
    assert data["status"] == "degraded"
    assert data["checks"]["database"] == "ok"
    assert data["checks"]["schedule_config"] == "missing"
    assert data["checks"]["room_directory"] == "ok"
    assert data["checks"]["rooms"] == 2


@pytest.mark.asyncio
async def test_health_ok_once_configured(test_client: AsyncClient, schedule_config):
    response = await test_client.get("/health")

    assert response.status_code == 200
    assert response.json()["status"] == "ok"


@pytest.mark.asyncio
async def test_health_reports_unreachable_room_directory(test_client: AsyncClient, room_directory, schedule_config):
    room_directory.unavailable = True

    response = await test_client.get("/api/v1/health")

    data = response.json()
    assert data["status"] == "degraded"
    assert data["checks"]["room_directory"].startswith("error")
