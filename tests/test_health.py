"""Tests for health check endpoints."""

import pytest
from httpx import AsyncClient


@pytest.mark.asyncio
async def test_health_check(client: AsyncClient):
    """Health is public and reports the database and collaborator backends."""
    response = await client.get("/health")

    assert response.status_code == 200
    data = response.json()

    assert data["status"] == "healthy"
    assert "timestamp" in data
    assert "version" in data
    assert data["environment"] == "test"

    dependencies = data["dependencies"]
    assert dependencies["database"]["status"] == "healthy"
    assert dependencies["storage"]["type"] == "memory"
    assert dependencies["email"]["type"] == "log"
    assert dependencies["captcha"]["type"] == "static"


@pytest.mark.asyncio
async def test_health_check_under_api_prefix(client: AsyncClient):
    response = await client.get("/api/health")
    assert response.status_code == 200


@pytest.mark.asyncio
async def test_version_endpoint(client: AsyncClient):
    response = await client.get("/version")

    assert response.status_code == 200
    data = response.json()
    assert data["service"] == "labelvault"
    assert "version" in data


@pytest.mark.asyncio
async def test_root_endpoint(client: AsyncClient):
    response = await client.get("/")

    assert response.status_code == 200
    data = response.json()
    assert data["service"] == "labelvault"
    assert data["status"] == "running"
