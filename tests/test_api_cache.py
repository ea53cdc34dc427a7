"""Tests for cache API endpoints and the application factory."""

import pytest
from httpx import AsyncClient, ASGITransport

from storefront.api.main import create_app
from storefront.api.routers.products import get_response_cache
from storefront.catalog import TTLCache


@pytest.fixture
def cache():
    cache = TTLCache()
    cache.set("products?limit=2", {"products": []}, 60)
    return cache


@pytest.fixture
async def client(cache):
    """Client for the full app with an isolated cache."""
    app = create_app()
    app.dependency_overrides[get_response_cache] = lambda: cache

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


@pytest.mark.asyncio
async def test_health(client):
    response = await client.get("/health")

    assert response.status_code == 200
    assert response.json() == {"status": "healthy"}


@pytest.mark.asyncio
async def test_cache_stats(client, cache):
    """Test GET /api/cache/stats."""
    cache.get("products?limit=2")
    cache.get("missing")

    response = await client.get("/api/cache/stats")

    assert response.status_code == 200
    data = response.json()
    assert data["success"] is True
    assert data["stats"]["size"] == 1
    assert data["stats"]["max_size"] == 1000
    assert data["stats"]["hits"] == 1
    assert data["stats"]["misses"] == 1
    assert "timestamp" in data


@pytest.mark.asyncio
async def test_cache_clear(client, cache):
    """Test POST /api/cache/clear."""
    response = await client.post("/api/cache/clear")

    assert response.status_code == 200
    data = response.json()
    assert data["success"] is True
    assert data["message"] == "Cache cleared successfully"
    assert len(cache) == 0


@pytest.mark.asyncio
async def test_cache_clear_requires_post(client):
    response = await client.get("/api/cache/clear")
    assert response.status_code == 405
