"""Tests for API key authentication."""
import pytest
from httpx import AsyncClient, ASGITransport
from orbita.main import app
from orbita.auth.api_key import registry
from orbita.config import get_settings


@pytest.fixture
def require_auth(monkeypatch):
    monkeypatch.setattr(get_settings(), "REQUIRE_AUTH", True)
    registry.add_key("test-key-123")
    yield "test-key-123"
    registry.remove_key("test-key-123")


@pytest.mark.asyncio
async def test_auth_disabled_allows_access():
    """Test that requests work when auth is disabled (default)."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        response = await client.get("/v1/settings")
        assert response.status_code == 200


@pytest.mark.asyncio
async def test_auth_enabled_rejects_without_key(require_auth):
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        response = await client.get("/v1/settings")
        assert response.status_code == 401


@pytest.mark.asyncio
async def test_auth_enabled_rejects_invalid_key(require_auth):
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        response = await client.get("/v1/settings", headers={"X-Orbita-Key": "wrong"})
        assert response.status_code == 403


@pytest.mark.asyncio
async def test_valid_api_key_allows_access(require_auth):
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        response = await client.get("/v1/settings", headers={"X-Orbita-Key": require_auth})
        assert response.status_code == 200


@pytest.mark.asyncio
async def test_callback_does_not_require_key(require_auth):
    """GitHub redirects the browser to the callback without our header."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        response = await client.get("/github/callback", params={"error": "access_denied"})
        assert response.status_code == 307


def test_api_key_registry_validation():
    """Test API key registry validation."""
    test_key = "valid-key-456"

    registry.add_key(test_key)
    assert registry.validate(test_key) is True
    assert registry.validate("invalid-key") is False

    registry.remove_key(test_key)
    assert registry.validate(test_key) is False
