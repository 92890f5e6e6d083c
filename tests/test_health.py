"""
Tests for health check endpoints.
"""
from fastapi.testclient import TestClient

from orbita.config import get_settings
from orbita.dependencies import reset_services
from orbita.main import app

client = TestClient(app)


def test_health_liveness():
    """Test liveness health check."""
    r = client.get("/health")
    assert r.status_code == 200
    data = r.json()
    assert data["status"] == "ok"
    assert data["service"] == "orbita-secrets"
    assert data["version"] == "0.1.0"
    assert "timestamp" in data


def test_health_readiness():
    """Key material from the test environment makes the service ready."""
    r = client.get("/health/ready")
    assert r.status_code == 200
    data = r.json()
    assert data["status"] == "ready"
    assert data["checks"]["encryption_key"]["status"] == "ok"
    assert data["checks"]["oauth_state_secret"]["status"] == "ok"


def test_health_readiness_without_key(monkeypatch):
    """A malformed key is reported, not raised."""
    monkeypatch.setattr(get_settings(), "ENCRYPTION_KEY", "abc")
    reset_services()

    r = client.get("/health/ready")

    assert r.status_code == 503
    data = r.json()
    assert data["status"] == "not_ready"
    assert data["checks"]["encryption_key"]["status"] == "error"
    assert data["checks"]["oauth_state_secret"]["status"] == "ok"


def test_unconfigured_key_fails_closed(monkeypatch):
    """Secret endpoints refuse to work without a key rather than store plaintext."""
    monkeypatch.setattr(get_settings(), "ENCRYPTION_KEY", "")
    reset_services()

    r = client.post("/v1/projects/p/credentials", json={"label": "x", "password": "y"})

    assert r.status_code == 503
    assert r.json()["error"] == "ServiceNotConfigured"


def test_metrics_endpoint():
    """Test Prometheus metrics endpoint."""
    client.get("/health")
    r = client.get("/metrics/")
    assert r.status_code == 200
    content = r.text
    assert "http_requests_total" in content
    assert "http_request_duration_seconds" in content
    assert "app_up" in content
    assert "orbita_secret_operations_total" in content
    assert "orbita_oauth_state_total" in content


def test_correlation_id_in_response():
    """Test that correlation ID is added to response headers."""
    r = client.get("/health")
    assert "x-correlation-id" in r.headers


def test_correlation_id_propagation():
    """Test that provided correlation ID is propagated."""
    correlation_id = "test-correlation-id-123"
    r = client.get("/health", headers={"x-correlation-id": correlation_id})
    assert r.headers["x-correlation-id"] == correlation_id
