"""
Tests for health check endpoints.
"""

from unittest.mock import AsyncMock, MagicMock, patch

from fastapi.testclient import TestClient

from inboxiq.main import app

client = TestClient(app)


def _generator(initialized=True):
    generator = MagicMock()
    generator.describe.return_value = {
        "service": "openai_text_generator",
        "client_initialized": initialized,
        "model": "gpt-4o-mini",
        "timeout_seconds": 30.0,
    }
    return generator


def test_healthz_endpoint():
    """Test the basic health check endpoint."""
    response = client.get("/healthz")

    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "ok"
    assert data["service"] == "inboxiq"


def test_readyz_endpoint_database_healthy():
    """Test readiness endpoint when the pool answers."""
    db_health = {
        "healthy": True,
        "service": "database_pool",
        "pool_stats": {"pool_size": 2, "pool_available": 2},
    }
    with (
        patch("inboxiq.routes.health.db_health_check", AsyncMock(return_value=db_health)),
        patch("inboxiq.routes.health.get_text_generator", return_value=_generator()),
    ):
        response = client.get("/readyz")

    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "ok"
    assert data["checks"]["database"]["ok"] is True
    assert data["checks"]["database"]["pool_size"] == 2
    assert data["checks"]["text_generation"]["client_initialized"] is True


def test_readyz_endpoint_database_unhealthy():
    """Test readiness endpoint when the pool is down."""
    db_health = {"healthy": False, "service": "database_pool", "error": "Pool not initialized"}
    with (
        patch("inboxiq.routes.health.db_health_check", AsyncMock(return_value=db_health)),
        patch("inboxiq.routes.health.get_text_generator", return_value=_generator()),
    ):
        response = client.get("/readyz")

    assert response.status_code == 503
    data = response.json()
    assert data["status"] == "degraded"
    assert data["checks"]["database"]["error"] == "Pool not initialized"


def test_readyz_without_openai_key_is_still_ready():
    """Missing OpenAI key only means fallback drafts."""
    with (
        patch(
            "inboxiq.routes.health.db_health_check",
            AsyncMock(return_value={"healthy": True, "service": "database_pool"}),
        ),
        patch("inboxiq.routes.health.get_text_generator", return_value=_generator(initialized=False)),
    ):
        response = client.get("/readyz")

    assert response.status_code == 200
    assert response.json()["checks"]["text_generation"]["client_initialized"] is False


def test_request_id_header_is_echoed():
    """Incoming X-Request-ID is reused, otherwise one is generated."""
    response = client.get("/healthz", headers={"X-Request-ID": "req-123"})
    assert response.headers["X-Request-ID"] == "req-123"

    generated = client.get("/healthz").headers["X-Request-ID"]
    assert len(generated) == 36
