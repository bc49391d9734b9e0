"""
Health check tests for the API.
"""

from learnhub.core.config import settings


def test_root(client):
    response = client.get("/")

    assert response.status_code == 200
    assert response.json()["message"] == settings.PROJECT_NAME


def test_health(client):
    response = client.get(f"{settings.API_PREFIX}/health")

    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


def test_ready(client):
    response = client.get(f"{settings.API_PREFIX}/ready")

    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "ok"
    assert data["checks"]["db"]["status"] == "ok"
    assert data["checks"]["redis"] == {"status": "ok", "message": "Not enabled"}
    assert data["snapshot_backend"] == "sql"


def test_request_id_is_echoed(client):
    response = client.get(
        f"{settings.API_PREFIX}/health", headers={"X-Request-ID": "req-123"}
    )
    assert response.headers["X-Request-ID"] == "req-123"


def test_unknown_route_uses_error_envelope(client):
    response = client.get(f"{settings.API_PREFIX}/nope")

    assert response.status_code == 404
    assert "error_code" in response.json()
