from __future__ import annotations

from unittest.mock import patch


def test_health_returns_status_and_services(client):
    response = client.get("/api/v1/health")
    assert response.status_code == 200
    data = response.json()
    assert "version" in data
    assert data["backend"] == "memory"
    assert set(data["services"]) == {"roster_store", "photo_storage"}


def test_health_memory_store_is_healthy(client):
    data = client.get("/api/v1/health").json()

    assert data["status"] == "healthy"
    assert data["services"]["roster_store"] == "ok"
    assert data["services"]["photo_storage"] == "not_created"


def test_health_reports_existing_photo_dir(client):
    client.app.state.photo_service.photo_dir.mkdir(parents=True)
    data = client.get("/api/v1/health").json()

    assert data["services"]["photo_storage"] == "ok"


def test_health_degraded_when_store_fails(client):
    with patch("roster.services.roster_service.RosterService.check_connection", return_value=False):
        response = client.get("/api/v1/health")

    data = response.json()
    assert data["status"] == "degraded"
    assert data["services"]["roster_store"] == "error"


def test_readiness_probe(client):
    response = client.get("/api/v1/health/ready")
    assert response.status_code == 200
    assert response.json()["ready"] is True


def test_readiness_probe_without_store(client):
    roster = client.app.state.roster_service
    client.app.state.roster_service = None
    try:
        response = client.get("/api/v1/health/ready")
    finally:
        client.app.state.roster_service = roster

    assert response.status_code == 503
    assert response.json()["ready"] is False


def test_health_protected_requires_auth(client):
    response = client.get("/api/v1/health/protected")
    assert response.status_code == 401


def test_health_protected_with_auth(authenticated_client):
    response = authenticated_client.get("/api/v1/health/protected")
    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "ok"
    assert "user" in data
