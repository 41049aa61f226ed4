"""Tests for the root, health and readiness endpoints."""

from __future__ import annotations

from fastapi.testclient import TestClient

from app.config import settings


def test_root(client: TestClient) -> None:
    response = client.get("/")
    assert response.json() == {"message": f"Welcome to {settings.app_name}", "status": "healthy"}
    assert response.headers["X-Content-Type-Options"] == "nosniff"
    assert response.headers["X-Frame-Options"] == "DENY"


def test_health_when_database_reachable(client: TestClient) -> None:
    response = client.get("/health")
    body = response.json()

    assert response.status_code == 200
    assert body["status"] == "healthy"
    assert body["database"]["connected"] is True
    assert body["database"]["status"] == "operational"
    assert body["metrics"]["version"] == settings.app_version
    assert set(body["services"]) == {"weather", "supabase", "storage", "encryption"}


def test_health_when_database_down(client: TestClient, db) -> None:
    db.failing_tables.add("profiles")
    response = client.get("/health")

    assert response.status_code == 503
    assert response.json()["status"] == "degraded"
    assert response.json()["database"]["status"] == "down"


def test_ready(client: TestClient, db) -> None:
    assert client.get("/ready").json()["status"] == "ready"
    db.failing_tables.add("profiles")
    response = client.get("/ready")
    assert response.status_code == 503
    assert response.json()["status"] == "not_ready"
