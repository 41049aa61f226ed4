"""Tests for security event logging, brute force detection and the security endpoints."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from types import SimpleNamespace

from fastapi.testclient import TestClient

from app.modules.security.service import (
    FAILED_LOGIN_THRESHOLD,
    SecurityEventTypes,
    SecurityService,
)


def _ago(**delta) -> str:
    return (datetime.now(timezone.utc) - timedelta(**delta)).isoformat()


def _events(db, event_type: str) -> list:
    return [e for e in db.tables.get("security_events", []) if e["event_type"] == event_type]


def _rejecting_auth(email: str, password: str):
    raise Exception("Invalid login credentials")


def _accepting_auth(credentials: dict):
    return SimpleNamespace(
        user=SimpleNamespace(id="user-7", email=credentials["email"]),
        session=SimpleNamespace(access_token="tok-7"),
    )


class TestSecurityService:
    def test_log_event_never_raises(self, db) -> None:
        db.failing_tables.add("security_events")
        assert SecurityService(db).log_event("failed_login", "medium", "Failed login attempt") is None

    def test_failed_login_is_recorded(self, db) -> None:
        SecurityService(db).record_login_attempt("a@example.com", False, "10.0.0.1", "curl/8")

        event, = db.tables["security_events"]
        assert event["event_type"] == SecurityEventTypes.FAILED_LOGIN
        assert event["severity"] == "medium"
        assert (event["email"], event["source_ip"], event["user_agent"]) == ("a@example.com", "10.0.0.1", "curl/8")
        assert event["status"] == "active"

    def test_repeated_failures_from_one_ip_raise_one_alert(self, db) -> None:
        service = SecurityService(db)
        for attempt in range(FAILED_LOGIN_THRESHOLD - 1):
            service.record_login_attempt(f"user{attempt}@example.com", False, "10.0.0.9")
        assert _events(db, SecurityEventTypes.BRUTE_FORCE_DETECTED) == []

        service.record_login_attempt("last@example.com", False, "10.0.0.9")
        service.record_login_attempt("again@example.com", False, "10.0.0.9")

        alert, = _events(db, SecurityEventTypes.BRUTE_FORCE_DETECTED)
        assert alert["severity"] == "high"
        assert alert["source_ip"] == "10.0.0.9"
        assert alert["metadata"]["identifier"] == "source_ip"
        assert alert["metadata"]["failed_attempts"] == FAILED_LOGIN_THRESHOLD

    def test_repeated_failures_against_one_email(self, db) -> None:
        service = SecurityService(db)
        for attempt in range(FAILED_LOGIN_THRESHOLD):
            service.record_login_attempt("target@example.com", False, f"10.0.1.{attempt}")

        alert, = _events(db, SecurityEventTypes.BRUTE_FORCE_DETECTED)
        assert alert["email"] == "target@example.com"
        assert alert["source_ip"] is None

    def test_failures_outside_the_window_are_ignored(self, db) -> None:
        db.seed("security_events", *[
            {"id": f"old-{i}", "event_type": "failed_login", "severity": "medium",
             "source_ip": "10.0.0.5", "email": "old@example.com", "created_at": _ago(hours=1)}
            for i in range(FAILED_LOGIN_THRESHOLD)
        ])
        assert SecurityService(db).detect_brute_force("old@example.com", "10.0.0.5") is False

        SecurityService(db).record_login_attempt("old@example.com", False, "10.0.0.5")
        assert _events(db, SecurityEventTypes.BRUTE_FORCE_DETECTED) == []

    def test_metrics(self, db) -> None:
        db.seed(
            "security_events",
            {"id": "e1", "event_type": "failed_login", "severity": "medium", "created_at": _ago(minutes=5)},
            {"id": "e2", "event_type": "failed_login", "severity": "medium", "created_at": _ago(minutes=4)},
            {"id": "e3", "event_type": "brute_force_detected", "severity": "high",
             "source_ip": "10.0.0.9", "created_at": _ago(minutes=3)},
            {"id": "e4", "event_type": "brute_force_detected", "severity": "high",
             "email": "target@example.com", "created_at": _ago(minutes=2)},
            {"id": "e5", "event_type": "failed_login", "severity": "medium", "created_at": _ago(days=3)},
        )

        metrics = SecurityService(db).get_metrics(hours=24)

        assert metrics.total_events == 4
        assert metrics.events_by_severity == {"low": 0, "medium": 2, "high": 2, "critical": 0}
        assert metrics.events_by_type == {"failed_login": 2, "brute_force_detected": 2}
        assert (metrics.failed_logins, metrics.threats_detected) == (2, 2)
        assert metrics.suspicious_ips == ["10.0.0.9"]
        assert metrics.suspicious_users == ["target@example.com"]


class TestLoginMonitoring:
    def test_failed_login_is_logged(self, client: TestClient, db) -> None:
        db.auth = SimpleNamespace(sign_in_with_password=lambda credentials: _rejecting_auth(**credentials))

        response = client.post("/api/v1/auth/login", json={"email": "a@example.com", "password": "wrong"},
                               headers={"User-Agent": "pytest-agent"})

        assert response.status_code == 401
        assert response.json()["code"] == "AUTH_INVALID_CREDENTIALS"
        event, = _events(db, SecurityEventTypes.FAILED_LOGIN)
        assert event["email"] == "a@example.com"
        assert event["source_ip"] == "testclient"
        assert event["user_agent"] == "pytest-agent"

    def test_repeated_failed_logins_are_flagged(self, client: TestClient, db) -> None:
        db.auth = SimpleNamespace(sign_in_with_password=lambda credentials: _rejecting_auth(**credentials))
        for _ in range(FAILED_LOGIN_THRESHOLD):
            client.post("/api/v1/auth/login", json={"email": "a@example.com", "password": "wrong"})

        alerts = _events(db, SecurityEventTypes.BRUTE_FORCE_DETECTED)
        assert {alert["metadata"]["identifier"] for alert in alerts} == {"source_ip", "email"}

    def test_login_still_fails_cleanly_when_events_cannot_be_stored(self, client: TestClient, db) -> None:
        db.auth = SimpleNamespace(sign_in_with_password=lambda credentials: _rejecting_auth(**credentials))
        db.failing_tables.add("security_events")

        response = client.post("/api/v1/auth/login", json={"email": "a@example.com", "password": "wrong"})

        assert response.status_code == 401

    def test_successful_login_is_logged(self, client: TestClient, db) -> None:
        db.auth = SimpleNamespace(sign_in_with_password=_accepting_auth)

        response = client.post("/api/v1/auth/login", json={"email": "a@example.com", "password": "right"})

        assert response.status_code == 200
        assert response.json()["access_token"] == "tok-7"
        event, = _events(db, SecurityEventTypes.SUCCESSFUL_LOGIN)
        assert (event["user_id"], event["severity"]) == ("user-7", "low")
        assert _events(db, SecurityEventTypes.FAILED_LOGIN) == []


class TestSecurityRoutes:
    def test_list_events_newest_first(self, client: TestClient, db) -> None:
        db.seed(
            "security_events",
            {"id": "e1", "event_type": "failed_login", "severity": "medium", "created_at": _ago(minutes=10)},
            {"id": "e2", "event_type": "brute_force_detected", "severity": "high", "created_at": _ago(minutes=1)},
        )

        body = client.get("/api/v1/security/events").json()
        assert [e["id"] for e in body["data"]] == ["e2", "e1"]

        body = client.get("/api/v1/security/events", params={"severity": "high"}).json()
        assert [e["id"] for e in body["data"]] == ["e2"]

    def test_rejects_unknown_severity(self, client: TestClient) -> None:
        assert client.get("/api/v1/security/events", params={"severity": "urgent"}).status_code == 422

    def test_metrics_route(self, client: TestClient, db) -> None:
        db.seed("security_events",
                {"id": "e1", "event_type": "failed_login", "severity": "medium", "created_at": _ago(minutes=1)})

        body = client.get("/api/v1/security/metrics", params={"hours": 1}).json()

        assert body["hours"] == 1
        assert body["total_events"] == 1
        assert body["failed_logins"] == 1

    def test_viewer_cannot_read_security_events(self, client: TestClient, viewer) -> None:
        assert client.get("/api/v1/security/events").status_code == 403
        assert client.get("/api/v1/security/metrics").status_code == 403
