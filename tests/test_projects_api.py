"""Tests for projects, VBA projects, inspections, field reports and activity logs."""

from __future__ import annotations

import pytest
from cryptography.fernet import Fernet
from fastapi.testclient import TestClient

from app.core.encryption import FieldEncryption, get_field_encryption
from app.main import app


@pytest.fixture
def encrypted(client: TestClient):
    encryption = FieldEncryption(Fernet.generate_key().decode())
    app.dependency_overrides[get_field_encryption] = lambda: encryption
    return encryption


class TestProjects:
    def test_sensitive_fields_are_stored_encrypted(self, client: TestClient, db, encrypted) -> None:
        response = client.post("/api/v1/projects", json={
            "project_name": "Tower", "budget": "125000", "sensitive_notes": "gate code 4411",
        })
        assert response.status_code == 201
        assert response.json()["budget"] == "125000"

        stored = db.tables["projects"][0]
        assert "budget" not in stored
        assert encrypted.decrypt_field(stored["encrypted_notes"]) == "gate code 4411"

        fetched = client.get(f"/api/v1/projects/{stored['id']}").json()
        assert fetched["sensitive_notes"] == "gate code 4411"

    def test_default_organization_is_applied(self, client: TestClient, db) -> None:
        client.post("/api/v1/projects", json={"project_name": "Tower"})
        assert db.tables["projects"][0]["organization_id"] == "11111111-1111-1111-1111-111111111111"

    def test_missing_project_is_404(self, client: TestClient) -> None:
        assert client.get("/api/v1/projects/nope").status_code == 404
        assert client.put("/api/v1/projects/nope", json={"status": "closed"}).status_code == 404


class TestVBAProjects:
    def test_create_mirrors_into_projects(self, client: TestClient, db) -> None:
        response = client.post("/api/v1/vba-projects", json={
            "project_name": "Harbor Lofts", "project_number": "VBA-12", "status": "scheduled",
        })
        assert response.status_code == 201
        project_id = response.json()["id"]

        mirrored = db.tables["projects"][0]
        assert mirrored["id"] == project_id
        assert mirrored["status"] == "active"
        assert mirrored["permit_number"] == "VBA-12"

    def test_delete_removes_mirror(self, client: TestClient, db) -> None:
        project_id = client.post("/api/v1/vba-projects", json={"project_name": "A"}).json()["id"]
        assert client.delete(f"/api/v1/vba-projects/{project_id}").status_code == 204
        assert db.tables["vba_projects"] == []
        assert db.tables["projects"] == []

    def test_bulk_delete_requires_ids(self, client: TestClient) -> None:
        response = client.post("/api/v1/vba-projects/bulk-delete", json={"ids": []})
        assert response.status_code == 400
        assert response.json()["detail"] == "Invalid or empty IDs array"

    def test_bulk_update(self, client: TestClient, db) -> None:
        db.seed("vba_projects", {"id": "v1", "status": "scheduled"}, {"id": "v2", "status": "scheduled"})
        response = client.post("/api/v1/vba-projects/bulk-update", json={"ids": ["v1"], "updates": {"status": "completed"}})
        assert response.json()["updated"] == 1
        assert {r["id"]: r["status"] for r in db.tables["vba_projects"]} == {"v1": "completed", "v2": "scheduled"}
        assert db.tables["activity_logs"][0]["action"] == "bulk_update_vba_projects"

    def test_bulk_update_requires_updates(self, client: TestClient) -> None:
        response = client.post("/api/v1/vba-projects/bulk-update", json={"ids": ["v1"]})
        assert response.status_code == 400

    def test_populate_inspections_round_robin(self, client: TestClient, db) -> None:
        db.seed("vba_projects", {"id": "v1"}, {"id": "v2"}, {"id": "v3"}, {"id": "v4"})
        response = client.post("/api/v1/vba-projects/populate-inspections")
        assert response.json()["updated_count"] == 4
        sequences = [r["selected_inspections"] for r in db.tables["vba_projects"]]
        assert sequences[0] == sequences[3]
        assert sequences[0] != sequences[1]

    def test_schedule_and_list_inspections(self, client: TestClient) -> None:
        created = client.post("/api/v1/vba-projects/v1/inspections", json={"inspection_type": "Footing"})
        assert created.status_code == 201
        assert created.json()["status"] == "scheduled"
        listed = client.get("/api/v1/vba-projects/v1/inspections").json()
        assert [i["inspection_type"] for i in listed] == ["Footing"]

    def test_viewer_can_read_but_not_create(self, client: TestClient, viewer) -> None:
        assert client.get("/api/v1/vba-projects").status_code == 200
        response = client.post("/api/v1/vba-projects", json={"project_name": "A"})
        assert response.status_code == 403
        assert response.json()["detail"] == "Insufficient permissions. Required: vba_projects:create"


class TestFieldReports:
    def test_children_are_loaded_on_request(self, client: TestClient, db) -> None:
        db.seed("field_reports", {"id": "fr1", "project_id": "p1", "status": "draft"})
        db.seed("field_report_issues", {"id": "i1", "field_report_id": "fr1", "description": "Leak"})
        db.failing_tables.add("field_report_photos")

        plain = client.get("/api/v1/field-reports/fr1").json()
        assert plain["issues"] is None

        full = client.get("/api/v1/field-reports/fr1", params={"include_children": True}).json()
        assert full["issues"][0]["description"] == "Leak"
        assert full["photos"] == []
        assert full["work_completed"] == []

    def test_create_records_author(self, client: TestClient, db) -> None:
        response = client.post("/api/v1/field-reports", json={"project_id": "p1", "summary": "Pour complete"})
        assert response.status_code == 201
        assert db.tables["field_reports"][0]["created_by"] == "user-admin"


class TestActivityLogs:
    def test_create_and_list(self, client: TestClient) -> None:
        created = client.post("/api/v1/activity-logs", json={"action": "viewed_dashboard"})
        assert created.status_code == 201
        assert created.json()["user_id"] == "user-admin"

        logs = client.get("/api/v1/activity-logs", params={"limit": 5}).json()["data"]
        assert [log["action"] for log in logs] == ["viewed_dashboard"]

    def test_limit_is_bounded(self, client: TestClient) -> None:
        assert client.get("/api/v1/activity-logs", params={"limit": 0}).status_code == 422
