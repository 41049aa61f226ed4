"""Tests for the report endpoints."""

from __future__ import annotations

from fastapi.testclient import TestClient

from tests.test_report_generator import BASE_FIELDS, TYPE_FIELDS


class TestGenerateReport:
    def test_returns_pdf_attachment(self, client: TestClient, db) -> None:
        response = client.post(
            "/api/v1/reports/generate/inspection?project_id=p1",
            json={**BASE_FIELDS, **TYPE_FIELDS["inspection"]},
        )
        assert response.status_code == 200
        assert response.headers["content-type"] == "application/pdf"
        assert "Inspection Report.pdf" in response.headers["content-disposition"]
        assert response.content.startswith(b"%PDF")
        logged = db.tables["activity_logs"][0]
        assert logged["action"] == "generated_report"
        assert logged["metadata"]["project_id"] == "p1"

    def test_missing_fields_return_422_with_details(self, client: TestClient) -> None:
        response = client.post("/api/v1/reports/generate/compliance", json={"projectName": "X"})
        assert response.status_code == 422
        body = response.json()
        assert body["code"] == "VALIDATION_FAILED"
        assert "Compliance status is required" in body["details"]

    def test_unknown_type_is_400(self, client: TestClient) -> None:
        response = client.post("/api/v1/reports/generate/memo", json=BASE_FIELDS)
        assert response.status_code == 400
        assert response.json()["code"] == "INVALID_INPUT"


class TestReportRecords:
    def test_create_and_list(self, client: TestClient) -> None:
        created = client.post("/api/v1/reports/p1", json={"report_type": "compliance", "report_sequence": "3"})
        assert created.status_code == 201
        assert created.json()["status"] == "draft"

        listed = client.get("/api/v1/reports/p1")
        assert [r["id"] for r in listed.json()] == [created.json()["id"]]

    def test_update_missing_report_is_404(self, client: TestClient) -> None:
        response = client.put("/api/v1/reports/item/missing", json={"status": "final"})
        assert response.status_code == 404

    def test_viewer_cannot_generate(self, client: TestClient, viewer) -> None:
        response = client.post("/api/v1/reports/generate/inspection", json=BASE_FIELDS)
        assert response.status_code == 403
        assert response.json()["code"] == "AUTH_PERMISSION_DENIED"


class TestProjectInformation:
    def test_missing_information_is_404(self, client: TestClient) -> None:
        assert client.get("/api/v1/project-information/p1").status_code == 404

    def test_upsert_keeps_one_row_per_project(self, client: TestClient, db) -> None:
        client.put("/api/v1/project-information/p1", json={"owner_name": "Bay Holdings"})
        response = client.put("/api/v1/project-information/p1", json={"contractor_name": "Gulf Builders"})

        assert response.status_code == 200
        assert len(db.tables["project_information"]) == 1
        fetched = client.get("/api/v1/project-information/p1").json()
        assert fetched["owner_name"] == "Bay Holdings"
        assert fetched["contractor_name"] == "Gulf Builders"
        assert [log["action"] for log in db.tables["activity_logs"]] == ["updated_project_information"] * 2
