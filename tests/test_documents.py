"""Tests for document upload, listing and deletion."""

from __future__ import annotations

from fastapi.testclient import TestClient

from app.config import settings


def _upload(client: TestClient, filename: str = "plans.pdf", content: bytes = b"%PDF-1.4 plans", **form):
    return client.post(
        "/api/v1/documents/upload",
        files={"file": (filename, content, "application/pdf")},
        data=form,
    )


class TestUpload:
    def test_stores_file_and_records_document(self, client: TestClient, db, monkeypatch) -> None:
        monkeypatch.setattr(settings, "aws_access_key_id", None)
        response = _upload(client, project_id="p1", category="plans")

        assert response.status_code == 201
        body = response.json()
        assert body["file_type"] == "pdf"
        assert body["category"] == "plans"
        assert body["file_size"] == len(b"%PDF-1.4 plans")
        assert body["storage_key"].startswith("p1/")
        assert body["file_url"] == f"https://storage.test/documents/{body['storage_key']}"

        stored = db.storage.objects[("documents", body["storage_key"])]
        assert stored["content"] == b"%PDF-1.4 plans"
        assert stored["options"] == {"content-type": "application/pdf"}
        assert db.tables["activity_logs"][0]["action"] == "uploaded_document"

    def test_without_project_uses_general_prefix(self, client: TestClient, monkeypatch) -> None:
        monkeypatch.setattr(settings, "aws_access_key_id", None)
        body = _upload(client).json()
        assert body["storage_key"].startswith("general/")
        assert body["category"] == "other"

    def test_rejects_unsupported_extension(self, client: TestClient, db) -> None:
        response = _upload(client, filename="run.exe")
        assert response.status_code == 400
        assert response.json()["code"] == "FILE_TYPE_INVALID"
        assert "documents" not in db.tables

    def test_rejects_oversized_file(self, client: TestClient, monkeypatch) -> None:
        monkeypatch.setattr(settings, "max_upload_size_mb", 0)
        response = _upload(client)
        assert response.status_code == 413
        assert response.json()["code"] == "FILE_TOO_LARGE"

    def test_storage_failure(self, client: TestClient, db, monkeypatch) -> None:
        monkeypatch.setattr(settings, "aws_access_key_id", None)
        db.storage.fail_uploads = True
        response = _upload(client)
        assert response.status_code == 500
        assert response.json()["code"] == "FILE_UPLOAD_FAILED"
        assert response.json()["details"] == "storage unavailable"

    def test_failed_record_removes_stored_object(self, client: TestClient, db, monkeypatch) -> None:
        monkeypatch.setattr(settings, "aws_access_key_id", None)
        db.failing_tables.add("documents")

        response = _upload(client, project_id="p1")

        assert response.status_code == 500
        assert db.storage.objects == {}
        assert "activity_logs" not in db.tables

    def test_viewer_cannot_upload(self, client: TestClient, viewer) -> None:
        assert _upload(client).status_code == 403


class TestListAndDelete:
    def test_list_filters_by_project(self, client: TestClient, db) -> None:
        db.seed("documents", {"id": "d1", "name": "a.pdf", "project_id": "p1"}, {"id": "d2", "name": "b.pdf", "project_id": "p2"})
        names = [d["name"] for d in client.get("/api/v1/documents", params={"project_id": "p1"}).json()]
        assert names == ["a.pdf"]

    def test_delete_removes_stored_object(self, client: TestClient, db, monkeypatch) -> None:
        monkeypatch.setattr(settings, "aws_access_key_id", None)
        document = _upload(client).json()

        assert client.delete(f"/api/v1/documents/{document['id']}").status_code == 204
        assert db.storage.objects == {}
        assert db.tables["documents"] == []

    def test_delete_missing_document(self, client: TestClient) -> None:
        assert client.delete("/api/v1/documents/missing").status_code == 404
