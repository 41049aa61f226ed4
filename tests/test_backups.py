"""Tests for backup creation, restore, scheduling and export."""

from __future__ import annotations

import json
from datetime import datetime, timezone

import pytest
from fastapi.testclient import TestClient

from app.config import settings
from app.core.errors import AppError, ErrorTypes
from app.modules.backups.scheduler import run_due_backups
from app.modules.backups.service import (
    BACKUP_TABLES,
    BackupSystem,
    add_months,
    backup_to_bytes,
    calculate_checksum,
    convert_to_csv,
    convert_to_excel,
    next_backup_date,
)


def _backup_file(data: dict, checksum: str = None) -> bytes:
    return backup_to_bytes({
        "metadata": {
            "version": "2.0",
            "timestamp": "2024-08-01T00:00:00+00:00",
            "tables": list(data),
            "checksum": checksum if checksum is not None else calculate_checksum(data),
        },
        "data": data,
    })


class TestHelpers:
    def test_checksum_ignores_key_order(self) -> None:
        assert calculate_checksum({"a": [{"x": 1, "y": 2}]}) == calculate_checksum({"a": [{"y": 2, "x": 1}]})
        assert calculate_checksum({"a": []}) != calculate_checksum({"a": [{"x": 1}]})
        assert len(calculate_checksum({})) == 64

    def test_next_backup_dates(self) -> None:
        start = datetime(2024, 1, 31, 12, tzinfo=timezone.utc)
        assert next_backup_date("daily", start) == datetime(2024, 2, 1, 12, tzinfo=timezone.utc)
        assert next_backup_date("weekly", start) == datetime(2024, 2, 7, 12, tzinfo=timezone.utc)
        assert next_backup_date("monthly", start) == datetime(2024, 2, 29, 12, tzinfo=timezone.utc)
        with pytest.raises(ValueError):
            next_backup_date("hourly", start)

    def test_add_months_crosses_year(self) -> None:
        assert add_months(datetime(2024, 12, 15), 1) == datetime(2025, 1, 15)

    def test_csv_has_one_section_per_non_empty_table(self) -> None:
        content = convert_to_csv({
            "projects": [{"id": "p1", "active": True, "tags": ["a"], "notes": None}],
            "documents": [],
        }).decode("utf-8")
        assert content == '\n# projects\nid,active,tags,notes\np1,true,"[""a""]",\n'

    def test_excel_is_a_workbook(self) -> None:
        content = convert_to_excel({"projects": [{"id": "p1"}], "documents": []})
        assert content[:2] == b"PK"


class TestBackupSystem:
    def test_create_backup_counts_records(self, db) -> None:
        db.seed("projects", {"id": "p1"}, {"id": "p2"})
        backup = BackupSystem(db).create_backup("u1")

        metadata = backup["metadata"]
        assert metadata["tables"] == BACKUP_TABLES
        assert metadata["record_counts"]["projects"] == 2
        assert metadata["checksum"] == calculate_checksum(backup["data"])
        assert db.tables["activity_logs"][0]["action"] == "backup_created"

    def test_unreadable_table_is_backed_up_empty(self, db) -> None:
        db.failing_tables.add("contacts")
        backup = BackupSystem(db).create_backup("u1")
        assert backup["data"]["contacts"] == []

    def test_incremental_backup_filters_updated_rows(self, db) -> None:
        db.seed("projects",
                {"id": "old", "updated_at": "2024-01-01T00:00:00+00:00"},
                {"id": "new", "updated_at": "2024-06-01T00:00:00+00:00"})
        db.seed("contacts", {"id": "c1"})
        backup = BackupSystem(db).create_incremental_backup("u1", "2024-03-01T00:00:00+00:00")
        assert [r["id"] for r in backup["data"]["projects"]] == ["new"]
        assert len(backup["data"]["contacts"]) == 1
        assert backup["metadata"]["since"] == "2024-03-01T00:00:00+00:00"

    def test_restore_upserts_rows(self, db) -> None:
        db.seed("projects", {"id": "p1", "project_name": "Old"})
        raw = _backup_file({"projects": [{"id": "p1", "project_name": "New"}, {"id": "p2"}]})

        result = BackupSystem(db).restore_backup(raw, "u1")

        assert result == {"success": True, "tables_restored": ["projects"], "records_restored": 2, "errors": []}
        assert {r["id"]: r.get("project_name") for r in db.tables["projects"]} == {"p1": "New", "p2": None}

    def test_restore_can_clear_existing_rows(self, db) -> None:
        db.seed("projects", {"id": "stale"})
        BackupSystem(db).restore_backup(_backup_file({"projects": [{"id": "p1"}]}), "u1", clear_existing=True)
        assert [r["id"] for r in db.tables["projects"]] == ["p1"]

    def test_restore_reports_missing_tables(self, db) -> None:
        raw = _backup_file({"projects": []})
        result = BackupSystem(db).restore_backup(raw, "u1", tables=["projects", "contacts"])
        assert result["success"] is False
        assert result["errors"] == ["Table contacts not found in backup"]

    @pytest.mark.parametrize("payload", [5, {"id": "p1"}, "rows"])
    def test_restore_reports_malformed_tables(self, db, payload) -> None:
        db.seed("projects", {"id": "keep"})
        raw = _backup_file({"projects": payload, "contacts": [{"id": "c1"}]})

        result = BackupSystem(db).restore_backup(raw, "u1", clear_existing=True)

        assert result["success"] is False
        assert result["tables_restored"] == ["contacts"]
        assert result["errors"][0].startswith("Error restoring table projects: expected a list of records")
        assert db.tables["projects"] == [{"id": "keep"}]
        assert db.tables["contacts"][0]["id"] == "c1"

    def test_restore_records_failed_batches(self, db) -> None:
        db.failing_tables.add("projects")
        result = BackupSystem(db).restore_backup(_backup_file({"projects": [{"id": "p1"}]}), "u1")
        assert result["records_restored"] == 0
        assert result["errors"][0].startswith("Failed to restore batch for projects")

    def test_restore_rejects_invalid_json(self, db) -> None:
        with pytest.raises(AppError) as exc_info:
            BackupSystem(db).restore_backup(b"not json", "u1")
        assert exc_info.value.code == ErrorTypes.FILE_TYPE_INVALID

    def test_restore_rejects_checksum_mismatch(self, db) -> None:
        raw = _backup_file({"projects": [{"id": "p1"}]}, checksum="0" * 64)
        with pytest.raises(AppError) as exc_info:
            BackupSystem(db).restore_backup(raw, "u1")
        assert exc_info.value.code == ErrorTypes.VALIDATION_FAILED
        assert exc_info.value.message == "Backup file integrity check failed"

        result = BackupSystem(db).restore_backup(raw, "u1", validate_checksum=False)
        assert result["records_restored"] == 1

    def test_schedule_keeps_other_preferences(self, db) -> None:
        db.seed("user_settings", {"id": "s1", "user_id": "u1", "preferences": {"theme": "dark"}})
        schedule = BackupSystem(db).schedule_backup("u1", "weekly")

        assert schedule["enabled"] is True
        preferences = db.tables["user_settings"][0]["preferences"]
        assert preferences["theme"] == "dark"
        assert preferences["backup_schedule"]["frequency"] == "weekly"

    def test_export_rejects_unknown_format_and_type(self, db) -> None:
        with pytest.raises(AppError):
            BackupSystem(db).export_data("projects", "pdf", "u1")
        with pytest.raises(AppError):
            BackupSystem(db).export_data("invoices", "json", "u1")


class TestBackupRoutes:
    def test_download_backup(self, client: TestClient) -> None:
        response = client.post("/api/v1/backups")
        assert response.status_code == 200
        assert "ipc-backup-" in response.headers["content-disposition"]
        assert set(response.json()) == {"metadata", "data"}

    def test_restore_upload(self, client: TestClient, db) -> None:
        raw = _backup_file({"projects": [{"id": "p1"}], "contacts": [{"id": "c1"}]})
        response = client.post(
            "/api/v1/backups/restore",
            files={"file": ("backup.json", raw, "application/json")},
            data={"tables": "projects", "clear_existing": "false"},
        )
        assert response.status_code == 200
        assert response.json()["tables_restored"] == ["projects"]
        assert "contacts" not in db.tables

    def test_restore_upload_with_malformed_table(self, client: TestClient) -> None:
        raw = _backup_file({"projects": 5})
        response = client.post("/api/v1/backups/restore", files={"file": ("backup.json", raw, "application/json")})
        assert response.status_code == 200
        body = response.json()
        assert body["success"] is False
        assert body["records_restored"] == 0
        assert body["errors"] == ["Error restoring table projects: expected a list of records, got int"]

    def test_restore_invalid_file_is_400(self, client: TestClient) -> None:
        response = client.post("/api/v1/backups/restore", files={"file": ("b.json", b"{}", "application/json")})
        assert response.status_code == 400
        assert response.json()["detail"] == "Invalid backup file format"

    def test_schedule_rejects_unknown_frequency(self, client: TestClient) -> None:
        response = client.post("/api/v1/backups/schedule", json={"frequency": "hourly"})
        assert response.status_code == 422

    def test_export_projects_as_csv(self, client: TestClient, db) -> None:
        db.seed("projects", {"id": "p1", "project_name": "Tower"})
        response = client.get("/api/v1/backups/export?data_type=projects&format=csv")
        assert response.status_code == 200
        assert response.headers["content-type"].startswith("text/csv")
        assert ".csv" in response.headers["content-disposition"]
        assert "# projects" in response.text

    def test_viewer_cannot_restore(self, client: TestClient, viewer) -> None:
        response = client.post("/api/v1/backups/restore", files={"file": ("b.json", b"{}", "application/json")})
        assert response.status_code == 403


class TestScheduledBackups:
    def test_runs_due_schedules_only(self, db, monkeypatch) -> None:
        monkeypatch.setattr(settings, "aws_access_key_id", None)
        db.seed(
            "user_settings",
            {"user_id": "due", "preferences": {"theme": "dark", "backup_schedule": {
                "enabled": True, "frequency": "weekly", "next_backup": "2024-01-01T00:00:00Z"}}},
            {"user_id": "later", "preferences": {"backup_schedule": {
                "enabled": True, "frequency": "daily", "next_backup": "2999-01-01T00:00:00+00:00"}}},
            {"user_id": "off", "preferences": {"backup_schedule": {
                "enabled": False, "frequency": "daily", "next_backup": "2024-01-01T00:00:00Z"}}},
        )

        assert run_due_backups(db) == 1

        stored = [path for bucket, path in db.storage.objects if bucket == "backups"]
        assert len(stored) == 1 and stored[0].startswith("due/backup-")

        due = next(row for row in db.tables["user_settings"] if row["user_id"] == "due")
        schedule = due["preferences"]["backup_schedule"]
        assert due["preferences"]["theme"] == "dark"
        assert schedule["next_backup"] > datetime.now(timezone.utc).isoformat()
        assert schedule["last_location"].startswith("https://storage.test/backups/due/")
