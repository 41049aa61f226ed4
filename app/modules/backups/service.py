"""
Database backup, restore and export.

Backups are plain JSON documents (see models.py). Restores upsert rows back by id
in batches; nothing is transactional, so a partial restore reports the failed
batches in ``errors`` instead of rolling back.
"""

from supabase import Client
from fastapi import HTTPException
from app.config import settings
from app.core.errors import AppError, ErrorTypes, log_error
from app.modules.activity_logs.service import ActivityLogService
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, List, Optional, Tuple, Union
import calendar
import csv
import hashlib
import io
import json
import logging

import xlsxwriter

logger = logging.getLogger(__name__)

BACKUP_VERSION = "2.0"

BACKUP_TABLES = [
    "profiles",
    "projects",
    "vba_projects",
    "field_reports",
    "field_report_work_completed",
    "field_report_issues",
    "field_report_safety_observations",
    "field_report_personnel",
    "field_report_photos",
    "documents",
    "inspections",
    "inspection_photos",
    "notification_emails",
    "activity_logs",
    "user_settings",
    "contacts",
    "inspection_schedules",
    "news_articles",
    "collaboration_messages",
    "permit_portal_credentials",
]

# tables with an updated_at column, filtered by incremental backups
INCREMENTAL_TABLES = {
    "profiles", "projects", "vba_projects", "field_reports",
    "documents", "inspections", "user_settings",
}

EXPORT_TABLES = {
    "projects": ["projects", "vba_projects"],
    "reports": ["field_reports"],
    "inspections": ["inspections"],
}

EXPORT_FORMATS = {
    "json": ("application/json", "json"),
    "csv": ("text/csv", "csv"),
    "excel": ("application/vnd.openxmlformats-officedocument.spreadsheetml.sheet", "xlsx"),
}

NIL_UUID = "00000000-0000-0000-0000-000000000000"


def _now() -> datetime:
    return datetime.now(timezone.utc)


def calculate_checksum(data: Dict[str, List[Dict[str, Any]]]) -> str:
    """SHA-256 hex of the compact JSON encoding of the backup data, keys sorted."""
    payload = json.dumps(data, separators=(",", ":"), sort_keys=True, default=str)
    return hashlib.sha256(payload.encode("utf-8")).hexdigest()


def add_months(value: datetime, months: int) -> datetime:
    month_index = value.month - 1 + months
    year = value.year + month_index // 12
    month = month_index % 12 + 1
    day = min(value.day, calendar.monthrange(year, month)[1])
    return value.replace(year=year, month=month, day=day)


def next_backup_date(frequency: str, start: Optional[datetime] = None) -> datetime:
    start = start or _now()
    if frequency == "daily":
        return start + timedelta(days=1)
    if frequency == "weekly":
        return start + timedelta(days=7)
    if frequency == "monthly":
        return add_months(start, 1)
    raise ValueError(f"Unknown backup frequency: {frequency}")


def backup_to_bytes(backup: Dict[str, Any]) -> bytes:
    return json.dumps(backup, indent=2, default=str).encode("utf-8")


def _cell(value: Any) -> Any:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (dict, list)):
        return json.dumps(value, default=str)
    return value


def convert_to_csv(tables: Dict[str, List[Dict[str, Any]]]) -> bytes:
    """One '# table' section per non-empty table; header row from the first record."""
    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\n")
    for table_name, records in tables.items():
        if not records:
            continue
        buffer.write(f"\n# {table_name}\n")
        headers = list(records[0].keys())
        writer.writerow(headers)
        for record in records:
            writer.writerow([_cell(record.get(h)) for h in headers])
    return buffer.getvalue().encode("utf-8")


def convert_to_excel(tables: Dict[str, List[Dict[str, Any]]]) -> bytes:
    """One worksheet per non-empty table."""
    output = io.BytesIO()
    workbook = xlsxwriter.Workbook(output, {"in_memory": True})
    header_format = workbook.add_format({"bold": True})
    for table_name, records in tables.items():
        if not records:
            continue
        worksheet = workbook.add_worksheet(table_name[:31])
        headers = list(records[0].keys())
        for col, header in enumerate(headers):
            worksheet.write(0, col, header, header_format)
        for row, record in enumerate(records, start=1):
            for col, header in enumerate(headers):
                worksheet.write(row, col, _cell(record.get(header)))
    workbook.close()
    return output.getvalue()


class BackupSystem:
    def __init__(self, supabase: Client):
        self.supabase = supabase
        self.activity = ActivityLogService(supabase)

    def _fetch_table(self, table: str, since: Optional[str] = None) -> List[Dict[str, Any]]:
        query = self.supabase.table(table).select("*")
        if since and table in INCREMENTAL_TABLES:
            query = query.gte("updated_at", since)
        result = query.execute()
        return result.data or []

    def _build_backup(self, user_id: str, since: Optional[str] = None) -> Dict[str, Any]:
        data: Dict[str, List[Dict[str, Any]]] = {}
        record_counts: Dict[str, int] = {}
        for table in BACKUP_TABLES:
            try:
                data[table] = self._fetch_table(table, since)
            except Exception as e:
                logger.warning(f"Failed to back up table {table}: {e}")
                data[table] = []
            record_counts[table] = len(data[table])

        metadata = {
            "version": BACKUP_VERSION,
            "timestamp": _now().isoformat(),
            "created_by": user_id,
            "tables": list(BACKUP_TABLES),
            "record_counts": record_counts,
            "checksum": calculate_checksum(data),
        }
        if since:
            metadata["since"] = since
        return {"metadata": metadata, "data": data}

    def create_backup(self, user_id: str) -> Dict[str, Any]:
        """Full backup of every table in BACKUP_TABLES. Unreadable tables are stored empty."""
        try:
            backup = self._build_backup(user_id)
        except Exception as e:
            log_error(e, {"action": "create_backup", "user_id": user_id})
            raise AppError("Failed to create backup. Please try again.", ErrorTypes.DB_QUERY, 500, details=str(e))

        counts = backup["metadata"]["record_counts"]
        self.activity.log(
            "backup_created",
            user_id=user_id,
            entity_type="backup",
            metadata={"tables": len(BACKUP_TABLES), "total_records": sum(counts.values())},
        )
        return backup

    def create_incremental_backup(self, user_id: str, since: str) -> Dict[str, Any]:
        """Backup holding only rows updated at or after `since` on tables that track updated_at"""
        try:
            return self._build_backup(user_id, since=since)
        except Exception as e:
            log_error(e, {"action": "create_incremental_backup", "user_id": user_id})
            raise AppError("Failed to create incremental backup", ErrorTypes.DB_QUERY, 500, details=str(e))

    def restore_backup(
        self,
        raw: Union[bytes, str],
        user_id: str,
        clear_existing: bool = False,
        tables: Optional[List[str]] = None,
        validate_checksum: bool = True,
    ) -> Dict[str, Any]:
        try:
            backup = json.loads(raw)
        except (ValueError, TypeError):
            raise AppError("Invalid backup file format", ErrorTypes.FILE_TYPE_INVALID)
        if not isinstance(backup, dict) or not isinstance(backup.get("metadata"), dict) \
                or not isinstance(backup.get("data"), dict):
            raise AppError("Invalid backup file format", ErrorTypes.FILE_TYPE_INVALID)

        metadata, data = backup["metadata"], backup["data"]
        if validate_checksum and metadata.get("checksum"):
            if calculate_checksum(data) != metadata["checksum"]:
                raise AppError("Backup file integrity check failed", ErrorTypes.VALIDATION_FAILED)

        errors: List[str] = []
        tables_restored: List[str] = []
        records_restored = 0
        batch_size = max(1, settings.backup_batch_size)

        for table in tables or metadata.get("tables") or list(data.keys()):
            if table not in data:
                errors.append(f"Table {table} not found in backup")
                continue
            records = data[table] or []
            if not isinstance(records, list):
                errors.append(f"Error restoring table {table}: expected a list of records, got {type(records).__name__}")
                continue

            if clear_existing:
                try:
                    self.supabase.table(table).delete().neq("id", NIL_UUID).execute()
                except Exception as e:
                    errors.append(f"Failed to clear table {table}: {e}")

            for start in range(0, len(records), batch_size):
                batch = records[start:start + batch_size]
                try:
                    self.supabase.table(table)\
                        .upsert(batch, on_conflict="id", ignore_duplicates=False)\
                        .execute()
                    records_restored += len(batch)
                except Exception as e:
                    errors.append(f"Failed to restore batch for {table}: {e}")
            tables_restored.append(table)

        logger.info(f"Restore by {user_id}: {records_restored} records into {len(tables_restored)} tables, {len(errors)} errors")
        self.activity.log(
            "backup_restored",
            user_id=user_id,
            entity_type="backup",
            metadata={
                "tables_restored": len(tables_restored),
                "records_restored": records_restored,
                "errors": len(errors),
                "backup_date": metadata.get("timestamp"),
            },
        )
        return {
            "success": not errors,
            "tables_restored": tables_restored,
            "records_restored": records_restored,
            "errors": errors,
        }

    def _load_preferences(self, user_id: str) -> Dict[str, Any]:
        result = self.supabase.table("user_settings")\
            .select("preferences")\
            .eq("user_id", user_id)\
            .limit(1)\
            .execute()
        if result.data:
            return result.data[0].get("preferences") or {}
        return {}

    def schedule_backup(self, user_id: str, frequency: str) -> Dict[str, Any]:
        """Enable automatic backups for the user; other preferences are kept"""
        try:
            now = _now()
            schedule = {
                "enabled": True,
                "frequency": frequency,
                "last_backup": now.isoformat(),
                "next_backup": next_backup_date(frequency, now).isoformat(),
            }
            preferences = self._load_preferences(user_id)
            preferences["backup_schedule"] = schedule
            self.supabase.table("user_settings")\
                .upsert({
                    "user_id": user_id,
                    "preferences": preferences,
                    "updated_at": now.isoformat(),
                }, on_conflict="user_id")\
                .execute()
            return schedule
        except ValueError as e:
            raise AppError(str(e), ErrorTypes.INVALID_INPUT)
        except HTTPException:
            raise
        except Exception as e:
            raise AppError("Failed to schedule backup", ErrorTypes.DB_QUERY, 500, details=str(e))

    def export_data(self, data_type: str, fmt: str, user_id: str) -> Tuple[bytes, str, str]:
        """Returns (content, media type, file name)"""
        if fmt not in EXPORT_FORMATS:
            raise AppError(f"Unsupported export format: {fmt}", ErrorTypes.INVALID_INPUT)
        if data_type != "all" and data_type not in EXPORT_TABLES:
            raise AppError(f"Unsupported export type: {data_type}", ErrorTypes.INVALID_INPUT)

        media_type, extension = EXPORT_FORMATS[fmt]
        filename = f"ipc-{data_type}-{_now():%Y-%m-%d}.{extension}"

        if data_type == "all":
            backup = self.create_backup(user_id)
            if fmt == "json":
                return backup_to_bytes(backup), media_type, filename
            tables = backup["data"]
        else:
            try:
                tables = {table: self._fetch_table(table) for table in EXPORT_TABLES[data_type]}
            except Exception as e:
                log_error(e, {"action": "export_data", "data_type": data_type, "format": fmt, "user_id": user_id})
                raise AppError("Failed to export data", ErrorTypes.DB_QUERY, 500, details=str(e))

        if fmt == "csv":
            content = convert_to_csv(tables)
        elif fmt == "excel":
            content = convert_to_excel(tables)
        else:
            content = json.dumps(tables, indent=2, default=str).encode("utf-8")
        return content, media_type, filename
