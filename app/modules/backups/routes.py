from fastapi import APIRouter, Depends, UploadFile, File, Form, Response
from app.database.supabase_client import get_supabase
from app.modules.backups.schemas import BackupScheduleRequest, BackupScheduleResponse, RestoreResponse
from app.modules.backups.service import BackupSystem, backup_to_bytes
from app.core.dependencies import require_permission
from supabase import Client
from datetime import datetime, timezone
from typing import Dict, Optional

router = APIRouter(prefix="/backups", tags=["backups"])


def get_backup_system(supabase: Client = Depends(get_supabase)) -> BackupSystem:
    return BackupSystem(supabase)


def _download(content: bytes, media_type: str, filename: str) -> Response:
    return Response(
        content=content,
        media_type=media_type,
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


@router.post("")
async def create_backup(
    user_data: Dict = Depends(require_permission("backups:create")),
    backups: BackupSystem = Depends(get_backup_system)
):
    """Download a full JSON backup"""
    backup = backups.create_backup(user_data["id"])
    filename = f"ipc-backup-{datetime.now(timezone.utc):%Y-%m-%d}.json"
    return _download(backup_to_bytes(backup), "application/json", filename)


@router.post("/restore", response_model=RestoreResponse)
async def restore_backup(
    file: UploadFile = File(...),
    clear_existing: bool = Form(False),
    tables: Optional[str] = Form(None),
    validate_checksum: bool = Form(True),
    user_data: Dict = Depends(require_permission("backups:restore")),
    backups: BackupSystem = Depends(get_backup_system)
):
    """
    Restore from a backup file.
    tables is an optional comma separated subset of the tables in the backup.
    """
    raw = await file.read()
    table_list = [t.strip() for t in tables.split(",") if t.strip()] if tables else None
    return backups.restore_backup(
        raw,
        user_data["id"],
        clear_existing=clear_existing,
        tables=table_list,
        validate_checksum=validate_checksum,
    )


@router.post("/incremental")
async def create_incremental_backup(
    since: str,
    user_data: Dict = Depends(require_permission("backups:create")),
    backups: BackupSystem = Depends(get_backup_system)
):
    backup = backups.create_incremental_backup(user_data["id"], since)
    filename = f"ipc-incremental-{datetime.now(timezone.utc):%Y-%m-%d}.json"
    return _download(backup_to_bytes(backup), "application/json", filename)


@router.post("/schedule", response_model=BackupScheduleResponse)
async def schedule_backup(
    schedule: BackupScheduleRequest,
    user_data: Dict = Depends(require_permission("backups:schedule")),
    backups: BackupSystem = Depends(get_backup_system)
):
    return backups.schedule_backup(user_data["id"], schedule.frequency)


@router.get("/export")
async def export_data(
    data_type: str = "all",
    format: str = "json",
    user_data: Dict = Depends(require_permission("backups:read")),
    backups: BackupSystem = Depends(get_backup_system)
):
    """Export projects, reports, inspections or everything as json, csv or excel"""
    content, media_type, filename = backups.export_data(data_type, format, user_data["id"])
    return _download(content, media_type, filename)
