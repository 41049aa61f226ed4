from fastapi import APIRouter, Depends, Query
from app.database.supabase_client import get_supabase
from app.modules.activity_logs.schemas import ActivityLogCreate, ActivityLogResponse, ActivityLogListResponse
from app.modules.activity_logs.service import ActivityLogService
from app.core.dependencies import require_permission
from supabase import Client
from typing import Dict

router = APIRouter(prefix="/activity-logs", tags=["activity-logs"])


def get_activity_log_service(supabase: Client = Depends(get_supabase)) -> ActivityLogService:
    return ActivityLogService(supabase)


@router.get("", response_model=ActivityLogListResponse)
async def list_activity_logs(
    limit: int = Query(50, ge=1, le=500),
    user_data: Dict = Depends(require_permission("activity_logs:read")),
    service: ActivityLogService = Depends(get_activity_log_service)
):
    """Recent activity, newest first"""
    return {"data": service.list_logs(limit)}


@router.post("", response_model=ActivityLogResponse, status_code=201)
async def create_activity_log(
    log_data: ActivityLogCreate,
    user_data: Dict = Depends(require_permission("activity_logs:create")),
    service: ActivityLogService = Depends(get_activity_log_service)
):
    """Record an activity for the current user"""
    return service.create_log(log_data, user_data["id"])
