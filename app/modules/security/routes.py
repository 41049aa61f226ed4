from fastapi import APIRouter, Depends, Query
from app.database.supabase_client import get_supabase
from app.modules.security.schemas import SecurityEventListResponse, SecurityMetricsResponse
from app.modules.security.service import SecurityService
from app.core.dependencies import require_permission
from supabase import Client
from typing import Dict, Optional

router = APIRouter(prefix="/security", tags=["security"])


def get_security_service(supabase: Client = Depends(get_supabase)) -> SecurityService:
    return SecurityService(supabase)


@router.get("/events", response_model=SecurityEventListResponse)
async def list_security_events(
    limit: int = Query(50, ge=1, le=500),
    event_type: Optional[str] = Query(None),
    severity: Optional[str] = Query(None, pattern="^(low|medium|high|critical)$"),
    user_data: Dict = Depends(require_permission("security:read")),
    service: SecurityService = Depends(get_security_service)
):
    """Recent security events, newest first"""
    return {"data": service.list_events(limit, event_type, severity)}


@router.get("/metrics", response_model=SecurityMetricsResponse)
async def get_security_metrics(
    hours: int = Query(24, ge=1, le=720),
    user_data: Dict = Depends(require_permission("security:read")),
    service: SecurityService = Depends(get_security_service)
):
    """Event counts by severity and type over the last `hours`"""
    return service.get_metrics(hours)
