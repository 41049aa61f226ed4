from fastapi import APIRouter, Depends
from app.database.supabase_client import get_supabase
from app.modules.field_reports.schemas import FieldReportCreate, FieldReportUpdate, FieldReportResponse
from app.modules.field_reports.service import FieldReportService
from app.core.dependencies import require_permission
from supabase import Client
from typing import List, Optional, Dict

router = APIRouter(prefix="/field-reports", tags=["field-reports"])


def get_field_report_service(supabase: Client = Depends(get_supabase)) -> FieldReportService:
    return FieldReportService(supabase)


@router.get("", response_model=List[FieldReportResponse])
async def list_field_reports(
    project_id: Optional[str] = None,
    user_data: Dict = Depends(require_permission("field_reports:read")),
    service: FieldReportService = Depends(get_field_report_service)
):
    return service.list_reports(project_id)


@router.post("", response_model=FieldReportResponse, status_code=201)
async def create_field_report(
    report_data: FieldReportCreate,
    user_data: Dict = Depends(require_permission("field_reports:create")),
    service: FieldReportService = Depends(get_field_report_service)
):
    return service.create_report(report_data, user_data["id"])


@router.get("/{report_id}", response_model=FieldReportResponse)
async def get_field_report(
    report_id: str,
    include_children: bool = False,
    user_data: Dict = Depends(require_permission("field_reports:read")),
    service: FieldReportService = Depends(get_field_report_service)
):
    """Get a field report; include_children=true adds work, issues, safety, personnel and photos"""
    return service.get_report(report_id, include_children)


@router.put("/{report_id}", response_model=FieldReportResponse)
async def update_field_report(
    report_id: str,
    report_data: FieldReportUpdate,
    user_data: Dict = Depends(require_permission("field_reports:update")),
    service: FieldReportService = Depends(get_field_report_service)
):
    return service.update_report(report_id, report_data)


@router.delete("/{report_id}", status_code=204)
async def delete_field_report(
    report_id: str,
    user_data: Dict = Depends(require_permission("field_reports:delete")),
    service: FieldReportService = Depends(get_field_report_service)
):
    service.delete_report(report_id)
    return None
