from fastapi import APIRouter, Body, Depends
from fastapi.responses import Response
from app.database.supabase_client import get_supabase
from app.modules.reports.schemas import (
    InspectionReportCreate, InspectionReportUpdate, InspectionReportResponse,
    ProjectInformationUpdate, ProjectInformationResponse
)
from app.modules.reports.service import ReportService
from app.core.dependencies import require_permission
from supabase import Client
from typing import List, Dict, Any, Optional

router = APIRouter(tags=["reports"])


def get_report_service(supabase: Client = Depends(get_supabase)) -> ReportService:
    return ReportService(supabase)


@router.post("/reports/generate/{report_type}")
async def generate_report(
    report_type: str,
    payload: Dict[str, Any] = Body(...),
    project_id: Optional[str] = None,
    user_data: Dict = Depends(require_permission("inspection_reports:generate")),
    service: ReportService = Depends(get_report_service)
):
    """Render a report PDF from form data (camelCase or snake_case keys). 422 lists missing fields."""
    pdf_bytes, filename = service.render_report(report_type, payload, user_data["id"], project_id)
    return Response(
        content=pdf_bytes,
        media_type="application/pdf",
        headers={"Content-Disposition": f'attachment; filename="{filename}.pdf"'},
    )


@router.put("/reports/item/{report_id}", response_model=InspectionReportResponse)
async def update_report(
    report_id: str,
    report_data: InspectionReportUpdate,
    user_data: Dict = Depends(require_permission("inspection_reports:update")),
    service: ReportService = Depends(get_report_service)
):
    return service.update_report(report_id, report_data)


@router.delete("/reports/item/{report_id}", status_code=204)
async def delete_report(
    report_id: str,
    user_data: Dict = Depends(require_permission("inspection_reports:delete")),
    service: ReportService = Depends(get_report_service)
):
    service.delete_report(report_id)
    return None


@router.get("/reports/{project_id}", response_model=List[InspectionReportResponse])
async def list_reports(
    project_id: str,
    user_data: Dict = Depends(require_permission("inspection_reports:read")),
    service: ReportService = Depends(get_report_service)
):
    """All reports for a project"""
    return service.list_reports(project_id)


@router.post("/reports/{project_id}", response_model=InspectionReportResponse, status_code=201)
async def create_report(
    project_id: str,
    report_data: InspectionReportCreate,
    user_data: Dict = Depends(require_permission("inspection_reports:create")),
    service: ReportService = Depends(get_report_service)
):
    """Create a draft report for a project"""
    return service.create_report(project_id, report_data, user_data["id"])


@router.get("/project-information/{project_id}", response_model=ProjectInformationResponse)
async def get_project_information(
    project_id: str,
    user_data: Dict = Depends(require_permission("vba_projects:read")),
    service: ReportService = Depends(get_report_service)
):
    return service.get_project_information(project_id)


@router.put("/project-information/{project_id}", response_model=ProjectInformationResponse)
async def update_project_information(
    project_id: str,
    info: ProjectInformationUpdate,
    user_data: Dict = Depends(require_permission("vba_projects:update")),
    service: ReportService = Depends(get_report_service)
):
    """Create or update the project information sheet"""
    return service.upsert_project_information(project_id, info, user_data["id"])
