from supabase import Client
from app.modules.reports.schemas import (
    InspectionReportCreate, InspectionReportUpdate, InspectionReportResponse,
    ProjectInformationUpdate, ProjectInformationResponse
)
from app.modules.reports.generator import (
    REPORT_CONFIGS, generate_report, generate_report_filename, validate_report_data
)
from app.modules.reports.generator.config import normalize_report_data
from app.modules.activity_logs.service import ActivityLogService
from app.core.errors import AppError, ErrorTypes, to_app_error
from fastapi import HTTPException
from datetime import datetime, timezone, date
from typing import List, Dict, Any, Optional, Tuple
import logging

logger = logging.getLogger(__name__)


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


class ReportService:
    def __init__(self, supabase: Client):
        self.supabase = supabase
        self.activity = ActivityLogService(supabase)

    def list_reports(self, project_id: str) -> List[InspectionReportResponse]:
        """Reports for a project, newest first"""
        try:
            result = self.supabase.table("inspection_reports")\
                .select("*")\
                .eq("project_id", project_id)\
                .order("created_at", desc=True)\
                .execute()
            return [InspectionReportResponse(**row) for row in result.data or []]
        except Exception as e:
            raise to_app_error(e, ErrorTypes.DB_QUERY)

    def create_report(self, project_id: str, report_data: InspectionReportCreate, user_id: str) -> InspectionReportResponse:
        """Create a draft report record"""
        try:
            now = _now()
            payload = report_data.model_dump(exclude_none=True)
            payload.update({
                "project_id": project_id,
                "status": "draft",
                "generated_by": report_data.generated_by or user_id,
                "created_at": now,
                "updated_at": now,
            })
            result = self.supabase.table("inspection_reports").insert(payload).execute()
            if not result.data:
                raise AppError("Failed to create report", ErrorTypes.DB_QUERY)
            report = result.data[0]

            self.activity.log(
                "created_report",
                user_id=user_id,
                entity_type="inspection_report",
                entity_id=report.get("id"),
                metadata={
                    "project_id": project_id,
                    "report_type": report.get("report_type"),
                    "report_title": report.get("report_title"),
                },
            )
            return InspectionReportResponse(**report)
        except HTTPException:
            raise
        except Exception as e:
            raise to_app_error(e, ErrorTypes.DB_QUERY)

    def update_report(self, report_id: str, report_data: InspectionReportUpdate) -> InspectionReportResponse:
        try:
            update_data = report_data.model_dump(exclude_none=True)
            update_data["updated_at"] = _now()
            result = self.supabase.table("inspection_reports")\
                .update(update_data)\
                .eq("id", report_id)\
                .execute()
            if not result.data:
                raise AppError("Report not found", ErrorTypes.DB_NOT_FOUND)
            return InspectionReportResponse(**result.data[0])
        except HTTPException:
            raise
        except Exception as e:
            raise to_app_error(e, ErrorTypes.DB_QUERY)

    def delete_report(self, report_id: str) -> bool:
        try:
            result = self.supabase.table("inspection_reports")\
                .delete()\
                .eq("id", report_id)\
                .execute()
            return len(result.data or []) > 0
        except Exception as e:
            raise to_app_error(e, ErrorTypes.DB_QUERY)

    def get_project_information(self, project_id: str) -> ProjectInformationResponse:
        try:
            result = self.supabase.table("project_information")\
                .select("*")\
                .eq("project_id", project_id)\
                .limit(1)\
                .execute()
            if not result.data:
                raise AppError("Project information not found", ErrorTypes.DB_NOT_FOUND)
            return ProjectInformationResponse(**result.data[0])
        except HTTPException:
            raise
        except Exception as e:
            raise to_app_error(e, ErrorTypes.DB_QUERY)

    def upsert_project_information(
        self, project_id: str, info: ProjectInformationUpdate, user_id: Optional[str] = None
    ) -> ProjectInformationResponse:
        try:
            payload = info.model_dump(exclude_none=True)
            payload.update({"project_id": project_id, "updated_at": _now()})
            result = self.supabase.table("project_information")\
                .upsert(payload, on_conflict="project_id")\
                .execute()
            if not result.data:
                raise AppError("Failed to save project information", ErrorTypes.DB_QUERY)
            row = result.data[0]

            self.activity.log(
                "updated_project_information",
                user_id=user_id,
                entity_type="project_information",
                entity_id=row.get("id"),
                metadata={"project_id": project_id},
            )
            return ProjectInformationResponse(**row)
        except HTTPException:
            raise
        except Exception as e:
            raise to_app_error(e, ErrorTypes.DB_QUERY)

    def render_report(
        self,
        report_type: str,
        payload: Dict[str, Any],
        user_id: Optional[str] = None,
        project_id: Optional[str] = None,
        report_date: Optional[date] = None,
    ) -> Tuple[bytes, str]:
        """Validate the form payload and render it. Returns (pdf bytes, file name without extension)."""
        if report_type not in REPORT_CONFIGS:
            raise AppError(f"Unknown report type: {report_type}", ErrorTypes.INVALID_INPUT)

        data = normalize_report_data(payload)
        errors = validate_report_data(report_type, data)
        if errors:
            raise AppError("Report validation failed", ErrorTypes.VALIDATION_FAILED, 422, details=errors)

        report_date = report_date or date.today()
        try:
            pdf_bytes = generate_report(report_type, data, report_date)
        except Exception as e:
            logger.error(f"Failed to generate {report_type} report: {e}")
            raise AppError("Failed to generate report. Please try again.", ErrorTypes.API_REQUEST_FAILED, 500)

        filename = generate_report_filename(report_type, data["report_sequence"], report_date)
        self.activity.log(
            "generated_report",
            user_id=user_id,
            entity_type="inspection_report",
            metadata={"project_id": project_id, "report_type": report_type, "filename": filename},
        )
        return pdf_bytes, filename
