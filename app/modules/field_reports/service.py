from supabase import Client
from app.config import settings
from app.core.errors import AppError, ErrorTypes, is_not_found, to_app_error
from app.modules.field_reports.schemas import FieldReportCreate, FieldReportUpdate, FieldReportResponse
from fastapi import HTTPException
from datetime import datetime, timezone
from typing import List, Optional
import logging

logger = logging.getLogger(__name__)

# response key -> child table
CHILD_TABLES = {
    "work_completed": "field_report_work_completed",
    "issues": "field_report_issues",
    "safety_observations": "field_report_safety_observations",
    "personnel": "field_report_personnel",
    "photos": "field_report_photos",
}


class FieldReportService:
    def __init__(self, supabase: Client):
        self.supabase = supabase

    def list_reports(self, project_id: Optional[str] = None) -> List[FieldReportResponse]:
        try:
            query = self.supabase.table("field_reports").select("*")
            if project_id:
                query = query.eq("project_id", project_id)
            result = query.order("created_at", desc=True).execute()
            return [FieldReportResponse(**row) for row in result.data or []]
        except Exception as e:
            raise to_app_error(e, ErrorTypes.DB_QUERY)

    def get_report(self, report_id: str, include_children: bool = False) -> FieldReportResponse:
        try:
            result = self.supabase.table("field_reports")\
                .select("*")\
                .eq("id", report_id)\
                .single()\
                .execute()
            if not result.data:
                raise AppError("Field report not found", ErrorTypes.DB_NOT_FOUND)
            report = dict(result.data)
        except HTTPException:
            raise
        except Exception as e:
            if is_not_found(e):
                raise AppError("Field report not found", ErrorTypes.DB_NOT_FOUND)
            raise to_app_error(e, ErrorTypes.DB_QUERY)

        if include_children:
            for key, table in CHILD_TABLES.items():
                try:
                    children = self.supabase.table(table)\
                        .select("*")\
                        .eq("field_report_id", report_id)\
                        .execute()
                    report[key] = children.data or []
                except Exception as e:
                    logger.warning(f"Could not load {table} for field report {report_id}: {e}")
                    report[key] = []
        return FieldReportResponse(**report)

    def create_report(self, report_data: FieldReportCreate, user_id: Optional[str] = None) -> FieldReportResponse:
        try:
            payload = report_data.model_dump(exclude_none=True)
            payload.setdefault("organization_id", settings.default_organization_id)
            if user_id:
                payload.setdefault("created_by", user_id)
            result = self.supabase.table("field_reports").insert(payload).execute()
            if not result.data:
                raise AppError("Failed to create field report", ErrorTypes.DB_QUERY)
            return FieldReportResponse(**result.data[0])
        except HTTPException:
            raise
        except Exception as e:
            raise to_app_error(e, ErrorTypes.DB_QUERY)

    def update_report(self, report_id: str, report_data: FieldReportUpdate) -> FieldReportResponse:
        try:
            update_data = report_data.model_dump(exclude_none=True)
            update_data["updated_at"] = datetime.now(timezone.utc).isoformat()
            result = self.supabase.table("field_reports")\
                .update(update_data)\
                .eq("id", report_id)\
                .execute()
            if not result.data:
                raise AppError("Field report not found", ErrorTypes.DB_NOT_FOUND)
            return FieldReportResponse(**result.data[0])
        except HTTPException:
            raise
        except Exception as e:
            raise to_app_error(e, ErrorTypes.DB_QUERY)

    def delete_report(self, report_id: str) -> bool:
        try:
            result = self.supabase.table("field_reports")\
                .delete()\
                .eq("id", report_id)\
                .execute()
            return len(result.data or []) > 0
        except Exception as e:
            raise to_app_error(e, ErrorTypes.DB_QUERY)
