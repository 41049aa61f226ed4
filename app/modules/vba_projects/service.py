from supabase import Client
from app.config import settings
from app.modules.vba_projects.schemas import (
    VBAProjectCreate, VBAProjectUpdate, VBAProjectResponse,
    BulkDeleteResponse, BulkUpdateResponse, PopulateInspectionsResponse,
    InspectionCreate, InspectionUpdate, InspectionResponse,
    InspectionPhotoCreate, InspectionPhotoResponse
)
from app.modules.activity_logs.service import ActivityLogService
from app.core.errors import AppError, ErrorTypes, is_duplicate, is_not_found, to_app_error
from fastapi import HTTPException
from datetime import datetime, timezone
from typing import List, Optional, Dict, Any
import logging

logger = logging.getLogger(__name__)

# Inspection sequences assigned round-robin by populate_inspections
SAMPLE_INSPECTION_SEQUENCES = [
    [
        "Foundation Inspection", "Framing Inspection", "Electrical Rough-In", "Plumbing Rough-In",
        "Insulation Inspection", "Drywall Inspection", "Final Electrical", "Final Plumbing", "Final Building",
    ],
    [
        "Site Survey", "Foundation Inspection", "Framing Inspection", "Electrical Rough-In",
        "Plumbing Rough-In", "HVAC Rough-In", "Insulation Inspection", "Final Inspection",
    ],
    [
        "Demolition Inspection", "Structural Inspection", "Electrical Systems", "Plumbing Systems",
        "Fire Safety Systems", "HVAC Systems", "Final Inspection",
    ],
]

FINISHED_INSPECTION_STATUSES = ("passed", "failed")


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


def _valid_ids(ids: Optional[List[str]]) -> List[str]:
    if not ids or not isinstance(ids, list) or not all(isinstance(i, str) and i for i in ids):
        raise AppError("Invalid or empty IDs array", ErrorTypes.INVALID_INPUT)
    return ids


class VBAProjectService:
    def __init__(self, supabase: Client):
        self.supabase = supabase
        self.activity = ActivityLogService(supabase)

    def list_projects(self) -> List[VBAProjectResponse]:
        """All VBA projects, newest first"""
        try:
            result = self.supabase.table("vba_projects")\
                .select("*")\
                .order("created_at", desc=True)\
                .execute()
            return [VBAProjectResponse(**row) for row in result.data or []]
        except Exception as e:
            raise to_app_error(e, ErrorTypes.DB_QUERY)

    def get_project(self, project_id: str) -> VBAProjectResponse:
        try:
            result = self.supabase.table("vba_projects")\
                .select("*")\
                .eq("id", project_id)\
                .single()\
                .execute()
            if not result.data:
                raise AppError("Project not found", ErrorTypes.DB_NOT_FOUND)
            return VBAProjectResponse(**result.data)
        except HTTPException:
            raise
        except Exception as e:
            if is_not_found(e):
                raise AppError("Project not found", ErrorTypes.DB_NOT_FOUND)
            raise to_app_error(e, ErrorTypes.DB_QUERY)

    def create_project(self, project_data: VBAProjectCreate) -> VBAProjectResponse:
        """Create a VBA project and mirror it into projects with the same id"""
        try:
            payload = project_data.model_dump(exclude_none=True)
            payload.setdefault("organization_id", settings.default_organization_id)
            result = self.supabase.table("vba_projects").insert(payload).execute()
            if not result.data:
                raise AppError("Failed to create VBA project", ErrorTypes.DB_QUERY)
            vba_project = result.data[0]
        except HTTPException:
            raise
        except Exception as e:
            raise to_app_error(e, ErrorTypes.DB_QUERY)

        self._mirror_to_projects(vba_project)
        return VBAProjectResponse(**vba_project)

    def _mirror_to_projects(self, vba_project: Dict[str, Any]):
        status = vba_project.get("status")
        try:
            self.supabase.table("projects").insert({
                "id": vba_project["id"],
                "project_name": vba_project.get("project_name"),
                "project_number": vba_project.get("project_number"),
                "permit_number": vba_project.get("permit_number") or vba_project.get("project_number"),
                "address": vba_project.get("address"),
                "city": vba_project.get("city"),
                "state": vba_project.get("state"),
                "status": "active" if status == "scheduled" else status,
                "organization_id": vba_project.get("organization_id"),
                "created_at": vba_project.get("created_at"),
                "updated_at": vba_project.get("updated_at"),
            }).execute()
        except Exception as e:
            if not is_duplicate(e):
                logger.error(f"Main project creation failed for {vba_project['id']}: {e}")

    def update_project(self, project_id: str, project_data: VBAProjectUpdate) -> VBAProjectResponse:
        try:
            update_data = project_data.model_dump(exclude_none=True)
            update_data["updated_at"] = _now()
            result = self.supabase.table("vba_projects")\
                .update(update_data)\
                .eq("id", project_id)\
                .execute()
            if not result.data:
                raise AppError("Project not found", ErrorTypes.DB_NOT_FOUND)
            return VBAProjectResponse(**result.data[0])
        except HTTPException:
            raise
        except Exception as e:
            raise to_app_error(e, ErrorTypes.DB_QUERY)

    def delete_project(self, project_id: str) -> bool:
        """Delete a VBA project and its mirrored projects row"""
        try:
            result = self.supabase.table("vba_projects")\
                .delete()\
                .eq("id", project_id)\
                .execute()
        except Exception as e:
            raise to_app_error(e, ErrorTypes.DB_QUERY)

        try:
            self.supabase.table("projects")\
                .delete()\
                .eq("id", project_id)\
                .execute()
        except Exception as e:
            logger.error(f"Main project delete failed for {project_id}: {e}")
        return len(result.data or []) > 0

    def bulk_delete(self, ids: List[str], user_id: Optional[str] = None) -> BulkDeleteResponse:
        ids = _valid_ids(ids)
        try:
            existing = self.supabase.table("vba_projects")\
                .select("id, project_name, project_number")\
                .in_("id", ids)\
                .execute()
            self.supabase.table("vba_projects")\
                .delete()\
                .in_("id", ids)\
                .execute()
        except Exception as e:
            raise to_app_error(e, ErrorTypes.DB_QUERY)

        try:
            self.supabase.table("projects")\
                .delete()\
                .in_("id", ids)\
                .execute()
        except Exception as e:
            if not is_not_found(e):
                logger.error(f"Main projects bulk delete failed: {e}")

        self.activity.log(
            "bulk_delete_vba_projects",
            user_id=user_id,
            entity_type="vba_project",
            metadata={"deleted_projects": existing.data or [], "count": len(ids)},
        )
        return BulkDeleteResponse(success=True, deleted=len(ids))

    def bulk_update(self, ids: List[str], updates: Optional[Dict[str, Any]], user_id: Optional[str] = None) -> BulkUpdateResponse:
        ids = _valid_ids(ids)
        if not updates or not isinstance(updates, dict):
            raise AppError("Invalid updates object", ErrorTypes.INVALID_INPUT)

        final_updates = {**updates, "updated_at": _now()}
        try:
            result = self.supabase.table("vba_projects")\
                .update(final_updates)\
                .in_("id", ids)\
                .execute()
        except Exception as e:
            raise to_app_error(e, ErrorTypes.DB_QUERY)

        self.activity.log(
            "bulk_update_vba_projects",
            user_id=user_id,
            entity_type="vba_project",
            metadata={"project_ids": ids, "updates": final_updates, "count": len(ids)},
        )
        data = result.data or []
        return BulkUpdateResponse(success=True, updated=len(data), data=data)

    def populate_inspections(self) -> PopulateInspectionsResponse:
        """Assign a sample inspection sequence to every project, round-robin"""
        try:
            result = self.supabase.table("vba_projects").select("id").execute()
        except Exception as e:
            raise to_app_error(e, ErrorTypes.DB_QUERY)

        projects = result.data or []
        for index, project in enumerate(projects):
            sequence = SAMPLE_INSPECTION_SEQUENCES[index % len(SAMPLE_INSPECTION_SEQUENCES)]
            try:
                self.supabase.table("vba_projects")\
                    .update({"selected_inspections": sequence})\
                    .eq("id", project["id"])\
                    .execute()
            except Exception as e:
                logger.error(f"Update error for project {project['id']}: {e}")

        return PopulateInspectionsResponse(
            message="Successfully populated selected_inspections for all projects",
            updated_count=len(projects),
        )

    # Inspections

    def list_inspections(self, project_id: str) -> List[InspectionResponse]:
        try:
            result = self.supabase.table("inspections")\
                .select("*")\
                .eq("project_id", project_id)\
                .order("scheduled_date")\
                .execute()
            return [InspectionResponse(**row) for row in result.data or []]
        except Exception as e:
            raise to_app_error(e, ErrorTypes.DB_QUERY)

    def schedule_inspection(self, project_id: str, inspection: InspectionCreate) -> InspectionResponse:
        try:
            payload = inspection.model_dump(exclude_none=True, mode="json")
            payload.update({"project_id": project_id, "status": "scheduled", "created_at": _now()})
            result = self.supabase.table("inspections").insert(payload).execute()
            if not result.data:
                raise AppError("Failed to schedule inspection", ErrorTypes.DB_QUERY)
            return InspectionResponse(**result.data[0])
        except HTTPException:
            raise
        except Exception as e:
            raise to_app_error(e, ErrorTypes.DB_QUERY)

    def update_inspection(self, inspection_id: str, inspection: InspectionUpdate) -> InspectionResponse:
        try:
            update_data = inspection.model_dump(exclude_none=True, mode="json")
            update_data["updated_at"] = _now()
            if update_data.get("status") in FINISHED_INSPECTION_STATUSES:
                update_data["completed_at"] = update_data["updated_at"]
            result = self.supabase.table("inspections")\
                .update(update_data)\
                .eq("id", inspection_id)\
                .execute()
            if not result.data:
                raise AppError("Inspection not found", ErrorTypes.DB_NOT_FOUND)
            return InspectionResponse(**result.data[0])
        except HTTPException:
            raise
        except Exception as e:
            raise to_app_error(e, ErrorTypes.DB_QUERY)

    def list_photos(self, project_id: str, category: Optional[str] = None) -> List[InspectionPhotoResponse]:
        try:
            query = self.supabase.table("inspection_photos").select("*").eq("project_id", project_id)
            if category:
                query = query.eq("category", category)
            result = query.order("created_at", desc=True).execute()
            return [InspectionPhotoResponse(**row) for row in result.data or []]
        except Exception as e:
            raise to_app_error(e, ErrorTypes.DB_QUERY)

    def add_photo(self, project_id: str, photo: InspectionPhotoCreate) -> InspectionPhotoResponse:
        try:
            payload = photo.model_dump(exclude_none=True)
            payload.update({"project_id": project_id, "created_at": _now()})
            result = self.supabase.table("inspection_photos").insert(payload).execute()
            if not result.data:
                raise AppError("Failed to save photo", ErrorTypes.DB_QUERY)
            return InspectionPhotoResponse(**result.data[0])
        except HTTPException:
            raise
        except Exception as e:
            raise to_app_error(e, ErrorTypes.DB_QUERY)
