from supabase import Client
from app.config import settings
from app.core.encryption import FieldEncryption
from app.core.errors import AppError, ErrorTypes, is_not_found, to_app_error
from app.modules.projects.schemas import ProjectCreate, ProjectUpdate, ProjectResponse
from fastapi import HTTPException
from datetime import datetime, timezone
from typing import List, Optional


class ProjectService:
    def __init__(self, supabase: Client, encryption: Optional[FieldEncryption] = None):
        self.supabase = supabase
        self.encryption = encryption or FieldEncryption()

    def list_projects(self) -> List[ProjectResponse]:
        """All projects, newest first, with sensitive fields decrypted"""
        try:
            result = self.supabase.table("projects")\
                .select("*")\
                .order("created_at", desc=True)\
                .execute()
            return [ProjectResponse(**row) for row in self.encryption.decrypt_rows(result.data or [])]
        except Exception as e:
            raise to_app_error(e, ErrorTypes.DB_QUERY)

    def get_project(self, project_id: str) -> ProjectResponse:
        try:
            result = self.supabase.table("projects")\
                .select("*")\
                .eq("id", project_id)\
                .single()\
                .execute()
            if not result.data:
                raise AppError("Project not found", ErrorTypes.DB_NOT_FOUND)
            return ProjectResponse(**self.encryption.decrypt_fields(result.data))
        except HTTPException:
            raise
        except Exception as e:
            if is_not_found(e):
                raise AppError("Project not found", ErrorTypes.DB_NOT_FOUND)
            raise to_app_error(e, ErrorTypes.DB_QUERY)

    def create_project(self, project_data: ProjectCreate) -> ProjectResponse:
        """Create a project; budget and sensitive_notes are stored encrypted"""
        try:
            payload = project_data.model_dump(exclude_none=True)
            payload.setdefault("organization_id", settings.default_organization_id)
            result = self.supabase.table("projects")\
                .insert(self.encryption.encrypt_fields(payload))\
                .execute()
            if not result.data:
                raise AppError("Failed to create project", ErrorTypes.DB_QUERY)
            return ProjectResponse(**self.encryption.decrypt_fields(result.data[0]))
        except HTTPException:
            raise
        except Exception as e:
            raise to_app_error(e, ErrorTypes.DB_QUERY)

    def update_project(self, project_id: str, project_data: ProjectUpdate) -> ProjectResponse:
        try:
            update_data = self.encryption.encrypt_fields(project_data.model_dump(exclude_none=True))
            update_data["updated_at"] = datetime.now(timezone.utc).isoformat()
            result = self.supabase.table("projects")\
                .update(update_data)\
                .eq("id", project_id)\
                .execute()
            if not result.data:
                raise AppError("Project not found", ErrorTypes.DB_NOT_FOUND)
            return ProjectResponse(**self.encryption.decrypt_fields(result.data[0]))
        except HTTPException:
            raise
        except Exception as e:
            raise to_app_error(e, ErrorTypes.DB_QUERY)

    def delete_project(self, project_id: str) -> bool:
        try:
            result = self.supabase.table("projects")\
                .delete()\
                .eq("id", project_id)\
                .execute()
            return len(result.data or []) > 0
        except Exception as e:
            raise to_app_error(e, ErrorTypes.DB_QUERY)
