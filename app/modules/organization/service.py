from supabase import Client
from app.core.errors import AppError, ErrorTypes, to_app_error
from app.modules.organization.schemas import OrganizationUpdate
from fastapi import HTTPException
from datetime import datetime, timezone
from typing import Dict, Any, Optional


class OrganizationService:
    def __init__(self, supabase: Client):
        self.supabase = supabase

    def _existing(self) -> Optional[Dict[str, Any]]:
        result = self.supabase.table("organizations")\
            .select("*")\
            .limit(1)\
            .execute()
        return result.data[0] if result.data else None

    def get_organization(self) -> Dict[str, Any]:
        """The organization row, or {} when none has been saved yet"""
        try:
            return self._existing() or {}
        except Exception as e:
            raise to_app_error(e, ErrorTypes.DB_QUERY)

    def save_organization(self, org_data: OrganizationUpdate) -> Dict[str, Any]:
        """Update the organization if it exists, otherwise create it"""
        try:
            payload = org_data.model_dump(exclude_unset=True)
            existing = self._existing()
            if existing:
                payload["updated_at"] = datetime.now(timezone.utc).isoformat()
                result = self.supabase.table("organizations")\
                    .update(payload)\
                    .eq("id", existing["id"])\
                    .execute()
            else:
                result = self.supabase.table("organizations").insert(payload).execute()
            if not result.data:
                raise AppError("Failed to save organization", ErrorTypes.DB_QUERY)
            return result.data[0]
        except HTTPException:
            raise
        except Exception as e:
            raise to_app_error(e, ErrorTypes.DB_QUERY)
