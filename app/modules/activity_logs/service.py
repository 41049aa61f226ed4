from supabase import Client
from app.modules.activity_logs.schemas import ActivityLogCreate, ActivityLogResponse
from app.core.errors import AppError, ErrorTypes, to_app_error
from fastapi import HTTPException
from datetime import datetime, timezone
from typing import List, Optional, Dict, Any
import logging

logger = logging.getLogger(__name__)


class ActivityLogService:
    def __init__(self, supabase: Client):
        self.supabase = supabase

    def log(
        self,
        action: str,
        user_id: Optional[str] = None,
        entity_type: Optional[str] = None,
        entity_id: Optional[str] = None,
        metadata: Optional[Dict[str, Any]] = None,
    ) -> Optional[Dict[str, Any]]:
        """Record an activity. Failures are logged and never propagate to the caller."""
        try:
            result = self.supabase.table("activity_logs").insert({
                "action": action,
                "user_id": user_id or "system",
                "entity_type": entity_type,
                "entity_id": entity_id,
                "metadata": metadata or {},
                "created_at": datetime.now(timezone.utc).isoformat(),
            }).execute()
            return result.data[0] if result.data else None
        except Exception as e:
            logger.warning(f"Activity log '{action}' failed: {e}")
            return None

    def list_logs(self, limit: int = 50) -> List[ActivityLogResponse]:
        """Most recent activity first"""
        try:
            result = self.supabase.table("activity_logs")\
                .select("*")\
                .order("created_at", desc=True)\
                .limit(limit)\
                .execute()
            return [ActivityLogResponse(**row) for row in result.data or []]
        except Exception as e:
            raise to_app_error(e, ErrorTypes.DB_QUERY)

    def create_log(self, log_data: ActivityLogCreate, user_id: Optional[str] = None) -> ActivityLogResponse:
        try:
            created_at = log_data.created_at or datetime.now(timezone.utc)
            result = self.supabase.table("activity_logs").insert({
                "action": log_data.action,
                "user_id": user_id or "system",
                "entity_type": log_data.entity_type,
                "entity_id": log_data.entity_id,
                "metadata": log_data.metadata or {},
                "created_at": created_at.isoformat(),
            }).execute()
            if not result.data:
                raise AppError("Failed to create activity log", ErrorTypes.DB_QUERY)
            return ActivityLogResponse(**result.data[0])
        except HTTPException:
            raise
        except Exception as e:
            raise to_app_error(e, ErrorTypes.DB_QUERY)
