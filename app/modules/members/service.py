from supabase import Client
from app.core.errors import AppError, ErrorTypes, to_app_error
from app.modules.members.schemas import MemberCreate, MemberResponse
from fastapi import HTTPException
from typing import List
import logging

logger = logging.getLogger(__name__)


class MemberService:
    def __init__(self, supabase: Client):
        self.supabase = supabase

    def list_members(self) -> List[MemberResponse]:
        """Newest first. The directory is informational, so a failed query yields an empty list."""
        try:
            result = self.supabase.table("members")\
                .select("*")\
                .order("created_at", desc=True)\
                .execute()
            return [MemberResponse(**row) for row in result.data or []]
        except Exception as e:
            logger.error(f"Members fetch error: {e}")
            return []

    def create_member(self, member_data: MemberCreate) -> MemberResponse:
        try:
            result = self.supabase.table("members")\
                .insert(member_data.model_dump(exclude_none=True))\
                .execute()
            if not result.data:
                raise AppError("Failed to create member", ErrorTypes.DB_QUERY)
            return MemberResponse(**result.data[0])
        except HTTPException:
            raise
        except Exception as e:
            raise to_app_error(e, ErrorTypes.DB_QUERY)

    def delete_member(self, member_id: str) -> bool:
        try:
            result = self.supabase.table("members")\
                .delete()\
                .eq("id", member_id)\
                .execute()
            return len(result.data or []) > 0
        except Exception as e:
            raise to_app_error(e, ErrorTypes.DB_QUERY)
