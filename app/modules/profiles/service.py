from supabase import Client
from app.core.errors import AppError, ErrorTypes, is_not_found, to_app_error
from app.modules.profiles.schemas import ProfileUpdate, ProfileResponse, UserSettingsResponse
from fastapi import HTTPException
from datetime import datetime, timezone
from typing import List, Dict, Any


class ProfileService:
    def __init__(self, supabase: Client):
        self.supabase = supabase

    def list_profiles(self, limit: int = 50, offset: int = 0) -> List[ProfileResponse]:
        try:
            result = self.supabase.table("profiles")\
                .select("*")\
                .order("created_at", desc=True)\
                .limit(limit)\
                .offset(offset)\
                .execute()
            return [ProfileResponse(**row) for row in result.data or []]
        except Exception as e:
            raise to_app_error(e, ErrorTypes.DB_QUERY)

    def get_profile(self, profile_id: str) -> ProfileResponse:
        try:
            result = self.supabase.table("profiles")\
                .select("*")\
                .eq("id", profile_id)\
                .single()\
                .execute()
            if not result.data:
                raise AppError("Profile not found", ErrorTypes.DB_NOT_FOUND)
            return ProfileResponse(**result.data)
        except HTTPException:
            raise
        except Exception as e:
            if is_not_found(e):
                raise AppError("Profile not found", ErrorTypes.DB_NOT_FOUND)
            raise to_app_error(e, ErrorTypes.DB_QUERY)

    def update_profile(self, profile_id: str, profile_data: ProfileUpdate) -> ProfileResponse:
        """Update editable profile fields; role changes go through POST /auth/role"""
        try:
            update_data = profile_data.model_dump(exclude_none=True)
            update_data["updated_at"] = datetime.now(timezone.utc).isoformat()
            result = self.supabase.table("profiles")\
                .update(update_data)\
                .eq("id", profile_id)\
                .execute()
            if not result.data:
                raise AppError("Profile not found", ErrorTypes.DB_NOT_FOUND)
            return ProfileResponse(**result.data[0])
        except HTTPException:
            raise
        except Exception as e:
            raise to_app_error(e, ErrorTypes.DB_QUERY)

    def get_settings(self, user_id: str) -> UserSettingsResponse:
        try:
            result = self.supabase.table("user_settings")\
                .select("*")\
                .eq("user_id", user_id)\
                .limit(1)\
                .execute()
            if not result.data:
                return UserSettingsResponse(user_id=user_id, preferences={})
            row = result.data[0]
            return UserSettingsResponse(
                user_id=user_id,
                preferences=row.get("preferences") or {},
                updated_at=row.get("updated_at"),
            )
        except Exception as e:
            raise to_app_error(e, ErrorTypes.DB_QUERY)

    def save_settings(self, user_id: str, preferences: Dict[str, Any]) -> UserSettingsResponse:
        """Upsert preferences; keys not present in the body are kept"""
        try:
            current = self.get_settings(user_id).preferences
            merged = {**current, **preferences}
            result = self.supabase.table("user_settings")\
                .upsert({
                    "user_id": user_id,
                    "preferences": merged,
                    "updated_at": datetime.now(timezone.utc).isoformat(),
                }, on_conflict="user_id")\
                .execute()
            row = result.data[0] if result.data else {"preferences": merged}
            return UserSettingsResponse(
                user_id=user_id,
                preferences=row.get("preferences") or {},
                updated_at=row.get("updated_at"),
            )
        except HTTPException:
            raise
        except Exception as e:
            raise to_app_error(e, ErrorTypes.DB_QUERY)
