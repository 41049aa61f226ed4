from fastapi import APIRouter, Depends
from app.database.supabase_client import get_supabase
from app.modules.profiles.schemas import (
    ProfileUpdate, ProfileResponse, UserSettingsUpdate, UserSettingsResponse
)
from app.modules.profiles.service import ProfileService
from app.core.dependencies import require_permission, get_current_user_id, get_access_cache, is_admin
from app.core.errors import AppError, ErrorTypes
from supabase import Client
from typing import List, Dict

router = APIRouter(prefix="/profiles", tags=["profiles"])


def get_profile_service(supabase: Client = Depends(get_supabase)) -> ProfileService:
    return ProfileService(supabase)


def _check_owner_or_admin(profile: ProfileResponse, user_data: Dict, supabase: Client, cache: Dict):
    if profile.user_id != user_data["id"] and not is_admin(user_data, supabase, cache):
        raise AppError("Profile not accessible", ErrorTypes.AUTH_PERMISSION_DENIED)


@router.get("", response_model=List[ProfileResponse])
async def list_profiles(
    limit: int = 50,
    offset: int = 0,
    user_data: Dict = Depends(require_permission("profiles:read")),
    service: ProfileService = Depends(get_profile_service)
):
    return service.list_profiles(limit=limit, offset=offset)


@router.get("/{profile_id}", response_model=ProfileResponse)
async def get_profile(
    profile_id: str,
    user_data: Dict = Depends(require_permission("profiles:read")),
    service: ProfileService = Depends(get_profile_service)
):
    return service.get_profile(profile_id)


@router.put("/{profile_id}", response_model=ProfileResponse)
async def update_profile(
    profile_id: str,
    profile_data: ProfileUpdate,
    user_data: Dict = Depends(get_current_user_id),
    cache: Dict = Depends(get_access_cache),
    service: ProfileService = Depends(get_profile_service),
    supabase: Client = Depends(get_supabase)
):
    """Update a profile (own profile, or any profile for admins)"""
    _check_owner_or_admin(service.get_profile(profile_id), user_data, supabase, cache)
    return service.update_profile(profile_id, profile_data)


@router.get("/{profile_id}/settings", response_model=UserSettingsResponse)
async def get_profile_settings(
    profile_id: str,
    user_data: Dict = Depends(get_current_user_id),
    cache: Dict = Depends(get_access_cache),
    service: ProfileService = Depends(get_profile_service),
    supabase: Client = Depends(get_supabase)
):
    profile = service.get_profile(profile_id)
    _check_owner_or_admin(profile, user_data, supabase, cache)
    return service.get_settings(profile.user_id)


@router.put("/{profile_id}/settings", response_model=UserSettingsResponse)
async def update_profile_settings(
    profile_id: str,
    settings_data: UserSettingsUpdate,
    user_data: Dict = Depends(get_current_user_id),
    cache: Dict = Depends(get_access_cache),
    service: ProfileService = Depends(get_profile_service),
    supabase: Client = Depends(get_supabase)
):
    """Merge preferences into the user's settings row"""
    profile = service.get_profile(profile_id)
    _check_owner_or_admin(profile, user_data, supabase, cache)
    return service.save_settings(profile.user_id, settings_data.preferences)
