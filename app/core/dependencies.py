"""
Core dependencies for route protection and permission checking
"""

from fastapi import Depends, Request, Security
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from app.config.permissions_config import APP_ROLES, DEFAULT_APP_ROLE, get_role_permissions
from app.core.errors import AppError, ErrorTypes
from app.database.supabase_client import get_supabase, get_anon_supabase
from app.modules.auth.service import AuthService
from supabase import Client
from typing import List, Optional, Dict, Any
import logging

logger = logging.getLogger(__name__)

security = HTTPBearer()


def _get_request_cache(request: Request) -> Dict[str, Any]:
    """Return request-scoped cache for access data (profile, role, permission_names)."""
    if not hasattr(request.state, "access_cache"):
        request.state.access_cache = {}
    return request.state.access_cache


def get_auth_service(
    supabase: Client = Depends(get_anon_supabase),
    data_client: Client = Depends(get_supabase),
) -> AuthService:
    return AuthService(supabase, data_client)


def get_current_user_id(
    credentials: HTTPAuthorizationCredentials = Security(security),
    auth_service: AuthService = Depends(get_auth_service)
) -> dict:
    """Extract current user info from JWT token"""
    return auth_service.get_current_user(credentials.credentials)


def get_user_profile(user_id: str, supabase: Client, cache: Optional[Dict[str, Any]] = None) -> Optional[Dict[str, Any]]:
    """Return the profiles row for an auth user, or None. Uses request-scoped cache when provided."""
    if cache is not None and "profile" in cache:
        return cache["profile"]
    try:
        result = supabase.table("profiles")\
            .select("*")\
            .eq("user_id", user_id)\
            .limit(1)\
            .execute()
        profile = result.data[0] if result.data else None
    except Exception as e:
        logger.error(f"Error getting profile for {user_id}: {e}")
        profile = None
    if cache is not None:
        cache["profile"] = profile
    return profile


def get_user_role(user_data: dict, supabase: Client, cache: Optional[Dict[str, Any]] = None) -> str:
    """Application role: super users are admin, otherwise profiles.role (default inspector)."""
    if (user_data.get("app_metadata") or {}).get("type") == "super_user":
        return "admin"
    profile = get_user_profile(user_data["id"], supabase, cache)
    role = (profile or {}).get("role") or DEFAULT_APP_ROLE
    return role if role in APP_ROLES else DEFAULT_APP_ROLE


def is_admin(user_data: dict, supabase: Client, cache: Optional[Dict[str, Any]] = None) -> bool:
    return get_user_role(user_data, supabase, cache) == "admin"


def get_user_permissions(user_data: dict, supabase: Client, cache: Optional[Dict[str, Any]] = None) -> List[str]:
    """Permissions for the user's role from the seeded roles tables, falling back to the config matrix."""
    if cache is not None and "permission_names" in cache:
        return cache["permission_names"]
    role = get_user_role(user_data, supabase, cache)
    names: List[str] = []
    try:
        roles_result = supabase.table("roles")\
            .select("id")\
            .in_("name", APP_ROLES[role])\
            .execute()
        role_ids = [r["id"] for r in roles_result.data] if roles_result.data else []
        if role_ids:
            permissions_result = supabase.table("role_permissions")\
                .select("permission_id, permissions(name)")\
                .in_("role_id", role_ids)\
                .execute()
            permissions = set()
            for rp in permissions_result.data or []:
                if rp.get("permissions") and rp["permissions"].get("name"):
                    permissions.add(rp["permissions"]["name"])
            names = sorted(permissions)
    except Exception as e:
        logger.warning(f"Roles tables unavailable, using permission config: {e}")
    if not names:
        names = get_role_permissions(role)
    if cache is not None:
        cache["permission_names"] = names
    return names


def require_permission(required_permission: str):
    """Factory function to create permission check dependency"""
    def check_permission(
        request: Request,
        user_data: dict = Depends(get_current_user_id),
        supabase: Client = Depends(get_supabase)
    ) -> dict:
        cache = _get_request_cache(request)
        if is_admin(user_data, supabase, cache):
            return user_data
        if required_permission not in get_user_permissions(user_data, supabase, cache):
            raise AppError(
                f"Insufficient permissions. Required: {required_permission}",
                ErrorTypes.AUTH_PERMISSION_DENIED,
            )
        return user_data
    return check_permission


def get_access_cache(request: Request) -> Dict[str, Any]:
    """Dependency that returns request-scoped access cache (populated by require_permission when used)."""
    return _get_request_cache(request)
