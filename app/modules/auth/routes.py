from fastapi import APIRouter, Depends, Request, Security
from fastapi.security import HTTPAuthorizationCredentials
from slowapi.util import get_remote_address
from app.database.supabase_client import get_supabase
from app.config.permissions_config import APP_ROLES
from app.core.errors import AppError, ErrorTypes
from app.modules.auth.schemas import (
    LoginRequest, RegisterRequest, TokenResponse, RegisterResponse,
    SetRoleRequest, CurrentUserResponse
)
from app.modules.auth.service import AuthService
from app.core.dependencies import (
    security, get_auth_service, get_current_user_id, get_access_cache,
    get_user_profile, get_user_role, get_user_permissions, require_permission
)
from supabase import Client
from typing import Dict, Any

router = APIRouter(prefix="/auth", tags=["auth"])


def get_current_token(
    credentials: HTTPAuthorizationCredentials = Security(security)
) -> str:
    """Extract JWT token from Authorization header"""
    return credentials.credentials


@router.post("/register", response_model=RegisterResponse, status_code=201)
async def register(
    register_data: RegisterRequest,
    service: AuthService = Depends(get_auth_service)
):
    """Register a new user"""
    return service.register(register_data)


@router.post("/login", response_model=TokenResponse)
async def login(
    login_data: LoginRequest,
    request: Request,
    service: AuthService = Depends(get_auth_service)
):
    """Login and get access token"""
    return service.login(login_data, get_remote_address(request), request.headers.get("user-agent"))


@router.post("/logout", status_code=200)
async def logout(
    token: str = Depends(get_current_token),
    service: AuthService = Depends(get_auth_service)
):
    """Logout and invalidate token"""
    service.logout(token)
    return {"message": "Logged out successfully"}


@router.get("/me", response_model=CurrentUserResponse)
async def get_current_user(
    current_user: Dict = Depends(get_current_user_id),
    cache: Dict[str, Any] = Depends(get_access_cache),
    supabase: Client = Depends(get_supabase),
):
    """Current user's profile, role and permissions (for frontend UI)."""
    profile = get_user_profile(current_user["id"], supabase, cache) or {}
    role = get_user_role(current_user, supabase, cache)
    email = profile.get("email") or current_user.get("email") or ""
    return CurrentUserResponse(
        id=current_user["id"],
        name=profile.get("name") or email.split("@")[0] or "User",
        email=email,
        phone=profile.get("phone") or "",
        title=profile.get("title") or ("Administrator" if role == "admin" else role.capitalize()),
        company=profile.get("company") or "",
        address=profile.get("address") or "",
        role=role,
        is_admin=role == "admin",
        permissions=get_user_permissions(current_user, supabase, cache),
    )


@router.post("/role", status_code=200)
async def set_role(
    request: SetRoleRequest,
    current_user: Dict = Depends(require_permission("roles:assign")),
    service: AuthService = Depends(get_auth_service),
):
    """Set a user's application role (roles:assign, admins only by default)"""
    if request.role not in APP_ROLES:
        raise AppError(f"Unknown role: {request.role}", ErrorTypes.INVALID_INPUT)
    service.set_role(request.user_id, request.role)
    return {
        "message": f"User {request.user_id} role set to {request.role}",
        "user_id": request.user_id,
        "role": request.role
    }
