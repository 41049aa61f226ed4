from fastapi import APIRouter, Depends
from app.modules.roles.schemas import PermissionResponse, AppRoleResponse
from app.modules.roles.service import RoleService
from app.core.dependencies import require_permission
from typing import List, Optional, Dict

router = APIRouter(prefix="/roles", tags=["roles"])


def get_role_service() -> RoleService:
    return RoleService()


@router.get("", response_model=List[AppRoleResponse])
async def list_roles(
    user_data: Dict = Depends(require_permission("roles:read")),
    service: RoleService = Depends(get_role_service)
):
    """Application roles (admin, inspector, viewer) with their effective permissions"""
    return service.list_app_roles()


@router.get("/permissions", response_model=List[PermissionResponse])
async def list_permissions(
    resource: Optional[str] = None,
    user_data: Dict = Depends(require_permission("roles:read")),
    service: RoleService = Depends(get_role_service)
):
    return service.list_permissions(resource)
