from app.config.permissions_config import APP_ROLES, DEFAULT_APP_ROLE, PERMISSION_MATRIX, get_role_permissions
from app.modules.roles.schemas import PermissionResponse, AppRoleResponse
from typing import List, Optional


class RoleService:
    """Read-only view of the permission matrix the roles tables are seeded from."""

    def list_app_roles(self) -> List[AppRoleResponse]:
        return [
            AppRoleResponse(
                name=name,
                module_roles=module_roles,
                permissions=get_role_permissions(name),
                is_default=name == DEFAULT_APP_ROLE,
            )
            for name, module_roles in APP_ROLES.items()
        ]

    def list_permissions(self, resource: Optional[str] = None) -> List[PermissionResponse]:
        return [
            PermissionResponse(**permission)
            for permission in PERMISSION_MATRIX["permissions"]
            if resource is None or permission["resource"] == resource
        ]
