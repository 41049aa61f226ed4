from pydantic import BaseModel
from typing import Optional, List


class PermissionResponse(BaseModel):
    name: str
    resource: str
    action: str
    description: Optional[str] = None


class AppRoleResponse(BaseModel):
    name: str
    module_roles: List[str]
    permissions: List[str]
    is_default: bool = False
