from fastapi import APIRouter, Depends
from app.database.supabase_client import get_supabase
from app.modules.organization.schemas import OrganizationUpdate
from app.modules.organization.service import OrganizationService
from app.core.dependencies import require_permission
from supabase import Client
from typing import Dict, Any

router = APIRouter(prefix="/organization", tags=["organization"])


def get_organization_service(supabase: Client = Depends(get_supabase)) -> OrganizationService:
    return OrganizationService(supabase)


@router.get("", response_model=Dict[str, Any])
async def get_organization(
    user_data: Dict = Depends(require_permission("organization:read")),
    service: OrganizationService = Depends(get_organization_service)
):
    return service.get_organization()


@router.put("", response_model=Dict[str, Any])
async def update_organization(
    org_data: OrganizationUpdate,
    user_data: Dict = Depends(require_permission("organization:update")),
    service: OrganizationService = Depends(get_organization_service)
):
    """Save organization settings (camelCase form fields)"""
    return service.save_organization(org_data)
