from fastapi import APIRouter, Depends
from app.database.supabase_client import get_supabase
from app.modules.vba_projects.schemas import (
    VBAProjectCreate, VBAProjectUpdate, VBAProjectResponse,
    BulkDeleteRequest, BulkDeleteResponse, BulkUpdateRequest, BulkUpdateResponse,
    PopulateInspectionsResponse, InspectionCreate, InspectionUpdate, InspectionResponse,
    InspectionPhotoCreate, InspectionPhotoResponse
)
from app.modules.vba_projects.service import VBAProjectService
from app.core.dependencies import require_permission
from supabase import Client
from typing import List, Optional, Dict

router = APIRouter(tags=["vba-projects"])


def get_vba_project_service(supabase: Client = Depends(get_supabase)) -> VBAProjectService:
    return VBAProjectService(supabase)


@router.get("/vba-projects", response_model=List[VBAProjectResponse])
async def list_vba_projects(
    user_data: Dict = Depends(require_permission("vba_projects:read")),
    service: VBAProjectService = Depends(get_vba_project_service)
):
    return service.list_projects()


@router.post("/vba-projects", response_model=VBAProjectResponse, status_code=201)
async def create_vba_project(
    project_data: VBAProjectCreate,
    user_data: Dict = Depends(require_permission("vba_projects:create")),
    service: VBAProjectService = Depends(get_vba_project_service)
):
    """Create a VBA project (also mirrored into projects)"""
    return service.create_project(project_data)


@router.post("/vba-projects/bulk-delete", response_model=BulkDeleteResponse)
async def bulk_delete_vba_projects(
    request: BulkDeleteRequest,
    user_data: Dict = Depends(require_permission("vba_projects:bulk")),
    service: VBAProjectService = Depends(get_vba_project_service)
):
    return service.bulk_delete(request.ids, user_data["id"])


@router.post("/vba-projects/bulk-update", response_model=BulkUpdateResponse)
async def bulk_update_vba_projects(
    request: BulkUpdateRequest,
    user_data: Dict = Depends(require_permission("vba_projects:bulk")),
    service: VBAProjectService = Depends(get_vba_project_service)
):
    return service.bulk_update(request.ids, request.updates, user_data["id"])


@router.post("/vba-projects/populate-inspections", response_model=PopulateInspectionsResponse)
async def populate_inspections(
    user_data: Dict = Depends(require_permission("vba_projects:bulk")),
    service: VBAProjectService = Depends(get_vba_project_service)
):
    """Fill selected_inspections on every project with a sample sequence"""
    return service.populate_inspections()


@router.get("/vba-projects/{project_id}", response_model=VBAProjectResponse)
async def get_vba_project(
    project_id: str,
    user_data: Dict = Depends(require_permission("vba_projects:read")),
    service: VBAProjectService = Depends(get_vba_project_service)
):
    return service.get_project(project_id)


@router.put("/vba-projects/{project_id}", response_model=VBAProjectResponse)
async def update_vba_project(
    project_id: str,
    project_data: VBAProjectUpdate,
    user_data: Dict = Depends(require_permission("vba_projects:update")),
    service: VBAProjectService = Depends(get_vba_project_service)
):
    return service.update_project(project_id, project_data)


@router.delete("/vba-projects/{project_id}", status_code=204)
async def delete_vba_project(
    project_id: str,
    user_data: Dict = Depends(require_permission("vba_projects:delete")),
    service: VBAProjectService = Depends(get_vba_project_service)
):
    service.delete_project(project_id)
    return None


@router.get("/vba-projects/{project_id}/inspections", response_model=List[InspectionResponse])
async def list_inspections(
    project_id: str,
    user_data: Dict = Depends(require_permission("inspections:read")),
    service: VBAProjectService = Depends(get_vba_project_service)
):
    return service.list_inspections(project_id)


@router.post("/vba-projects/{project_id}/inspections", response_model=InspectionResponse, status_code=201)
async def schedule_inspection(
    project_id: str,
    inspection: InspectionCreate,
    user_data: Dict = Depends(require_permission("inspections:create")),
    service: VBAProjectService = Depends(get_vba_project_service)
):
    return service.schedule_inspection(project_id, inspection)


@router.put("/inspections/{inspection_id}", response_model=InspectionResponse)
async def update_inspection(
    inspection_id: str,
    inspection: InspectionUpdate,
    user_data: Dict = Depends(require_permission("inspections:update")),
    service: VBAProjectService = Depends(get_vba_project_service)
):
    return service.update_inspection(inspection_id, inspection)


@router.get("/vba-projects/{project_id}/photos", response_model=List[InspectionPhotoResponse])
async def list_photos(
    project_id: str,
    category: Optional[str] = None,
    user_data: Dict = Depends(require_permission("inspections:read")),
    service: VBAProjectService = Depends(get_vba_project_service)
):
    return service.list_photos(project_id, category)


@router.post("/vba-projects/{project_id}/photos", response_model=InspectionPhotoResponse, status_code=201)
async def add_photo(
    project_id: str,
    photo: InspectionPhotoCreate,
    user_data: Dict = Depends(require_permission("inspections:create")),
    service: VBAProjectService = Depends(get_vba_project_service)
):
    return service.add_photo(project_id, photo)
