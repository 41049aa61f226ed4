from fastapi import APIRouter, Depends
from app.database.supabase_client import get_supabase
from app.core.encryption import FieldEncryption, get_field_encryption
from app.modules.projects.schemas import ProjectCreate, ProjectUpdate, ProjectResponse
from app.modules.projects.service import ProjectService
from app.core.dependencies import require_permission
from supabase import Client
from typing import List, Dict

router = APIRouter(prefix="/projects", tags=["projects"])


def get_project_service(
    supabase: Client = Depends(get_supabase),
    encryption: FieldEncryption = Depends(get_field_encryption),
) -> ProjectService:
    return ProjectService(supabase, encryption)


@router.get("", response_model=List[ProjectResponse])
async def list_projects(
    user_data: Dict = Depends(require_permission("projects:read")),
    service: ProjectService = Depends(get_project_service)
):
    return service.list_projects()


@router.post("", response_model=ProjectResponse, status_code=201)
async def create_project(
    project_data: ProjectCreate,
    user_data: Dict = Depends(require_permission("projects:create")),
    service: ProjectService = Depends(get_project_service)
):
    return service.create_project(project_data)


@router.get("/{project_id}", response_model=ProjectResponse)
async def get_project(
    project_id: str,
    user_data: Dict = Depends(require_permission("projects:read")),
    service: ProjectService = Depends(get_project_service)
):
    return service.get_project(project_id)


@router.put("/{project_id}", response_model=ProjectResponse)
async def update_project(
    project_id: str,
    project_data: ProjectUpdate,
    user_data: Dict = Depends(require_permission("projects:update")),
    service: ProjectService = Depends(get_project_service)
):
    return service.update_project(project_id, project_data)


@router.delete("/{project_id}", status_code=204)
async def delete_project(
    project_id: str,
    user_data: Dict = Depends(require_permission("projects:delete")),
    service: ProjectService = Depends(get_project_service)
):
    service.delete_project(project_id)
    return None
