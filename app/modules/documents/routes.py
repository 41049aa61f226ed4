from fastapi import APIRouter, Depends, UploadFile, File, Form
from app.database.supabase_client import get_supabase
from app.modules.documents.schemas import DocumentResponse
from app.modules.documents.service import DocumentService
from app.core.dependencies import require_permission
from supabase import Client
from typing import List, Optional, Dict

router = APIRouter(prefix="/documents", tags=["documents"])


def get_document_service(supabase: Client = Depends(get_supabase)) -> DocumentService:
    return DocumentService(supabase)


@router.get("", response_model=List[DocumentResponse])
async def list_documents(
    project_id: Optional[str] = None,
    user_data: Dict = Depends(require_permission("documents:read")),
    service: DocumentService = Depends(get_document_service)
):
    return service.list_documents(project_id)


@router.post("/upload", response_model=DocumentResponse, status_code=201)
async def upload_document(
    file: UploadFile = File(...),
    project_id: Optional[str] = Form(None),
    category: Optional[str] = Form(None),
    user_data: Dict = Depends(require_permission("documents:upload")),
    service: DocumentService = Depends(get_document_service)
):
    """
    Upload a project document (pdf, images, office files, dwg; 10MB max).
    Stored in S3 when configured, otherwise Supabase Storage.
    """
    return await service.upload_document(file, user_data["id"], project_id, category)


@router.delete("/{document_id}", status_code=204)
async def delete_document(
    document_id: str,
    user_data: Dict = Depends(require_permission("documents:delete")),
    service: DocumentService = Depends(get_document_service)
):
    service.delete_document(document_id, user_data["id"])
    return None
