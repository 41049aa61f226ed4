from supabase import Client
from fastapi import HTTPException, UploadFile
from app.config import settings
from app.core.errors import AppError, ErrorTypes, is_not_found, to_app_error
from app.modules.activity_logs.service import ActivityLogService
from app.modules.documents.schemas import DocumentResponse
from app.modules.documents.storage import get_storage
from typing import List, Optional
import logging
import os
import uuid

logger = logging.getLogger(__name__)

ALLOWED_EXTENSIONS = {"pdf", "png", "jpg", "jpeg", "doc", "docx", "xls", "xlsx", "dwg"}


def file_extension(filename: Optional[str]) -> str:
    return os.path.splitext(filename or "")[1].lstrip(".").lower()


class DocumentService:
    def __init__(self, supabase: Client):
        self.supabase = supabase
        self.activity = ActivityLogService(supabase)

    def list_documents(self, project_id: Optional[str] = None) -> List[DocumentResponse]:
        try:
            query = self.supabase.table("documents").select("*")
            if project_id:
                query = query.eq("project_id", project_id)
            result = query.order("created_at", desc=True).execute()
            return [DocumentResponse(**row) for row in result.data or []]
        except Exception as e:
            raise to_app_error(e, ErrorTypes.DB_QUERY)

    def get_document(self, document_id: str) -> DocumentResponse:
        try:
            result = self.supabase.table("documents")\
                .select("*")\
                .eq("id", document_id)\
                .single()\
                .execute()
            if not result.data:
                raise AppError("Document not found", ErrorTypes.DB_NOT_FOUND)
            return DocumentResponse(**result.data)
        except HTTPException:
            raise
        except Exception as e:
            if is_not_found(e):
                raise AppError("Document not found", ErrorTypes.DB_NOT_FOUND)
            raise to_app_error(e, ErrorTypes.DB_QUERY)

    async def upload_document(
        self,
        file: UploadFile,
        user_id: str,
        project_id: Optional[str] = None,
        category: Optional[str] = None,
    ) -> DocumentResponse:
        """Validate, store (S3 or Supabase Storage) and record an uploaded file"""
        extension = file_extension(file.filename)
        if extension not in ALLOWED_EXTENSIONS:
            raise AppError(
                f"File type .{extension or '?'} is not supported. Allowed: {', '.join(sorted(ALLOWED_EXTENSIONS))}",
                ErrorTypes.FILE_TYPE_INVALID,
            )

        file_content = await file.read()
        max_bytes = settings.max_upload_size_mb * 1024 * 1024
        if len(file_content) > max_bytes:
            raise AppError(
                f"File exceeds the {settings.max_upload_size_mb}MB upload limit",
                ErrorTypes.FILE_TOO_LARGE,
            )

        storage_key = f"{project_id or 'general'}/{uuid.uuid4().hex}.{extension}"
        content_type = file.content_type or "application/octet-stream"
        storage = get_storage(self.supabase)
        try:
            file_url = storage.upload_file(file_content, storage_key, content_type)
        except Exception as e:
            raise AppError(f"Failed to store {file.filename}", ErrorTypes.FILE_UPLOAD_FAILED, 500, details=str(e))

        try:
            result = self.supabase.table("documents").insert({
                "project_id": project_id,
                "name": file.filename,
                "file_url": file_url,
                "storage_key": storage_key,
                "file_type": extension,
                "content_type": content_type,
                "file_size": len(file_content),
                "category": category or "other",
                "uploaded_by": user_id,
            }).execute()
            if not result.data:
                raise AppError("Failed to record document", ErrorTypes.DB_QUERY)
            document = DocumentResponse(**result.data[0])
        except HTTPException:
            self._discard_upload(storage, storage_key)
            raise
        except Exception as e:
            self._discard_upload(storage, storage_key)
            raise to_app_error(e, ErrorTypes.DB_QUERY)

        logger.info(f"Uploaded document {document.id} ({len(file_content)} bytes) to {file_url}")
        self.activity.log(
            "uploaded_document",
            user_id=user_id,
            entity_type="document",
            entity_id=document.id,
            metadata={"name": file.filename, "project_id": project_id, "size": len(file_content)},
        )
        return document

    @staticmethod
    def _discard_upload(storage, storage_key: str) -> None:
        # the stored object has no documents row pointing at it
        if not storage.delete_file(storage_key):
            logger.warning(f"Orphaned stored object {storage_key} was not removed")

    def delete_document(self, document_id: str, user_id: Optional[str] = None) -> bool:
        document = self.get_document(document_id)
        if document.storage_key and not get_storage(self.supabase).delete_file(document.storage_key):
            logger.warning(f"Stored object {document.storage_key} for document {document_id} was not removed")
        try:
            result = self.supabase.table("documents")\
                .delete()\
                .eq("id", document_id)\
                .execute()
        except Exception as e:
            raise to_app_error(e, ErrorTypes.DB_QUERY)
        self.activity.log(
            "deleted_document",
            user_id=user_id,
            entity_type="document",
            entity_id=document_id,
            metadata={"name": document.name},
        )
        return len(result.data or []) > 0
