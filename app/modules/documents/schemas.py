from pydantic import BaseModel
from typing import Optional
from datetime import datetime


class DocumentResponse(BaseModel):
    id: str
    project_id: Optional[str] = None
    name: str
    file_url: Optional[str] = None
    storage_key: Optional[str] = None
    file_type: Optional[str] = None
    content_type: Optional[str] = None
    file_size: Optional[int] = None
    category: Optional[str] = None
    uploaded_by: Optional[str] = None
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True
        extra = "allow"
