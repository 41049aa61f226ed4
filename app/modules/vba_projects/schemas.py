from pydantic import BaseModel, Field
from typing import Optional, List, Dict, Any, Literal
from datetime import datetime

InspectionStatus = Literal["scheduled", "in_progress", "passed", "failed", "cancelled"]


class VBAProjectCreate(BaseModel):
    project_name: str
    project_number: Optional[str] = None
    permit_number: Optional[str] = None
    address: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    status: str = "scheduled"
    inspection_type: Optional[str] = None
    selected_inspections: Optional[List[str]] = None
    start_date: Optional[str] = None
    organization_id: Optional[str] = None

    class Config:
        extra = "allow"


class VBAProjectUpdate(BaseModel):
    project_name: Optional[str] = None
    project_number: Optional[str] = None
    permit_number: Optional[str] = None
    address: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    status: Optional[str] = None
    inspection_type: Optional[str] = None
    selected_inspections: Optional[List[str]] = None
    start_date: Optional[str] = None
    completion_date: Optional[str] = None

    class Config:
        extra = "allow"


class VBAProjectResponse(BaseModel):
    id: str
    project_name: Optional[str] = None
    project_number: Optional[str] = None
    permit_number: Optional[str] = None
    status: Optional[str] = None
    organization_id: Optional[str] = None
    selected_inspections: Optional[List[str]] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True
        extra = "allow"


class BulkDeleteRequest(BaseModel):
    ids: List[str] = Field(default_factory=list)


class BulkDeleteResponse(BaseModel):
    success: bool
    deleted: int


class BulkUpdateRequest(BaseModel):
    ids: List[str] = Field(default_factory=list)
    updates: Optional[Dict[str, Any]] = None


class BulkUpdateResponse(BaseModel):
    success: bool
    updated: int
    data: List[Dict[str, Any]] = []


class PopulateInspectionsResponse(BaseModel):
    message: str
    updated_count: int


class InspectionCreate(BaseModel):
    inspection_type: str
    scheduled_date: Optional[datetime] = None
    inspector: Optional[str] = None
    notes: Optional[str] = None


class InspectionUpdate(BaseModel):
    status: Optional[InspectionStatus] = None
    scheduled_date: Optional[datetime] = None
    inspector: Optional[str] = None
    result: Optional[str] = None
    notes: Optional[str] = None


class InspectionResponse(BaseModel):
    id: str
    project_id: str
    inspection_type: str
    status: str
    scheduled_date: Optional[datetime] = None
    inspector: Optional[str] = None
    result: Optional[str] = None
    notes: Optional[str] = None
    completed_at: Optional[datetime] = None
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class InspectionPhotoCreate(BaseModel):
    url: str
    caption: Optional[str] = None
    category: Optional[str] = None
    inspection_id: Optional[str] = None


class InspectionPhotoResponse(BaseModel):
    id: str
    project_id: str
    url: str
    caption: Optional[str] = None
    category: Optional[str] = None
    inspection_id: Optional[str] = None
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True
