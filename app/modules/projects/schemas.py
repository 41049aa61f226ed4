from pydantic import BaseModel
from typing import Optional, Union
from datetime import datetime


class ProjectCreate(BaseModel):
    project_name: str
    project_number: Optional[str] = None
    permit_number: Optional[str] = None
    address: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    status: str = "active"
    organization_id: Optional[str] = None
    budget: Optional[Union[float, str]] = None
    sensitive_notes: Optional[str] = None

    class Config:
        extra = "allow"


class ProjectUpdate(BaseModel):
    project_name: Optional[str] = None
    project_number: Optional[str] = None
    permit_number: Optional[str] = None
    address: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    status: Optional[str] = None
    budget: Optional[Union[float, str]] = None
    sensitive_notes: Optional[str] = None

    class Config:
        extra = "allow"


class ProjectResponse(BaseModel):
    id: str
    project_name: Optional[str] = None
    project_number: Optional[str] = None
    permit_number: Optional[str] = None
    status: Optional[str] = None
    organization_id: Optional[str] = None
    budget: Optional[Union[float, str]] = None
    sensitive_notes: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True
        extra = "allow"
