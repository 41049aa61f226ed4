from pydantic import BaseModel
from typing import Optional, List, Dict, Any, Literal
from datetime import datetime

FieldReportStatus = Literal["draft", "submitted", "approved", "rejected"]


class FieldReportCreate(BaseModel):
    project_id: Optional[str] = None
    organization_id: Optional[str] = None
    report_number: Optional[str] = None
    report_date: Optional[str] = None
    weather: Optional[str] = None
    summary: Optional[str] = None
    status: FieldReportStatus = "draft"

    class Config:
        extra = "allow"


class FieldReportUpdate(BaseModel):
    report_number: Optional[str] = None
    report_date: Optional[str] = None
    weather: Optional[str] = None
    summary: Optional[str] = None
    status: Optional[FieldReportStatus] = None

    class Config:
        extra = "allow"


class FieldReportResponse(BaseModel):
    id: str
    organization_id: Optional[str] = None
    project_id: Optional[str] = None
    report_number: Optional[str] = None
    report_date: Optional[str] = None
    weather: Optional[str] = None
    summary: Optional[str] = None
    status: str = "draft"
    created_by: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    work_completed: Optional[List[Dict[str, Any]]] = None
    issues: Optional[List[Dict[str, Any]]] = None
    safety_observations: Optional[List[Dict[str, Any]]] = None
    personnel: Optional[List[Dict[str, Any]]] = None
    photos: Optional[List[Dict[str, Any]]] = None

    class Config:
        from_attributes = True
        extra = "allow"
