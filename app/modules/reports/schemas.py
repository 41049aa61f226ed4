from pydantic import BaseModel
from typing import Optional, Dict, Any, List, Literal
from datetime import datetime


class InspectionReportCreate(BaseModel):
    report_type: Literal["inspection", "compliance", "safety_incident", "material_defect", "engineering"]
    report_title: Optional[str] = None
    report_sequence: Optional[str] = None
    report_date: Optional[str] = None
    generated_by: Optional[str] = None
    file_url: Optional[str] = None
    data: Optional[Dict[str, Any]] = None

    class Config:
        extra = "allow"


class InspectionReportUpdate(BaseModel):
    report_title: Optional[str] = None
    report_sequence: Optional[str] = None
    report_date: Optional[str] = None
    status: Optional[Literal["draft", "final"]] = None
    file_url: Optional[str] = None
    data: Optional[Dict[str, Any]] = None

    class Config:
        extra = "allow"


class InspectionReportResponse(BaseModel):
    id: str
    project_id: str
    report_type: str
    report_title: Optional[str] = None
    report_sequence: Optional[str] = None
    report_date: Optional[str] = None
    status: str = "draft"
    generated_by: Optional[str] = None
    file_url: Optional[str] = None
    data: Optional[Dict[str, Any]] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True
        extra = "allow"


class ProjectInformationUpdate(BaseModel):
    owner_name: Optional[str] = None
    contractor_name: Optional[str] = None
    architect_name: Optional[str] = None
    engineer_name: Optional[str] = None
    permit_number: Optional[str] = None
    job_number: Optional[str] = None
    details: Optional[Dict[str, Any]] = None

    class Config:
        extra = "allow"


class ProjectInformationResponse(BaseModel):
    id: Optional[str] = None
    project_id: str
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True
        extra = "allow"


class ReportValidationResponse(BaseModel):
    valid: bool
    errors: List[str] = []
