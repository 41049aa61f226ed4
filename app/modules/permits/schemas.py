from pydantic import BaseModel
from typing import Optional, Dict, Any, List
from datetime import datetime


class PermitRecordResponse(BaseModel):
    id: Optional[str] = None
    permit_number: str
    jurisdiction: str
    status: Optional[str] = None
    portal_status: Optional[str] = None
    last_synced: Optional[datetime] = None
    data: Optional[Dict[str, Any]] = None

    class Config:
        from_attributes = True


class SyncAllResponse(BaseModel):
    total: int
    synced: int
    failed: int


class WebhookRegistration(BaseModel):
    jurisdiction: str
    submittal_id: str
    callback_url: str


class WebhookRegistrationResponse(BaseModel):
    registered: bool


class JurisdictionListResponse(BaseModel):
    jurisdictions: List[Dict[str, Any]]
    regions: List[str]
