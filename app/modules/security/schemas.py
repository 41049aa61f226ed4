from pydantic import BaseModel
from typing import Optional, Dict, Any, List
from datetime import datetime


class SecurityEventResponse(BaseModel):
    id: str
    event_type: str
    severity: str
    description: Optional[str] = None
    user_id: Optional[str] = None
    email: Optional[str] = None
    source_ip: Optional[str] = None
    user_agent: Optional[str] = None
    endpoint: Optional[str] = None
    metadata: Optional[Dict[str, Any]] = None
    status: Optional[str] = None
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class SecurityEventListResponse(BaseModel):
    data: List[SecurityEventResponse]


class SecurityMetricsResponse(BaseModel):
    hours: int
    total_events: int
    events_by_severity: Dict[str, int]
    events_by_type: Dict[str, int]
    failed_logins: int
    threats_detected: int
    suspicious_ips: List[str]
    suspicious_users: List[str]
