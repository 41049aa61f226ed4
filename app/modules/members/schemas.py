from pydantic import BaseModel
from typing import Optional, Literal
from datetime import datetime

MemberType = Literal["contractor", "architect", "engineer", "inspector", "owner", "other"]
MemberStatus = Literal["active", "inactive", "pending"]


class MemberCreate(BaseModel):
    name: str
    email: Optional[str] = None
    phone: Optional[str] = None
    company: Optional[str] = None
    role: Optional[str] = None
    type: MemberType = "other"
    status: MemberStatus = "pending"
    license_number: Optional[str] = None


class MemberResponse(BaseModel):
    id: str
    name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    company: Optional[str] = None
    role: Optional[str] = None
    type: Optional[str] = None
    status: Optional[str] = None
    license_number: Optional[str] = None
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True
        extra = "allow"
