from pydantic import BaseModel
from typing import Optional, Dict, Any
from datetime import datetime


class ProfileUpdate(BaseModel):
    name: Optional[str] = None
    phone: Optional[str] = None
    title: Optional[str] = None
    company: Optional[str] = None
    address: Optional[str] = None


class ProfileResponse(BaseModel):
    id: str
    user_id: Optional[str] = None
    name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    title: Optional[str] = None
    company: Optional[str] = None
    address: Optional[str] = None
    role: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class UserSettingsUpdate(BaseModel):
    preferences: Dict[str, Any]


class UserSettingsResponse(BaseModel):
    user_id: str
    preferences: Dict[str, Any] = {}
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True
