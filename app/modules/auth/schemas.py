from pydantic import BaseModel, EmailStr
from typing import Optional, List


class LoginRequest(BaseModel):
    email: EmailStr
    password: str


class TokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    user_id: str
    email: str


class RegisterRequest(BaseModel):
    email: EmailStr
    password: str
    name: Optional[str] = None
    company: Optional[str] = None


class RegisterResponse(BaseModel):
    user_id: str
    email: str
    message: str


class SetRoleRequest(BaseModel):
    user_id: str
    role: str  # admin, inspector, viewer


class CurrentUserResponse(BaseModel):
    id: str
    name: str
    email: str
    phone: str = ""
    title: str = ""
    company: str = ""
    address: str = ""
    role: str
    is_admin: bool = False
    permissions: List[str] = []
