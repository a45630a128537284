# src/auth/schemas.py
from pydantic import BaseModel, EmailStr, Field
from datetime import datetime
from typing import Optional
from auth.models import AdminRole


class AdminLogin(BaseModel):
    """Schema for administrator login; username accepts an email too."""
    username: str
    password: str


class AdminResponse(BaseModel):
    """Schema for administrator response."""
    id: int
    username: str
    email: str
    role: AdminRole

    class Config:
        from_attributes = True


class AdminDetailResponse(AdminResponse):
    created_at: Optional[datetime] = None


class AdminCreate(BaseModel):
    """Schema for creating an administrator."""
    username: str = Field(..., min_length=1, max_length=50)
    email: EmailStr
    password: str = Field(..., min_length=1)
    role: AdminRole = AdminRole.ADMIN


class LoginResponse(BaseModel):
    token: str
    token_type: str = "bearer"
    user: AdminResponse


class ChangePasswordRequest(BaseModel):
    current_password: str = Field(..., alias="currentPassword")
    new_password: str = Field(..., alias="newPassword", min_length=1)

    class Config:
        populate_by_name = True


class Identity(BaseModel):
    """Claims carried by a validated session token."""
    id: int
    username: str
    role: AdminRole
