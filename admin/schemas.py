# src/admin/schemas.py
from pydantic import BaseModel
from datetime import datetime
from typing import Optional
from admin.models import ActorType


class ActivityLogResponse(BaseModel):
    """Schema for activity log response."""
    id: int
    user_type: Optional[ActorType]
    user_id: Optional[int]
    action: str
    details: Optional[str]
    ip_address: Optional[str]
    created_at: datetime

    class Config:
        from_attributes = True


class StatsResponse(BaseModel):
    totalUsers: int
    activeUsers: int
    entitledUsers: int
    expiredUsers: int
    suspendedUsers: int
    totalResellers: int
    totalPackages: int
    totalRevenue: float
    todayCreated: int
    monthlyCreated: int


class SettingUpdate(BaseModel):
    value: Optional[str] = None


class SettingResponse(BaseModel):
    key_name: str
    value: Optional[str]
    updated_at: Optional[datetime]

    class Config:
        from_attributes = True
