# src/subscription/schemas.py
from pydantic import BaseModel, EmailStr, Field, field_validator
from datetime import datetime, timezone
from decimal import Decimal
from typing import List, Optional
from subscription.models import SubscriberStatus


def _naive_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Expiry dates are stored as naive UTC."""
    if value is not None and value.tzinfo is not None:
        return value.astimezone(timezone.utc).replace(tzinfo=None)
    return value


class SubscriberCreate(BaseModel):
    """Schema for creating a subscriber."""
    username: str = Field(..., min_length=1, max_length=50)
    email: EmailStr
    password: str = Field(..., min_length=1)
    package_id: Optional[int] = None
    status: SubscriberStatus = SubscriberStatus.ACTIVE
    expiry_date: datetime
    max_connections: Optional[int] = Field(None, ge=1)
    revenue: Decimal = Decimal("0")
    reseller_id: Optional[int] = None

    @field_validator("expiry_date")
    @classmethod
    def expiry_as_utc(cls, value):
        return _naive_utc(value)


class SubscriberUpdate(BaseModel):
    """Schema for updating a subscriber; omitted fields are left unchanged."""
    username: Optional[str] = Field(None, min_length=1, max_length=50)
    email: Optional[EmailStr] = None
    password: Optional[str] = Field(None, min_length=1)
    package_id: Optional[int] = None
    status: Optional[SubscriberStatus] = None
    expiry_date: Optional[datetime] = None
    max_connections: Optional[int] = Field(None, ge=1)
    revenue: Optional[Decimal] = None
    reseller_id: Optional[int] = None

    @field_validator("expiry_date")
    @classmethod
    def expiry_as_utc(cls, value):
        return _naive_utc(value)


class SubscriberResponse(BaseModel):
    """Subscriber joined with its package name and reseller username."""
    id: int
    username: str
    email: str
    package_id: Optional[int]
    package_name: Optional[str] = None
    status: SubscriberStatus
    expiry_date: datetime
    max_connections: int
    revenue: Decimal
    reseller_id: Optional[int]
    reseller_name: Optional[str] = None
    created_at: datetime
    updated_at: Optional[datetime] = None

    @classmethod
    def from_orm(cls, obj):
        return cls(
            id=obj.id,
            username=obj.username,
            email=obj.email,
            package_id=obj.package_id,
            package_name=obj.package.name if obj.package else None,
            status=obj.status,
            expiry_date=obj.expiry_date,
            max_connections=obj.max_connections,
            revenue=obj.revenue,
            reseller_id=obj.reseller_id,
            reseller_name=obj.reseller.username if obj.reseller else None,
            created_at=obj.created_at,
            updated_at=obj.updated_at,
        )

    class Config:
        from_attributes = True


class BulkExtendRequest(BaseModel):
    user_ids: List[int] = Field(..., alias="userIds")
    days: int = Field(..., gt=0, le=36500)

    class Config:
        populate_by_name = True


class BulkExtendResponse(BaseModel):
    message: str
    extended: int


class ConnectionResponse(BaseModel):
    """A recorded device connection."""
    id: int
    device: Optional[str]
    ip_address: Optional[str]
    location: Optional[str]
    connected_at: datetime

    class Config:
        from_attributes = True


class SessionResponse(BaseModel):
    id: int
    device: Optional[str]
    ip_address: Optional[str]
    login_time: datetime
    last_activity: Optional[datetime]
    is_active: bool

    class Config:
        from_attributes = True


class SubscriberConnections(BaseModel):
    agents: List[ConnectionResponse]
    sessions: List[SessionResponse]
