# src/resellers/schemas.py
from pydantic import BaseModel, EmailStr, Field
from datetime import datetime
from decimal import Decimal
from typing import Optional


class ResellerCreate(BaseModel):
    """Schema for creating a reseller."""
    username: str = Field(..., min_length=1, max_length=50)
    email: EmailStr
    password: str = Field(..., min_length=1)
    credits: int = Field(0, ge=0)
    commission: Decimal = Field(Decimal("0"), ge=0, le=100)


class ResellerUpdate(BaseModel):
    username: Optional[str] = Field(None, min_length=1, max_length=50)
    email: Optional[EmailStr] = None
    password: Optional[str] = Field(None, min_length=1)
    credits: Optional[int] = Field(None, ge=0)
    commission: Optional[Decimal] = Field(None, ge=0, le=100)


class ResellerResponse(BaseModel):
    """Schema for reseller response."""
    id: int
    username: str
    email: str
    credits: int
    commission: Decimal
    subscriber_count: int = 0
    created_at: datetime
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True
