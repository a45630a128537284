# src/catalog/schemas.py
from pydantic import BaseModel, Field
from datetime import datetime
from decimal import Decimal
from typing import Optional


class PackageCreate(BaseModel):
    """Schema for creating a package."""
    name: str = Field(..., min_length=1, max_length=100)
    duration: str = Field(..., min_length=1, max_length=50)
    price: Decimal = Field(..., ge=0)
    connections: int = Field(1, ge=1)
    description: Optional[str] = None
    is_active: bool = True


class PackageUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    duration: Optional[str] = Field(None, min_length=1, max_length=50)
    price: Optional[Decimal] = Field(None, ge=0)
    connections: Optional[int] = Field(None, ge=1)
    description: Optional[str] = None
    is_active: Optional[bool] = None


class PackageResponse(BaseModel):
    id: int
    name: str
    duration: str
    price: Decimal
    connections: int
    description: Optional[str]
    is_active: bool
    created_at: datetime

    class Config:
        from_attributes = True


class ChannelCreate(BaseModel):
    """Schema for creating a channel."""
    name: str = Field(..., min_length=1, max_length=100)
    category: Optional[str] = Field(None, max_length=50)
    stream_url: str = Field(..., min_length=1)
    logo_url: Optional[str] = None
    epg_id: Optional[str] = Field(None, max_length=50)
    is_active: bool = True


class ChannelUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    category: Optional[str] = Field(None, max_length=50)
    stream_url: Optional[str] = Field(None, min_length=1)
    logo_url: Optional[str] = None
    epg_id: Optional[str] = Field(None, max_length=50)
    is_active: Optional[bool] = None


class ChannelResponse(BaseModel):
    id: int
    name: str
    category: Optional[str]
    stream_url: str
    logo_url: Optional[str]
    epg_id: Optional[str]
    is_active: bool
    created_at: datetime

    class Config:
        from_attributes = True
