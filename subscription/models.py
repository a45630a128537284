# src/subscription/models.py
import enum
from sqlalchemy import Column, Integer, String, ForeignKey, DateTime, Boolean, Numeric, Enum
from sqlalchemy.orm import relationship
from database import Base
from datetime import datetime
from decimal import Decimal
from typing import Optional


class SubscriberStatus(str, enum.Enum):
    ACTIVE = "active"
    EXPIRED = "expired"
    SUSPENDED = "suspended"


class Subscriber(Base):
    """An end-user account entitled to stream subject to status and expiry."""
    __tablename__ = "users"

    id: int = Column(Integer, primary_key=True, index=True)
    username: str = Column(String(50), unique=True, index=True, nullable=False)
    email: str = Column(String(100), unique=True, index=True, nullable=False)
    password_hash: str = Column(String(255), nullable=False)
    package_id: Optional[int] = Column(Integer, ForeignKey("packages.id", ondelete="SET NULL"), nullable=True)
    status: SubscriberStatus = Column(
        Enum(SubscriberStatus, name="subscriber_status", values_callable=lambda e: [m.value for m in e]),
        nullable=False,
        default=SubscriberStatus.ACTIVE,
    )
    expiry_date: datetime = Column(DateTime, nullable=False)
    max_connections: int = Column(Integer, nullable=False, default=1)
    revenue: Decimal = Column(Numeric(10, 2), nullable=False, default=0)
    reseller_id: Optional[int] = Column(Integer, ForeignKey("resellers.id", ondelete="SET NULL"), nullable=True)
    created_at: datetime = Column(DateTime, default=datetime.utcnow)
    updated_at: datetime = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    package = relationship("Package", back_populates="subscribers")
    reseller = relationship("Reseller", back_populates="subscribers")
    sessions = relationship("SubscriberSession", back_populates="subscriber", cascade="all, delete-orphan")
    agents = relationship("SubscriberAgent", back_populates="subscriber", cascade="all, delete-orphan")


class SubscriberSession(Base):
    """A streaming session opened by a subscriber."""
    __tablename__ = "user_sessions"

    id: int = Column(Integer, primary_key=True, index=True)
    user_id: int = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    ip_address: Optional[str] = Column(String(45), nullable=True)
    device: Optional[str] = Column(String(100), nullable=True)
    login_time: datetime = Column(DateTime, default=datetime.utcnow)
    last_activity: datetime = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)
    is_active: bool = Column(Boolean, nullable=False, default=True)

    subscriber = relationship("Subscriber", back_populates="sessions")


class SubscriberAgent(Base):
    """A device that fetched credentials for a subscriber."""
    __tablename__ = "user_agents"

    id: int = Column(Integer, primary_key=True, index=True)
    user_id: int = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    device: Optional[str] = Column(String(100), nullable=True)
    ip_address: Optional[str] = Column(String(45), nullable=True)
    location: Optional[str] = Column(String(100), nullable=True)
    connected_at: datetime = Column(DateTime, default=datetime.utcnow)

    subscriber = relationship("Subscriber", back_populates="agents")
