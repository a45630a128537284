# src/admin/models.py
import enum
from sqlalchemy import Column, Integer, String, Text, DateTime, Enum, Index
from database import Base
from datetime import datetime
from typing import Optional


class ActorType(str, enum.Enum):
    ADMIN = "admin"
    RESELLER = "reseller"
    USER = "user"


class ActivityLog(Base):
    """Append-only audit trail entry."""
    __tablename__ = "activity_logs"

    id: int = Column(Integer, primary_key=True, index=True)
    user_type: ActorType = Column(
        Enum(ActorType, name="actor_type", values_callable=lambda e: [m.value for m in e]),
        nullable=True,
    )
    user_id: Optional[int] = Column(Integer, nullable=True)
    action: str = Column(String(100), nullable=False)
    details: Optional[str] = Column(Text, nullable=True)
    ip_address: Optional[str] = Column(String(45), nullable=True)
    created_at: datetime = Column(DateTime, default=datetime.utcnow, index=True)

    __table_args__ = (Index("idx_user", "user_type", "user_id"),)


class Setting(Base):
    """Key/value panel setting."""
    __tablename__ = "settings"

    id: int = Column(Integer, primary_key=True, index=True)
    key_name: str = Column(String(50), unique=True, nullable=False)
    value: Optional[str] = Column(Text, nullable=True)
    updated_at: datetime = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)
