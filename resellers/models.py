# src/resellers/models.py
from sqlalchemy import Column, Integer, String, DateTime, Numeric
from sqlalchemy.orm import relationship
from database import Base
from datetime import datetime
from decimal import Decimal


class Reseller(Base):
    """An intermediary account owning a subset of subscribers."""
    __tablename__ = "resellers"

    id: int = Column(Integer, primary_key=True, index=True)
    username: str = Column(String(50), unique=True, index=True, nullable=False)
    email: str = Column(String(100), unique=True, index=True, nullable=False)
    password_hash: str = Column(String(255), nullable=False)
    credits: int = Column(Integer, nullable=False, default=0)
    commission: Decimal = Column(Numeric(5, 2), nullable=False, default=0)
    created_at: datetime = Column(DateTime, default=datetime.utcnow)
    updated_at: datetime = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    subscribers = relationship("Subscriber", back_populates="reseller", passive_deletes=True)
