# src/catalog/models.py
from sqlalchemy import Column, Integer, String, Text, Boolean, DateTime, Numeric
from sqlalchemy.orm import relationship
from database import Base
from datetime import datetime
from decimal import Decimal
from typing import Optional


class Package(Base):
    """A subscription tier assignable to subscribers."""
    __tablename__ = "packages"

    id: int = Column(Integer, primary_key=True, index=True)
    name: str = Column(String(100), nullable=False)
    duration: str = Column(String(50), nullable=False)  # label, e.g. "1 Month"
    price: Decimal = Column(Numeric(10, 2), nullable=False)
    connections: int = Column(Integer, nullable=False, default=1)
    description: Optional[str] = Column(Text, nullable=True)
    is_active: bool = Column(Boolean, nullable=False, default=True)
    created_at: datetime = Column(DateTime, default=datetime.utcnow)

    subscribers = relationship("Subscriber", back_populates="package", passive_deletes=True)


class Channel(Base):
    """A live channel; every active channel is visible to every entitled subscriber."""
    __tablename__ = "channels"

    id: int = Column(Integer, primary_key=True, index=True)
    name: str = Column(String(100), nullable=False)
    category: Optional[str] = Column(String(50), nullable=True)
    stream_url: str = Column(Text, nullable=False)
    logo_url: Optional[str] = Column(Text, nullable=True)
    epg_id: Optional[str] = Column(String(50), nullable=True)
    is_active: bool = Column(Boolean, nullable=False, default=True)
    created_at: datetime = Column(DateTime, default=datetime.utcnow)


class Playlist(Base):
    """An upstream playlist source registered in the catalog.

    Storage only: no route reads or writes it yet, exports are built from `Channel`.
    """
    __tablename__ = "playlists"

    id: int = Column(Integer, primary_key=True, index=True)
    name: str = Column(String(100), nullable=False)
    url: str = Column(Text, nullable=False)
    type: str = Column(String(20), nullable=False, default="M3U")
    category: Optional[str] = Column(String(50), nullable=True)
    created_at: datetime = Column(DateTime, default=datetime.utcnow)
