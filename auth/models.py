# src/auth/models.py
import enum
from sqlalchemy import Column, Integer, String, DateTime, Enum
from database import Base
from datetime import datetime


class AdminRole(str, enum.Enum):
    """Capability tiers, lowest first."""
    ADMIN = "admin"
    SUPERADMIN = "superadmin"

    @property
    def rank(self) -> int:
        return list(AdminRole).index(self)

    def satisfies(self, required: "AdminRole") -> bool:
        return self.rank >= required.rank


class Administrator(Base):
    """Represents a panel administrator."""
    __tablename__ = "admins"

    id: int = Column(Integer, primary_key=True, index=True)
    username: str = Column(String(50), unique=True, index=True, nullable=False)
    email: str = Column(String(100), unique=True, index=True, nullable=False)
    password_hash: str = Column(String(255), nullable=False)
    role: AdminRole = Column(
        Enum(AdminRole, name="admin_role", values_callable=lambda e: [m.value for m in e]),
        nullable=False,
        default=AdminRole.ADMIN,
    )
    created_at: datetime = Column(DateTime, default=datetime.utcnow)
