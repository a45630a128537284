# tests/panel_support.py
import unittest
from datetime import datetime, timedelta
from decimal import Decimal
from typing import Optional

from fastapi.testclient import TestClient

from database import Base, SessionLocal, engine
from main import app
from admin.models import ActivityLog
from auth.models import Administrator, AdminRole
from auth.services import AuthService
from catalog.models import Channel, Package
from resellers.models import Reseller
from subscription.models import Subscriber, SubscriberStatus


class PanelTestCase(unittest.TestCase):
    """Fresh in-memory schema per test, a superadmin and an authenticated client."""

    def setUp(self) -> None:
        Base.metadata.drop_all(bind=engine)
        Base.metadata.create_all(bind=engine)
        self.db = SessionLocal()
        self.root = self.make_admin("root", "root@example.com", "rootpass", AdminRole.SUPERADMIN)
        self.client = TestClient(app)

    def tearDown(self) -> None:
        self.db.close()

    def make_admin(self, username: str, email: str, password: str, role: AdminRole = AdminRole.ADMIN) -> Administrator:
        admin = Administrator(
            username=username,
            email=email,
            password_hash=AuthService.hash_password(password),
            role=role,
        )
        self.db.add(admin)
        self.db.commit()
        self.db.refresh(admin)
        return admin

    def headers_for(self, admin: Administrator, expires_delta: Optional[timedelta] = None) -> dict:
        token = AuthService.create_access_token(
            {"sub": str(admin.id), "username": admin.username, "role": admin.role.value},
            expires_delta,
        )
        return {"Authorization": f"Bearer {token}"}

    @property
    def auth(self) -> dict:
        return self.headers_for(self.root)

    def make_package(self, name: str = "Basic", price: str = "10.00", connections: int = 1) -> Package:
        package = Package(name=name, duration="1 Month", price=Decimal(price), connections=connections)
        self.db.add(package)
        self.db.commit()
        self.db.refresh(package)
        return package

    def make_reseller(self, username: str = "dealer") -> Reseller:
        reseller = Reseller(
            username=username,
            email=f"{username}@example.com",
            password_hash=AuthService.hash_password("dealerpass"),
        )
        self.db.add(reseller)
        self.db.commit()
        self.db.refresh(reseller)
        return reseller

    def make_subscriber(
            self,
            username: str,
            password: str = "secret",
            status: SubscriberStatus = SubscriberStatus.ACTIVE,
            expiry_date: Optional[datetime] = None,
            **kwargs
    ) -> Subscriber:
        subscriber = Subscriber(
            username=username,
            email=f"{username}@example.com",
            password_hash=AuthService.hash_password(password),
            status=status,
            expiry_date=expiry_date or datetime.utcnow() + timedelta(days=30),
            **kwargs
        )
        self.db.add(subscriber)
        self.db.commit()
        self.db.refresh(subscriber)
        return subscriber

    def make_channel(self, name: str, stream_url: str, category: Optional[str] = "News", **kwargs) -> Channel:
        channel = Channel(name=name, stream_url=stream_url, category=category, **kwargs)
        self.db.add(channel)
        self.db.commit()
        self.db.refresh(channel)
        return channel

    def activity(self, action: str):
        self.db.expire_all()
        return self.db.query(ActivityLog).filter(ActivityLog.action == action).all()
