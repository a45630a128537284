# src/subscription/services.py
import logging
from fastapi import Request
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, joinedload
from datetime import datetime, timedelta
from typing import List, Optional
from admin.models import ActorType
from admin.services import AuditLog
from auth.services import AuthService
from catalog.models import Package
from resellers.models import Reseller
from subscription.models import Subscriber, SubscriberAgent, SubscriberSession
from subscription.schemas import SubscriberCreate, SubscriberUpdate, SubscriberResponse, SubscriberConnections
from database import apply_changes, commit_or_raise
from errors import NotFound, ValidationError

logger = logging.getLogger(__name__)

REQUIRED_FIELDS = ("username", "email", "status", "expiry_date", "max_connections", "revenue")


class SubscriberService:
    def __init__(self, db: Session, audit: Optional[AuditLog] = None):
        self.db = db
        self.audit = audit or AuditLog(db)

    def _query(self):
        return self.db.query(Subscriber).options(
            joinedload(Subscriber.package), joinedload(Subscriber.reseller)
        )

    def _check_references(self, package_id: Optional[int], reseller_id: Optional[int]) -> Optional[Package]:
        package = None
        if package_id is not None:
            package = self.db.query(Package).filter(Package.id == package_id).first()
            if package is None:
                raise ValidationError(f"Package {package_id} does not exist")
        if reseller_id is not None:
            if self.db.query(Reseller.id).filter(Reseller.id == reseller_id).first() is None:
                raise ValidationError(f"Reseller {reseller_id} does not exist")
        return package

    def get_subscriber(self, subscriber_id: int) -> Subscriber:
        subscriber = self._query().filter(Subscriber.id == subscriber_id).first()
        if subscriber is None:
            raise NotFound("User not found")
        return subscriber

    def list_subscribers(self) -> List[SubscriberResponse]:
        subscribers = self._query().order_by(Subscriber.created_at.desc(), Subscriber.id.desc()).all()
        return [SubscriberResponse.from_orm(s) for s in subscribers]

    def create_subscriber(self, data: SubscriberCreate, admin_id: int) -> SubscriberResponse:
        package = self._check_references(data.package_id, data.reseller_id)
        max_connections = data.max_connections
        if max_connections is None:
            max_connections = package.connections if package else 1

        subscriber = Subscriber(
            username=data.username,
            email=data.email,
            password_hash=AuthService.hash_password(data.password),
            package_id=data.package_id,
            status=data.status,
            expiry_date=data.expiry_date,
            max_connections=max_connections,
            revenue=data.revenue,
            reseller_id=data.reseller_id,
        )
        self.db.add(subscriber)
        commit_or_raise(self.db, "create user")
        self.db.refresh(subscriber)
        self.audit.record(ActorType.ADMIN, admin_id, "User Created", f"Created user: {subscriber.username}")
        return SubscriberResponse.from_orm(subscriber)

    def update_subscriber(self, subscriber_id: int, data: SubscriberUpdate, admin_id: int) -> SubscriberResponse:
        subscriber = self.get_subscriber(subscriber_id)
        changes = data.model_dump(exclude_unset=True)
        password = changes.pop("password", None)
        self._check_references(changes.get("package_id"), changes.get("reseller_id"))

        apply_changes(subscriber, changes, REQUIRED_FIELDS)
        if password is not None:
            subscriber.password_hash = AuthService.hash_password(password)
        commit_or_raise(self.db, "update user")
        self.db.refresh(subscriber)

        summary = ", ".join(sorted(list(changes) + (["password"] if password is not None else [])))
        self.audit.record(
            ActorType.ADMIN, admin_id, "User Updated",
            f"Updated user ID: {subscriber_id} ({summary or 'no changes'})"
        )
        return SubscriberResponse.from_orm(subscriber)

    def delete_subscriber(self, subscriber_id: int, admin_id: int) -> int:
        """Delete a subscriber and its sessions; a missing id deletes nothing."""
        subscriber = self.db.query(Subscriber).filter(Subscriber.id == subscriber_id).first()
        deleted = 0
        if subscriber is not None:
            self.db.delete(subscriber)
            commit_or_raise(self.db, "delete user")
            deleted = 1
        self.audit.record(ActorType.ADMIN, admin_id, "User Deleted", f"Deleted user ID: {subscriber_id}")
        return deleted

    def get_connections(self, subscriber_id: int) -> SubscriberConnections:
        subscriber = self.get_subscriber(subscriber_id)
        agents = (
            self.db.query(SubscriberAgent)
            .filter(SubscriberAgent.user_id == subscriber.id)
            .order_by(SubscriberAgent.connected_at.desc(), SubscriberAgent.id.desc())
            .all()
        )
        sessions = (
            self.db.query(SubscriberSession)
            .filter(SubscriberSession.user_id == subscriber.id)
            .order_by(SubscriberSession.last_activity.desc(), SubscriberSession.id.desc())
            .all()
        )
        return SubscriberConnections(agents=agents, sessions=sessions)

    @staticmethod
    def _client(request: Request):
        device = (request.headers.get("user-agent") or "unknown")[:100]
        ip_address = request.client.host if request.client else "unknown"
        return device, ip_address

    def record_agent(self, subscriber: Subscriber, request: Request) -> None:
        """Trace the device that fetched credentials; failures are only logged."""
        device, ip_address = self._client(request)
        agent = SubscriberAgent(user_id=subscriber.id, device=device, ip_address=ip_address)
        try:
            self.db.add(agent)
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Failed to record connection for user {subscriber.id}: {e}")

    def touch_session(self, subscriber: Subscriber, request: Request) -> int:
        """Open or refresh the active session for this device and return the active count."""
        device, ip_address = self._client(request)
        try:
            session = self.db.query(SubscriberSession).filter(
                SubscriberSession.user_id == subscriber.id,
                SubscriberSession.ip_address == ip_address,
                SubscriberSession.device == device,
                SubscriberSession.is_active == True,
            ).first()
            if session is None:
                self.db.add(SubscriberSession(user_id=subscriber.id, ip_address=ip_address, device=device))
            else:
                session.last_activity = datetime.utcnow()
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Failed to record session for user {subscriber.id}: {e}")
        return self.db.query(SubscriberSession).filter(
            SubscriberSession.user_id == subscriber.id,
            SubscriberSession.is_active == True,
        ).count()

    def close_idle_sessions(self, idle_minutes: int, now: Optional[datetime] = None) -> int:
        """Mark sessions without activity for `idle_minutes` as inactive."""
        cutoff = (now or datetime.utcnow()) - timedelta(minutes=idle_minutes)
        closed = (
            self.db.query(SubscriberSession)
            .filter(SubscriberSession.is_active == True, SubscriberSession.last_activity < cutoff)
            .update({SubscriberSession.is_active: False}, synchronize_session=False)
        )
        commit_or_raise(self.db, "close idle sessions")
        return closed
