# src/subscription/entitlement.py
"""Entitlement decisions: may this subscriber stream right now?

Every credential exporter goes through `EntitlementEngine`. Decisions are
recomputed from the stored status and expiry date on each call and are never
cached; evaluating a subscriber never writes its stored status.
"""
import enum
import logging
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Iterable, Optional
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
from admin.models import ActorType
from admin.services import AuditLog
from auth.services import AuthService
from errors import StorageError, ValidationError
from subscription.models import Subscriber, SubscriberStatus

logger = logging.getLogger(__name__)


class Outcome(str, enum.Enum):
    GRANTED = "granted"
    NOT_FOUND = "not_found"
    INVALID_CREDENTIALS = "invalid_credentials"
    DENIED = "denied"


class DenialReason(str, enum.Enum):
    SUSPENDED = "suspended"
    EXPIRED = "expired"


@dataclass(frozen=True)
class EntitlementDecision:
    outcome: Outcome
    reason: Optional[DenialReason] = None
    subscriber: Optional[Subscriber] = None

    @property
    def granted(self) -> bool:
        return self.outcome is Outcome.GRANTED

    @classmethod
    def not_found(cls) -> "EntitlementDecision":
        return cls(Outcome.NOT_FOUND)

    @classmethod
    def invalid_credentials(cls, subscriber: Subscriber) -> "EntitlementDecision":
        return cls(Outcome.INVALID_CREDENTIALS, subscriber=subscriber)

    @classmethod
    def denied(cls, reason: DenialReason, subscriber: Subscriber) -> "EntitlementDecision":
        return cls(Outcome.DENIED, reason=reason, subscriber=subscriber)

    @classmethod
    def grant(cls, subscriber: Subscriber) -> "EntitlementDecision":
        return cls(Outcome.GRANTED, subscriber=subscriber)


class EntitlementEngine:
    def __init__(self, db: Session, audit: Optional[AuditLog] = None):
        self.db = db
        self.audit = audit or AuditLog(db)

    def get_subscriber(self, username: str) -> Optional[Subscriber]:
        if not username:
            return None
        return self.db.query(Subscriber).filter(Subscriber.username == username).first()

    @staticmethod
    def verify_password(plain_password: Optional[str], subscriber: Subscriber) -> bool:
        return AuthService.verify_password(plain_password, subscriber.password_hash)

    @staticmethod
    def assess(subscriber: Subscriber, now: Optional[datetime] = None) -> EntitlementDecision:
        """Status and expiry check for an already identified subscriber."""
        now = now or datetime.utcnow()
        if subscriber.status == SubscriberStatus.SUSPENDED:
            return EntitlementDecision.denied(DenialReason.SUSPENDED, subscriber)
        if subscriber.status == SubscriberStatus.EXPIRED:
            return EntitlementDecision.denied(DenialReason.EXPIRED, subscriber)
        if subscriber.expiry_date is None or subscriber.expiry_date < now:
            return EntitlementDecision.denied(DenialReason.EXPIRED, subscriber)
        return EntitlementDecision.grant(subscriber)

    def authenticate(self, username: str, password: Optional[str]) -> EntitlementDecision:
        """Password-only check; grants on a matching hash without looking at status."""
        subscriber = self.get_subscriber(username)
        if subscriber is None:
            return EntitlementDecision.not_found()
        if not self.verify_password(password, subscriber):
            return EntitlementDecision.invalid_credentials(subscriber)
        return EntitlementDecision.grant(subscriber)

    def evaluate(self, username: str, password: Optional[str], now: Optional[datetime] = None) -> EntitlementDecision:
        decision = self.authenticate(username, password)
        if not decision.granted:
            return decision
        return self.assess(decision.subscriber, now)

    def evaluate_without_password(self, username: str, now: Optional[datetime] = None) -> EntitlementDecision:
        subscriber = self.get_subscriber(username)
        if subscriber is None:
            return EntitlementDecision.not_found()
        return self.assess(subscriber, now)

    def bulk_extend(self, subscriber_ids: Iterable[int], days: int, admin_id: Optional[int] = None) -> int:
        """Push the expiry date of every listed subscriber forward by `days`.

        Applied as a single transaction; ids that do not exist are skipped.
        """
        ids = sorted(set(subscriber_ids))
        if not ids:
            return 0
        delta = timedelta(days=days)
        now = datetime.utcnow()
        try:
            subscribers = (
                self.db.query(Subscriber)
                .filter(Subscriber.id.in_(ids))
                .with_for_update()
                .all()
            )
            for subscriber in subscribers:
                subscriber.expiry_date = subscriber.expiry_date + delta
                # Undo a reconciled expiry once the new date is in the future
                if subscriber.status == SubscriberStatus.EXPIRED and subscriber.expiry_date >= now:
                    subscriber.status = SubscriberStatus.ACTIVE
            self.db.commit()
        except OverflowError:
            self.db.rollback()
            raise ValidationError("Expiry date out of range")
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Bulk extend of {len(ids)} users failed: {e}", exc_info=True)
            raise StorageError("Failed to extend users")

        extended = len(subscribers)
        details = f"Extended {extended} users by {days} days"
        if extended != len(ids):
            details += f" ({len(ids) - extended} not found)"
        self.audit.record(ActorType.ADMIN, admin_id, "Bulk Extend", details)
        return extended

    def reconcile_expired(self, now: Optional[datetime] = None) -> int:
        """Persist `expired` for active subscribers whose expiry date has passed."""
        now = now or datetime.utcnow()
        try:
            updated = (
                self.db.query(Subscriber)
                .filter(Subscriber.status == SubscriberStatus.ACTIVE, Subscriber.expiry_date < now)
                .update({Subscriber.status: SubscriberStatus.EXPIRED}, synchronize_session=False)
            )
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Expiry reconciliation failed: {e}", exc_info=True)
            raise StorageError("Failed to reconcile expired users")
        if updated:
            self.audit.record(ActorType.ADMIN, None, "Expiry Reconciliation", f"Marked {updated} users as expired")
        return updated
