# src/admin/services.py
import logging
from datetime import datetime
from typing import Optional, List, Dict
from sqlalchemy import func
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
from admin.models import ActivityLog, ActorType, Setting
from catalog.models import Package
from resellers.models import Reseller
from subscription.models import Subscriber, SubscriberStatus
from database import commit_or_raise

logger = logging.getLogger(__name__)


class AuditLog:
    """Write-only sink for activity log entries.

    Entries are written after the primary change has been committed. A failed
    write is rolled back and logged; it never propagates to the caller.
    """

    def __init__(self, db: Session):
        self.db = db

    def record(
            self,
            actor_type: ActorType,
            actor_id: Optional[int],
            action: str,
            details: Optional[str] = None,
            ip_address: Optional[str] = None
    ) -> Optional[ActivityLog]:
        entry = ActivityLog(
            user_type=actor_type,
            user_id=actor_id,
            action=action,
            details=details,
            ip_address=ip_address,
        )
        try:
            self.db.add(entry)
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Failed to write activity log '{action}' for {actor_type.value} {actor_id}: {e}", exc_info=True)
            return None
        return entry

    def recent(self, limit: int = 100) -> List[ActivityLog]:
        return (
            self.db.query(ActivityLog)
            .order_by(ActivityLog.created_at.desc(), ActivityLog.id.desc())
            .limit(limit)
            .all()
        )


class StatsService:
    def __init__(self, db: Session):
        self.db = db

    def summary(self, now: Optional[datetime] = None) -> Dict[str, object]:
        """Dashboard counters over subscribers and resellers."""
        now = now or datetime.utcnow()
        today_start = now.replace(hour=0, minute=0, second=0, microsecond=0)
        month_start = today_start.replace(day=1)

        def count(*criteria) -> int:
            return self.db.query(func.count(Subscriber.id)).filter(*criteria).scalar() or 0

        total_revenue = self.db.query(func.sum(Subscriber.revenue)).scalar()
        return {
            "totalUsers": count(),
            "activeUsers": count(Subscriber.status == SubscriberStatus.ACTIVE),
            "entitledUsers": count(Subscriber.status == SubscriberStatus.ACTIVE, Subscriber.expiry_date >= now),
            "expiredUsers": count(
                (Subscriber.status == SubscriberStatus.EXPIRED)
                | ((Subscriber.status == SubscriberStatus.ACTIVE) & (Subscriber.expiry_date < now))
            ),
            "suspendedUsers": count(Subscriber.status == SubscriberStatus.SUSPENDED),
            "totalResellers": self.db.query(func.count(Reseller.id)).scalar() or 0,
            "totalPackages": self.db.query(func.count(Package.id)).scalar() or 0,
            "totalRevenue": float(total_revenue or 0),
            "todayCreated": count(Subscriber.created_at >= today_start),
            "monthlyCreated": count(Subscriber.created_at >= month_start),
        }


class SettingsService:
    def __init__(self, db: Session, audit: AuditLog):
        self.db = db
        self.audit = audit

    def get_all(self) -> Dict[str, Optional[str]]:
        return {s.key_name: s.value for s in self.db.query(Setting).order_by(Setting.key_name).all()}

    def put(self, key: str, value: Optional[str], admin_id: int) -> Setting:
        setting = self.db.query(Setting).filter(Setting.key_name == key).first()
        if setting is None:
            setting = Setting(key_name=key)
            self.db.add(setting)
        setting.value = value
        commit_or_raise(self.db, "update setting")
        self.db.refresh(setting)
        self.audit.record(ActorType.ADMIN, admin_id, "Setting Updated", f"Updated setting: {key}")
        return setting
