# src/scheduler/tasks.py
import logging
from typing import Optional
from apscheduler.schedulers.background import BackgroundScheduler
from sqlalchemy.orm import Session
from config import settings
from database import SessionLocal
from errors import StorageError
from subscription.entitlement import EntitlementEngine
from subscription.services import SubscriberService

logger = logging.getLogger(__name__)


def reconcile_expired_subscribers(session_factory=SessionLocal) -> int:
    """Persist the `expired` status of active subscribers past their expiry date."""
    logger.info("Starting reconcile_expired_subscribers task")
    db: Session = session_factory()
    updated = 0
    try:
        updated = EntitlementEngine(db).reconcile_expired()
        logger.info(f"Marked {updated} subscribers as expired")
    except StorageError:
        logger.error("reconcile_expired_subscribers failed; will retry on next run")
    finally:
        db.close()
    logger.info("Finished reconcile_expired_subscribers task")
    return updated


def close_idle_sessions(session_factory=SessionLocal) -> int:
    """Deactivate player sessions idle for longer than SESSION_IDLE_MINUTES."""
    db: Session = session_factory()
    closed = 0
    try:
        closed = SubscriberService(db).close_idle_sessions(settings.SESSION_IDLE_MINUTES)
        if closed:
            logger.info(f"Closed {closed} idle sessions")
    except StorageError:
        logger.error("close_idle_sessions failed; will retry on next run")
    finally:
        db.close()
    return closed


def start_scheduler() -> Optional[BackgroundScheduler]:
    """Start the background scheduler."""
    if not settings.SCHEDULER_ENABLED:
        logger.info("Background scheduler disabled")
        return None
    scheduler = BackgroundScheduler()
    scheduler.add_job(close_idle_sessions, 'interval', minutes=15, id="close_idle_sessions")
    if settings.EXPIRY_RECONCILIATION_ENABLED:
        scheduler.add_job(
            reconcile_expired_subscribers,
            'interval',
            minutes=settings.EXPIRY_RECONCILIATION_MINUTES,
            id="reconcile_expired_subscribers",
        )
    scheduler.start()
    return scheduler
