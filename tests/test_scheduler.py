# tests/test_scheduler.py
import unittest
from datetime import datetime, timedelta
from unittest import mock

from panel_support import PanelTestCase
from config import settings
from database import SessionLocal
from scheduler import tasks
from subscription.models import Subscriber, SubscriberSession, SubscriberStatus


class SchedulerTaskTests(PanelTestCase):
    def test_reconcile_persists_expired_status(self) -> None:
        late = self.make_subscriber("late", expiry_date=datetime.utcnow() - timedelta(hours=1))
        fine = self.make_subscriber("fine")

        updated = tasks.reconcile_expired_subscribers(SessionLocal)

        self.assertEqual(updated, 1)
        self.db.expire_all()
        self.assertEqual(self.db.get(Subscriber, late.id).status, SubscriberStatus.EXPIRED)
        self.assertEqual(self.db.get(Subscriber, fine.id).status, SubscriberStatus.ACTIVE)

    def test_close_idle_sessions(self) -> None:
        alice = self.make_subscriber("alice")
        stale = SubscriberSession(
            user_id=alice.id, ip_address="10.0.0.1", device="vlc",
            last_activity=datetime.utcnow() - timedelta(minutes=settings.SESSION_IDLE_MINUTES + 5),
        )
        recent = SubscriberSession(user_id=alice.id, ip_address="10.0.0.2", device="kodi")
        self.db.add_all([stale, recent])
        self.db.commit()

        closed = tasks.close_idle_sessions(SessionLocal)

        self.assertEqual(closed, 1)
        self.db.expire_all()
        self.assertFalse(self.db.get(SubscriberSession, stale.id).is_active)
        self.assertTrue(self.db.get(SubscriberSession, recent.id).is_active)


class StartSchedulerTests(unittest.TestCase):
    def test_disabled_scheduler_is_not_started(self) -> None:
        with mock.patch.object(settings, "SCHEDULER_ENABLED", False):
            self.assertIsNone(tasks.start_scheduler())

    def test_jobs_follow_settings(self) -> None:
        with mock.patch.object(settings, "SCHEDULER_ENABLED", True), \
                mock.patch.object(settings, "EXPIRY_RECONCILIATION_ENABLED", True), \
                mock.patch.object(tasks, "BackgroundScheduler") as scheduler_cls:
            scheduler = tasks.start_scheduler()

        job_ids = [call.kwargs["id"] for call in scheduler_cls.return_value.add_job.call_args_list]
        self.assertEqual(job_ids, ["close_idle_sessions", "reconcile_expired_subscribers"])
        scheduler.start.assert_called_once()


if __name__ == "__main__":
    unittest.main()
