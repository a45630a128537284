# tests/test_entitlement.py
import unittest
from datetime import datetime, timedelta
from unittest import mock

from sqlalchemy.exc import OperationalError

from panel_support import PanelTestCase
from errors import StorageError
from subscription.entitlement import DenialReason, EntitlementEngine, Outcome
from subscription.models import Subscriber, SubscriberStatus


class EvaluateTests(PanelTestCase):
    def setUp(self) -> None:
        super().setUp()
        self.engine = EntitlementEngine(self.db)
        self.now = datetime(2030, 6, 1, 12, 0, 0)

    def test_active_and_unexpired_is_granted(self) -> None:
        self.make_subscriber("alice", expiry_date=self.now + timedelta(days=1))

        decision = self.engine.evaluate("alice", "secret", self.now)

        self.assertTrue(decision.granted)
        self.assertEqual(decision.subscriber.username, "alice")

    def test_expiry_exactly_now_is_still_granted(self) -> None:
        self.make_subscriber("alice", expiry_date=self.now)

        self.assertTrue(self.engine.evaluate("alice", "secret", self.now).granted)

    def test_suspended_is_denied_regardless_of_expiry(self) -> None:
        self.make_subscriber("alice", status=SubscriberStatus.SUSPENDED, expiry_date=self.now + timedelta(days=365))

        decision = self.engine.evaluate("alice", "secret", self.now)

        self.assertEqual(decision.outcome, Outcome.DENIED)
        self.assertEqual(decision.reason, DenialReason.SUSPENDED)

    def test_active_past_expiry_is_denied_expired(self) -> None:
        self.make_subscriber("alice", expiry_date=self.now - timedelta(seconds=1))

        decision = self.engine.evaluate("alice", "secret", self.now)

        self.assertEqual(decision.outcome, Outcome.DENIED)
        self.assertEqual(decision.reason, DenialReason.EXPIRED)

    def test_stored_expired_status_is_denied(self) -> None:
        self.make_subscriber("alice", status=SubscriberStatus.EXPIRED, expiry_date=self.now + timedelta(days=10))

        decision = self.engine.evaluate("alice", "secret", self.now)

        self.assertEqual(decision.reason, DenialReason.EXPIRED)

    def test_unknown_user_is_not_found(self) -> None:
        self.assertEqual(self.engine.evaluate("ghost", "secret", self.now).outcome, Outcome.NOT_FOUND)

    def test_wrong_password_is_invalid_credentials(self) -> None:
        self.make_subscriber("alice")

        decision = self.engine.evaluate("alice", "wrong", self.now)

        self.assertEqual(decision.outcome, Outcome.INVALID_CREDENTIALS)

    def test_evaluation_never_writes_status(self) -> None:
        alice = self.make_subscriber("alice", expiry_date=self.now - timedelta(days=3))

        self.engine.evaluate("alice", "secret", self.now)

        self.db.expire_all()
        self.assertEqual(self.db.get(Subscriber, alice.id).status, SubscriberStatus.ACTIVE)

    def test_authenticate_ignores_status(self) -> None:
        self.make_subscriber("alice", status=SubscriberStatus.SUSPENDED)

        self.assertTrue(self.engine.authenticate("alice", "secret").granted)
        self.assertFalse(self.engine.authenticate("alice", None).granted)


class BulkExtendTests(PanelTestCase):
    def test_extends_existing_and_skips_missing(self) -> None:
        a = self.make_subscriber("a", expiry_date=datetime(2030, 1, 1))
        c = self.make_subscriber("c", expiry_date=datetime(2030, 3, 1))
        missing_id = c.id + 100

        response = self.client.post(
            "/api/users/bulk-extend",
            json={"userIds": [a.id, missing_id, c.id], "days": 30},
            headers=self.auth,
        )

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["extended"], 2)
        self.db.expire_all()
        self.assertEqual(self.db.get(Subscriber, a.id).expiry_date, datetime(2030, 1, 31))
        self.assertEqual(self.db.get(Subscriber, c.id).expiry_date, datetime(2030, 3, 31))

        entries = self.activity("Bulk Extend")
        self.assertEqual(len(entries), 1)
        self.assertEqual(entries[0].details, "Extended 2 users by 30 days (1 not found)")

    def test_duplicate_ids_extend_once(self) -> None:
        a = self.make_subscriber("a", expiry_date=datetime(2030, 1, 1))

        extended = EntitlementEngine(self.db).bulk_extend([a.id, a.id], 1, self.root.id)

        self.assertEqual(extended, 1)
        self.db.expire_all()
        self.assertEqual(self.db.get(Subscriber, a.id).expiry_date, datetime(2030, 1, 2))

    def test_reactivates_reconciled_subscriber(self) -> None:
        a = self.make_subscriber(
            "a", status=SubscriberStatus.EXPIRED, expiry_date=datetime.utcnow() - timedelta(days=2)
        )

        EntitlementEngine(self.db).bulk_extend([a.id], 30, self.root.id)

        self.db.expire_all()
        self.assertEqual(self.db.get(Subscriber, a.id).status, SubscriberStatus.ACTIVE)

    def test_rejects_non_positive_days(self) -> None:
        a = self.make_subscriber("a")

        response = self.client.post(
            "/api/users/bulk-extend", json={"userIds": [a.id], "days": 0}, headers=self.auth
        )

        self.assertEqual(response.status_code, 400)

    def test_rejects_day_counts_beyond_a_century(self) -> None:
        a = self.make_subscriber("a")

        response = self.client.post(
            "/api/users/bulk-extend", json={"userIds": [a.id], "days": 10000000}, headers=self.auth
        )

        self.assertEqual(response.status_code, 400)

    def test_expiry_past_calendar_end_is_rejected_without_changes(self) -> None:
        a = self.make_subscriber("a", expiry_date=datetime(2030, 1, 1))
        b = self.make_subscriber("b", expiry_date=datetime(9990, 1, 1))

        response = self.client.post(
            "/api/users/bulk-extend", json={"userIds": [a.id, b.id], "days": 36500}, headers=self.auth
        )

        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json(), {"error": "Expiry date out of range"})
        self.db.expire_all()
        self.assertEqual(self.db.get(Subscriber, a.id).expiry_date, datetime(2030, 1, 1))
        self.assertEqual(self.db.get(Subscriber, b.id).expiry_date, datetime(9990, 1, 1))
        self.assertEqual(self.activity("Bulk Extend"), [])

    def test_failed_commit_leaves_no_partial_state(self) -> None:
        a = self.make_subscriber("a", expiry_date=datetime(2030, 1, 1))
        b = self.make_subscriber("b", expiry_date=datetime(2030, 1, 1))
        engine = EntitlementEngine(self.db)

        with mock.patch.object(self.db, "commit", side_effect=OperationalError("COMMIT", {}, Exception("disk I/O error"))):
            with self.assertRaises(StorageError):
                engine.bulk_extend([a.id, b.id], 10, self.root.id)

        self.db.expire_all()
        self.assertEqual(self.db.get(Subscriber, a.id).expiry_date, datetime(2030, 1, 1))
        self.assertEqual(self.db.get(Subscriber, b.id).expiry_date, datetime(2030, 1, 1))
        self.assertEqual(self.activity("Bulk Extend"), [])


class ReconcileTests(PanelTestCase):
    def test_marks_only_active_subscribers_past_expiry(self) -> None:
        now = datetime(2030, 6, 1)
        late = self.make_subscriber("late", expiry_date=now - timedelta(days=1))
        fine = self.make_subscriber("fine", expiry_date=now + timedelta(days=1))
        banned = self.make_subscriber("banned", status=SubscriberStatus.SUSPENDED, expiry_date=now - timedelta(days=1))

        updated = EntitlementEngine(self.db).reconcile_expired(now)

        self.assertEqual(updated, 1)
        self.db.expire_all()
        self.assertEqual(self.db.get(Subscriber, late.id).status, SubscriberStatus.EXPIRED)
        self.assertEqual(self.db.get(Subscriber, fine.id).status, SubscriberStatus.ACTIVE)
        self.assertEqual(self.db.get(Subscriber, banned.id).status, SubscriberStatus.SUSPENDED)
        self.assertEqual(len(self.activity("Expiry Reconciliation")), 1)


if __name__ == "__main__":
    unittest.main()
