# tests/test_subscribers.py
import unittest
from datetime import datetime
from unittest import mock

from sqlalchemy.exc import IntegrityError

from panel_support import PanelTestCase
from auth.services import AuthService
from database import commit_or_raise
from errors import DuplicateEntry, ValidationError
from subscription.models import Subscriber, SubscriberAgent, SubscriberSession, SubscriberStatus


class SubscriberCrudTests(PanelTestCase):
    def _payload(self, **overrides) -> dict:
        payload = {
            "username": "alice",
            "email": "alice@example.com",
            "password": "secret",
            "expiry_date": "2030-01-01T00:00:00",
        }
        payload.update(overrides)
        return payload

    def test_create_subscriber(self) -> None:
        package = self.make_package("Gold", "25.00", connections=3)
        reseller = self.make_reseller()

        response = self.client.post(
            "/api/users",
            json=self._payload(package_id=package.id, reseller_id=reseller.id, revenue="25.00"),
            headers=self.auth,
        )

        self.assertEqual(response.status_code, 200)
        body = response.json()
        self.assertEqual(body["status"], "active")
        self.assertEqual(body["package_name"], "Gold")
        self.assertEqual(body["reseller_name"], "dealer")
        self.assertEqual(body["max_connections"], 3)
        self.assertNotIn("password_hash", body)

        stored = self.db.query(Subscriber).filter(Subscriber.username == "alice").one()
        self.assertTrue(AuthService.verify_password("secret", stored.password_hash))
        self.assertEqual(len(self.activity("User Created")), 1)

    def test_timezone_aware_expiry_is_stored_as_utc(self) -> None:
        response = self.client.post(
            "/api/users", json=self._payload(expiry_date="2030-01-01T08:00:00+08:00"), headers=self.auth
        )

        self.assertEqual(response.status_code, 200)
        stored = self.db.query(Subscriber).filter(Subscriber.username == "alice").one()
        self.assertEqual(stored.expiry_date, datetime(2030, 1, 1, 0, 0, 0))

    def test_duplicate_username_is_rejected(self) -> None:
        self.make_subscriber("alice")

        response = self.client.post(
            "/api/users", json=self._payload(email="other@example.com"), headers=self.auth
        )

        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json(), {"error": "Username or email already exists"})

    def test_unknown_package_is_rejected(self) -> None:
        response = self.client.post("/api/users", json=self._payload(package_id=999), headers=self.auth)

        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json(), {"error": "Package 999 does not exist"})

    def test_missing_expiry_is_a_validation_error(self) -> None:
        payload = self._payload()
        del payload["expiry_date"]

        response = self.client.post("/api/users", json=payload, headers=self.auth)

        self.assertEqual(response.status_code, 400)
        self.assertIn("expiry_date", response.json()["error"])

    def test_list_is_newest_first(self) -> None:
        self.make_subscriber("first")
        self.make_subscriber("second")

        listing = self.client.get("/api/users", headers=self.auth).json()

        self.assertEqual([s["username"] for s in listing], ["second", "first"])

    def test_get_missing_subscriber_is_404(self) -> None:
        response = self.client.get("/api/users/404", headers=self.auth)

        self.assertEqual(response.status_code, 404)
        self.assertEqual(response.json(), {"error": "User not found"})

    def test_partial_update(self) -> None:
        alice = self.make_subscriber("alice")

        response = self.client.put(
            f"/api/users/{alice.id}",
            json={"status": "suspended", "password": "changed"},
            headers=self.auth,
        )

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["status"], "suspended")
        self.assertEqual(response.json()["email"], "alice@example.com")
        self.db.expire_all()
        stored = self.db.get(Subscriber, alice.id)
        self.assertTrue(AuthService.verify_password("changed", stored.password_hash))
        entries = self.activity("User Updated")
        self.assertEqual(len(entries), 1)
        self.assertIn("password, status", entries[0].details)

    def test_update_rejects_null_expiry(self) -> None:
        alice = self.make_subscriber("alice")

        response = self.client.put(f"/api/users/{alice.id}", json={"expiry_date": None}, headers=self.auth)

        self.assertEqual(response.status_code, 400)

    def test_update_null_username_is_a_validation_error(self) -> None:
        alice = self.make_subscriber("alice")

        response = self.client.put(f"/api/users/{alice.id}", json={"username": None}, headers=self.auth)

        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json(), {"error": "username cannot be null"})
        self.db.expire_all()
        self.assertEqual(self.db.get(Subscriber, alice.id).username, "alice")

    def test_update_missing_subscriber_is_404(self) -> None:
        response = self.client.put("/api/users/404", json={"status": "active"}, headers=self.auth)

        self.assertEqual(response.status_code, 404)

    def test_delete_cascades_to_sessions_and_agents(self) -> None:
        alice = self.make_subscriber("alice")
        self.db.add(SubscriberSession(user_id=alice.id, ip_address="10.0.0.1", device="vlc"))
        self.db.add(SubscriberAgent(user_id=alice.id, ip_address="10.0.0.1", device="vlc"))
        self.db.commit()

        response = self.client.delete(f"/api/users/{alice.id}", headers=self.auth)

        self.assertEqual(response.json()["deleted"], 1)
        self.db.expire_all()
        self.assertEqual(self.db.query(SubscriberSession).count(), 0)
        self.assertEqual(self.db.query(SubscriberAgent).count(), 0)
        self.assertEqual(len(self.activity("User Deleted")), 1)

    def test_delete_missing_subscriber_is_a_no_op(self) -> None:
        response = self.client.delete("/api/users/404", headers=self.auth)

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["deleted"], 0)

    def test_connections_lists_agents_and_sessions(self) -> None:
        alice = self.make_subscriber("alice")
        self.db.add(SubscriberAgent(user_id=alice.id, ip_address="10.0.0.1", device="vlc"))
        self.db.commit()

        response = self.client.get(f"/api/users/{alice.id}/connections", headers=self.auth)

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["agents"][0]["device"], "vlc")
        self.assertEqual(response.json()["sessions"], [])

    def test_default_status_is_active(self) -> None:
        self.client.post("/api/users", json=self._payload(), headers=self.auth)

        stored = self.db.query(Subscriber).filter(Subscriber.username == "alice").one()
        self.assertEqual(stored.status, SubscriberStatus.ACTIVE)
        self.assertEqual(stored.max_connections, 1)


class CommitErrorMappingTests(PanelTestCase):
    def _commit_failing_with(self, message: str) -> None:
        error = IntegrityError("INSERT", {}, Exception(message))
        with mock.patch.object(self.db, "commit", side_effect=error):
            commit_or_raise(self.db, "create user")

    def test_unique_violation_is_a_duplicate(self) -> None:
        with self.assertRaises(DuplicateEntry):
            self._commit_failing_with("UNIQUE constraint failed: users.username")

    def test_other_constraint_failures_are_validation_errors(self) -> None:
        with self.assertRaises(ValidationError):
            self._commit_failing_with("NOT NULL constraint failed: users.username")


if __name__ == "__main__":
    unittest.main()
