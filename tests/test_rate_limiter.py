# tests/test_rate_limiter.py
import unittest
from unittest import mock

from fastapi import FastAPI
from fastapi.testclient import TestClient

from config import settings
from middleware.rate_limiter import RateLimiter, rate_limit_requests


class RateLimiterTests(unittest.TestCase):
    def test_blocks_above_limit_within_window(self) -> None:
        limiter = RateLimiter(limit=3, window_seconds=60)

        results = [limiter.allow("10.0.0.1", now=t) for t in (0, 1, 2, 3)]

        self.assertEqual(results, [True, True, True, False])

    def test_window_slides(self) -> None:
        limiter = RateLimiter(limit=2, window_seconds=60)
        limiter.allow("10.0.0.1", now=0)
        limiter.allow("10.0.0.1", now=30)

        self.assertFalse(limiter.allow("10.0.0.1", now=59))
        self.assertTrue(limiter.allow("10.0.0.1", now=60.5))

    def test_clients_are_counted_separately(self) -> None:
        limiter = RateLimiter(limit=1, window_seconds=60)

        self.assertTrue(limiter.allow("10.0.0.1", now=0))
        self.assertTrue(limiter.allow("10.0.0.2", now=0))
        self.assertFalse(limiter.allow("10.0.0.1", now=1))

    def test_reset_clears_history(self) -> None:
        limiter = RateLimiter(limit=1, window_seconds=60)
        limiter.allow("10.0.0.1", now=0)

        limiter.reset()

        self.assertTrue(limiter.allow("10.0.0.1", now=1))

    def test_idle_clients_are_forgotten(self) -> None:
        limiter = RateLimiter(limit=5, window_seconds=60)
        limiter.allow("10.0.0.1", now=0)
        limiter.allow("10.0.0.2", now=30)

        limiter.allow("10.0.0.3", now=61)

        self.assertNotIn("10.0.0.1", limiter._hits)
        self.assertIn("10.0.0.2", limiter._hits)
        self.assertEqual(limiter.tracked_clients(), 2)


class RateLimitMiddlewareTests(unittest.TestCase):
    def setUp(self) -> None:
        app = FastAPI()
        app.middleware("http")(rate_limit_requests)

        @app.get("/api/ping")
        def ping():
            return {"ok": True}

        @app.get("/player_api.php")
        def player():
            return {"ok": True}

        self.client = TestClient(app)
        self.limiter = RateLimiter(limit=2, window_seconds=900)

    def test_api_paths_answer_429_above_limit(self) -> None:
        with mock.patch.object(settings, "RATE_LIMIT_ENABLED", True), \
                mock.patch("middleware.rate_limiter.rate_limiter", self.limiter):
            codes = [self.client.get("/api/ping").status_code for _ in range(3)]
            blocked = self.client.get("/api/ping")

        self.assertEqual(codes, [200, 200, 429])
        self.assertEqual(blocked.json(), {"error": "Too many requests"})
        self.assertEqual(blocked.headers["retry-after"], "900")

    def test_player_api_is_not_limited(self) -> None:
        with mock.patch.object(settings, "RATE_LIMIT_ENABLED", True), \
                mock.patch("middleware.rate_limiter.rate_limiter", self.limiter):
            codes = [self.client.get("/player_api.php").status_code for _ in range(4)]

        self.assertEqual(codes, [200, 200, 200, 200])


if __name__ == "__main__":
    unittest.main()
