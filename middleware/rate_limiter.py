# src/middleware/rate_limiter.py
import threading
import time
from collections import deque
from typing import Deque, Dict, Optional
from fastapi import Request
from fastapi.responses import JSONResponse
from config import settings


class RateLimiter:
    """Process-local sliding window limiter keyed by client address."""

    def __init__(self, limit: int, window_seconds: int):
        self.limit = limit
        self.window_seconds = window_seconds
        self._hits: Dict[str, Deque[float]] = {}
        self._lock = threading.Lock()
        self._last_sweep: Optional[float] = None

    def allow(self, key: str, now: Optional[float] = None) -> bool:
        now = time.monotonic() if now is None else now
        window_start = now - self.window_seconds
        with self._lock:
            self._sweep(now, window_start)
            bucket = self._hits.setdefault(key, deque())
            while bucket and bucket[0] <= window_start:
                bucket.popleft()
            if len(bucket) >= self.limit:
                return False
            bucket.append(now)
            return True

    def _sweep(self, now: float, window_start: float) -> None:
        """Once per window, forget clients whose last hit has left the window."""
        if self._last_sweep is not None and now - self._last_sweep < self.window_seconds:
            return
        self._last_sweep = now
        stale = [key for key, bucket in self._hits.items() if not bucket or bucket[-1] <= window_start]
        for key in stale:
            del self._hits[key]

    def tracked_clients(self) -> int:
        with self._lock:
            return len(self._hits)

    def reset(self) -> None:
        with self._lock:
            self._hits.clear()
            self._last_sweep = None


rate_limiter = RateLimiter(settings.RATE_LIMIT_REQUESTS, settings.RATE_LIMIT_WINDOW_SECONDS)


async def rate_limit_requests(request: Request, call_next):
    """Reject /api/ requests above the configured ceiling per client."""
    if settings.RATE_LIMIT_ENABLED and request.url.path.startswith("/api/"):
        client = request.client.host if request.client else "unknown"
        if not rate_limiter.allow(client):
            return JSONResponse(
                status_code=429,
                content={"error": "Too many requests"},
                headers={"Retry-After": str(rate_limiter.window_seconds)},
            )
    return await call_next(request)
