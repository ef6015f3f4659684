# =============================================================================
# app/rate_limit.py - Per-Route Request Throttling
# =============================================================================
# Fixed-window counters keyed by client IP and request path, kept in process
# memory. Each router is mounted with one of the tiers below:
#
#   public         500 requests / 15 minutes   (browse, categories, profiles)
#   authenticated  200 requests / 15 minutes   (bookings, messages, uploads)
#   search          60 requests / minute
#   ai              50 requests / hour
#
# Counters are per worker process; a multi-worker deployment multiplies the
# effective limit by the worker count.
#
# Usage:
#   app.include_router(search.router, dependencies=[Depends(RATE_LIMITS["search"])])
# =============================================================================

import logging
import math
import threading
import time
from dataclasses import dataclass

from fastapi import Request

from app.config import settings
from app.dependencies import client_ip
from app.exceptions import RateLimitError

logger = logging.getLogger(__name__)

# Expired windows are swept once the store grows past this many keys
MAX_TRACKED_KEYS = 10_000


@dataclass
class _Window:
    count: int
    reset_at: float


class RateLimiter:
    """
    FastAPI dependency that allows `max_requests` per `window_seconds`.

    Raises RateLimitError (429) once a client's window is used up.
    """

    def __init__(self, name: str, max_requests: int, window_seconds: int):
        self.name = name
        self.max_requests = max_requests
        self.window_seconds = window_seconds
        self._windows: dict[str, _Window] = {}
        self._lock = threading.Lock()

    def __call__(self, request: Request) -> None:
        if not settings.RATE_LIMIT_ENABLED:
            return
        self.hit(f"{client_ip(request)}:{request.url.path}")

    def hit(self, key: str, now: float | None = None) -> None:
        """Count one request for `key`."""
        now = time.time() if now is None else now

        with self._lock:
            if len(self._windows) > MAX_TRACKED_KEYS:
                self._sweep(now)

            window = self._windows.get(key)
            if window is None or window.reset_at <= now:
                self._windows[key] = _Window(count=1, reset_at=now + self.window_seconds)
                return

            if window.count >= self.max_requests:
                retry_after = max(1, math.ceil(window.reset_at - now))
                logger.warning(f"Rate limit '{self.name}' hit by {key}")
                raise RateLimitError(
                    f"Too many requests. Limit: {self.max_requests} per {self.window_seconds} seconds",
                    limit=self.max_requests,
                    retry_after=retry_after,
                    reset_at=math.ceil(window.reset_at),
                )

            window.count += 1

    def _sweep(self, now: float) -> None:
        expired = [key for key, window in self._windows.items() if window.reset_at <= now]
        for key in expired:
            del self._windows[key]

    def reset(self) -> None:
        with self._lock:
            self._windows.clear()


RATE_LIMITS = {
    "public": RateLimiter("public", max_requests=500, window_seconds=15 * 60),
    "authenticated": RateLimiter("authenticated", max_requests=200, window_seconds=15 * 60),
    "search": RateLimiter("search", max_requests=60, window_seconds=60),
    "ai": RateLimiter("ai", max_requests=50, window_seconds=60 * 60),
}


def reset_rate_limits() -> None:
    """Forget every counter (used between tests)."""
    for limiter in RATE_LIMITS.values():
        limiter.reset()
