from __future__ import annotations

import logging
import threading
from collections import defaultdict, deque
from time import monotonic

from fastapi import Request

from movie_library.core.errors import APIError
from movie_library.core.settings import get_settings

logger = logging.getLogger(__name__)


class SlidingWindowRateLimiter:
    def __init__(self, *, window_seconds: int, max_requests: int) -> None:
        self.window_seconds = window_seconds
        self.max_requests = max_requests
        self._events: dict[str, deque[float]] = defaultdict(deque)
        self._lock = threading.Lock()

    def hit(self, key: str) -> bool:
        now = monotonic()
        with self._lock:
            events = self._events[key]
            cutoff = now - self.window_seconds
            while events and events[0] <= cutoff:
                events.popleft()
            if len(events) >= self.max_requests:
                return False
            events.append(now)
            return True

    def reset(self, key: str | None = None) -> None:
        with self._lock:
            if key is None:
                self._events.clear()
            else:
                self._events.pop(key, None)


def _limiter_from_settings() -> SlidingWindowRateLimiter:
    settings = get_settings()
    return SlidingWindowRateLimiter(
        window_seconds=settings.auth_rate_limit_window_seconds,
        max_requests=settings.auth_rate_limit_max_requests,
    )


auth_limiter = _limiter_from_settings()


def client_key(request: Request) -> str:
    client_ip = request.client.host if request.client else "unknown"
    return f"{client_ip}:{request.url.path}"


def enforce_auth_rate_limit(request: Request) -> None:
    key = client_key(request)
    if not auth_limiter.hit(key):
        logger.warning("Rate limit exceeded for key=%s", key)
        raise APIError(status_code=429, code="rate_limited", message="Too many authentication requests")
