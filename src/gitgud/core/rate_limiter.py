"""
Fixed-window per-client rate limiter on top of the bounded TTL cache.

A window starts on a client's first request and is replaced wholesale once
``now > reset_at``. Counting is per fixed window, so up to
``2 * max_requests`` requests can land around a window boundary.
"""

import math
import threading
import time
from dataclasses import dataclass
from typing import Callable

from gitgud.core.cache import BoundedTTLCache
from gitgud.core.logging import get_logger

_LOG = get_logger(__name__)

DEFAULT_MAX_REQUESTS = 10
DEFAULT_WINDOW_SECONDS = 60
DEFAULT_MAX_CLIENTS = 1000


@dataclass
class RateLimitWindow:
    count: int
    reset_at: float


@dataclass(frozen=True)
class RateLimitResult:
    allowed: bool
    remaining: int
    reset_at: float

    def retry_after_seconds(self, now: float) -> int:
        return max(0, math.ceil(self.reset_at - now))


class RateLimiter:
    def __init__(
        self,
        max_requests: int = DEFAULT_MAX_REQUESTS,
        window_seconds: float = DEFAULT_WINDOW_SECONDS,
        max_clients: int = DEFAULT_MAX_CLIENTS,
        clock: Callable[[], float] = time.time,
    ) -> None:
        if max_requests <= 0:
            raise ValueError(f"max_requests must be positive, got {max_requests}")
        if window_seconds <= 0:
            raise ValueError(f"window_seconds must be positive, got {window_seconds}")
        self.max_requests = max_requests
        self.window_seconds = window_seconds
        self._clock = clock
        self._windows: BoundedTTLCache[RateLimitWindow] = BoundedTTLCache(
            max_clients, window_seconds, clock
        )
        # get-then-set for one client must not interleave with another check
        self._lock = threading.Lock()

    def now(self) -> float:
        return self._clock()

    def check(self, client_id: str) -> RateLimitResult:
        with self._lock:
            now = self._clock()
            window = self._windows.get(client_id)

            if window is None or now > window.reset_at:
                reset_at = now + self.window_seconds
                self._windows.set(client_id, RateLimitWindow(count=1, reset_at=reset_at))
                return RateLimitResult(
                    allowed=True, remaining=self.max_requests - 1, reset_at=reset_at
                )

            if window.count >= self.max_requests:
                _LOG.warning(
                    "Rate limit exceeded",
                    extra={"client_id": client_id, "count": window.count},
                )
                return RateLimitResult(allowed=False, remaining=0, reset_at=window.reset_at)

            window.count += 1
            self._windows.set(client_id, window)
            return RateLimitResult(
                allowed=True,
                remaining=self.max_requests - window.count,
                reset_at=window.reset_at,
            )
