"""In-process sliding-window rate limiter."""
from __future__ import annotations

import threading
import time
from collections import deque
from typing import Callable

from domain.errors import RateLimitExceeded
from domain.interfaces import RateLimiter


class SlidingWindowRateLimiter(RateLimiter):
    """Admit at most ``max_requests`` per ``window_seconds`` for each key.

    Counters live in this process only; deployments with several instances
    should plug in a limiter backed by a shared store instead.
    """

    def __init__(
        self,
        max_requests: int = 60,
        window_seconds: float = 60.0,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        if max_requests < 1 or window_seconds <= 0:
            raise ValueError("max_requests and window_seconds must be positive")
        self.max_requests = max_requests
        self.window_seconds = window_seconds
        self._clock = clock
        self._hits: dict[str, deque[float]] = {}
        self._lock = threading.Lock()
        self._last_sweep = clock()

    def hit(self, key: str) -> None:
        now = self._clock()
        with self._lock:
            if now - self._last_sweep >= self.window_seconds:
                self._evict_idle(now)
                self._last_sweep = now
            hits = self._hits.setdefault(key, deque())
            while hits and now - hits[0] >= self.window_seconds:
                hits.popleft()
            if len(hits) >= self.max_requests:
                raise RateLimitExceeded(key, self.window_seconds - (now - hits[0]))
            hits.append(now)

    def _evict_idle(self, now: float) -> None:
        # A key is idle once its newest hit is outside the window.
        idle = [key for key, hits in self._hits.items() if not hits or now - hits[-1] >= self.window_seconds]
        for key in idle:
            del self._hits[key]

    def reset(self, key: str | None = None) -> None:
        with self._lock:
            if key is None:
                self._hits.clear()
            else:
                self._hits.pop(key, None)


__all__ = ["SlidingWindowRateLimiter"]
