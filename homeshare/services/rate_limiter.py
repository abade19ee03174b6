"""Sliding-window limiter for upload attempts."""

import logging
import threading
import time
from collections import deque
from typing import Optional

from ..errors import RateLimitExceeded

logger = logging.getLogger(__name__)


class UploadRateLimiter:
    """Allow at most ``limit`` hits per key within any ``window`` seconds.

    Excess attempts are rejected immediately, never queued. Keys whose
    hits have all left the window are forgotten, at most once per window.
    """

    def __init__(self, limit: int, window: float, clock=time.monotonic):
        self.limit = limit
        self.window = window
        self._clock = clock
        self._hits: dict[str, deque[float]] = {}
        self._last_sweep = clock()
        self._lock = threading.Lock()

    def hit(self, key: str) -> None:
        now = self._clock()
        with self._lock:
            if now - self._last_sweep >= self.window:
                self._sweep(now)
            hits = self._hits.setdefault(key, deque())
            while hits and hits[0] <= now - self.window:
                hits.popleft()
            if len(hits) >= self.limit:
                retry_after = hits[0] + self.window - now
                logger.warning(f"Upload rate limit hit for {key}, retry in {retry_after:.0f}s")
                raise RateLimitExceeded(retry_after)
            hits.append(now)

    def tracked_keys(self) -> int:
        with self._lock:
            return len(self._hits)

    def _sweep(self, now: float) -> None:
        cutoff = now - self.window
        stale = [key for key, hits in self._hits.items() if not hits or hits[-1] <= cutoff]
        for key in stale:
            del self._hits[key]
        self._last_sweep = now
        if stale:
            logger.debug(f"Forgot {len(stale)} idle upload client(s)")

    def reset(self, key: Optional[str] = None) -> None:
        with self._lock:
            if key is None:
                self._hits.clear()
            else:
                self._hits.pop(key, None)
