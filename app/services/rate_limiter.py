"""In-memory fixed window rate limiter.

Each caller key owns a bucket of points that refills to full capacity when
its window expires. The table lives for the lifetime of the process and is
not shared between server instances.
"""

import logging
import threading
import time
from dataclasses import dataclass
from typing import Callable, Dict

from ..errors import QuotaExceeded


logger = logging.getLogger(__name__)


@dataclass
class Bucket:
    """Remaining points for one key and the moment its window ends."""

    points_remaining: int
    window_reset_at: float


@dataclass(frozen=True)
class RateLimitStatus:
    """Snapshot handed back to the caller after an admitted request."""

    limit: int
    remaining: int
    reset_after: float


class RateLimiter:
    """Per-key admission control with ``points`` requests per ``duration`` seconds."""

    def __init__(
        self,
        points: int = 100,
        duration: float = 60.0,
        max_keys: int = 10000,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.points = points
        self.duration = duration
        self.max_keys = max_keys
        self._clock = clock
        self._buckets: Dict[str, Bucket] = {}
        self._lock = threading.Lock()

    def consume(self, key: str) -> RateLimitStatus:
        """
        Spend one point for ``key``.

        Raises:
            QuotaExceeded: If the key has no points left in its current window.
        """
        with self._lock:
            now = self._clock()
            bucket = self._buckets.get(key)

            if bucket is None:
                if len(self._buckets) >= self.max_keys:
                    self._sweep(now)
                bucket = Bucket(points_remaining=self.points, window_reset_at=now + self.duration)
                self._buckets[key] = bucket
            elif now >= bucket.window_reset_at:
                bucket.points_remaining = self.points
                bucket.window_reset_at = now + self.duration

            if bucket.points_remaining <= 0:
                retry_after = bucket.window_reset_at - now
                logger.warning(f"Rate limit exceeded for {key}, retry in {retry_after:.1f}s")
                raise QuotaExceeded(retry_after=retry_after)

            bucket.points_remaining -= 1
            return RateLimitStatus(
                limit=self.points,
                remaining=bucket.points_remaining,
                reset_after=bucket.window_reset_at - now,
            )

    def _sweep(self, now: float) -> None:
        expired = [key for key, bucket in self._buckets.items() if now >= bucket.window_reset_at]
        for key in expired:
            del self._buckets[key]
        if expired:
            logger.info(f"Swept {len(expired)} expired rate limit buckets")

    def reset(self) -> None:
        """Forget every bucket."""
        with self._lock:
            self._buckets.clear()

    def __len__(self) -> int:
        return len(self._buckets)
