"""
Minimum-interval rate limiter for geocoding backends with a strict usage policy.
"""

import logging
import threading
import time
from typing import Callable

logger = logging.getLogger(__name__)


class RateLimiter:
    """Blocks callers so that successive acquire() returns are spaced by min_interval.

    The lock is held across the whole check/sleep/stamp sequence, so concurrent
    callers queue up and each one measures its wait from the previous caller's
    return, not from when it started waiting.
    """

    def __init__(
        self,
        min_interval: float = 1.0,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        if min_interval < 0:
            raise ValueError("min_interval must be non-negative")
        self.min_interval = min_interval
        self._clock = clock
        self._sleep = sleep
        self._lock = threading.Lock()
        self._last_acquired: float | None = None

    def acquire(self) -> None:
        with self._lock:
            if self._last_acquired is not None:
                elapsed = self._clock() - self._last_acquired
                remaining = self.min_interval - elapsed
                if remaining > 0:
                    logger.debug(f"Rate limited, sleeping {remaining:.3f}s")
                    self._sleep(remaining)
            self._last_acquired = self._clock()


_nominatim_limiter: RateLimiter | None = None
_nominatim_limiter_lock = threading.Lock()


def get_nominatim_rate_limiter(min_interval: float = 1.0) -> RateLimiter:
    """Return the process-wide limiter shared by every Nominatim geocoder."""
    global _nominatim_limiter
    with _nominatim_limiter_lock:
        if _nominatim_limiter is None:
            _nominatim_limiter = RateLimiter(min_interval=min_interval)
        return _nominatim_limiter
