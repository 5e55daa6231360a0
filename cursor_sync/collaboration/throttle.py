"""
Drop-on-overflow rate limiter.

A key may pass at most once per interval. Anything arriving sooner is
discarded, never queued or delayed: a leaky bucket of depth one.
"""
import threading
import time
from typing import Callable, Dict, Hashable, Optional


class Throttle:
    """Per-key throttle that accepts one call per ``interval`` seconds."""

    def __init__(self, interval: float, clock: Optional[Callable[[], float]] = None):
        if interval < 0:
            raise ValueError("interval must be non-negative")
        self.interval = interval
        self.clock = clock or time.monotonic
        self._last_accepted: Dict[Hashable, float] = {}
        self._lock = threading.Lock()

    def allow(self, key: Hashable) -> bool:
        """Return True and consume the slot if ``key`` may pass now."""
        now = self.clock()
        with self._lock:
            last = self._last_accepted.get(key)
            if last is not None and now - last < self.interval:
                return False
            self._last_accepted[key] = now
            return True

    def forget(self, key: Hashable):
        with self._lock:
            self._last_accepted.pop(key, None)
