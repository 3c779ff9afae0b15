import math
import time
from threading import Lock

from rugboost.config import CHECKOUT_RATE_LIMIT, CHECKOUT_RATE_WINDOW_SECONDS


class RateLimiter:
    """Fixed-window request counter per key, held in process memory."""

    def __init__(self, max_requests: int, window_seconds: int, max_keys: int = 1000):
        self.max_requests = max_requests
        self.window_seconds = window_seconds
        self.max_keys = max_keys
        self._windows = {}
        self._lock = Lock()

    def check(self, key: str, now: float = None):
        """Count one request for `key`. Returns (allowed, retry_after_seconds)."""
        now = time.monotonic() if now is None else now
        with self._lock:
            if len(self._windows) > self.max_keys:
                self._windows = {
                    k: v for k, v in self._windows.items() if now <= v[1]
                }

            count, reset_at = self._windows.get(key, (0, 0.0))
            if now > reset_at:
                self._windows[key] = (1, now + self.window_seconds)
                return True, None

            if count >= self.max_requests:
                return False, math.ceil(reset_at - now)

            self._windows[key] = (count + 1, reset_at)
            return True, None

    def reset(self):
        with self._lock:
            self._windows.clear()


checkout_limiter = RateLimiter(CHECKOUT_RATE_LIMIT, CHECKOUT_RATE_WINDOW_SECONDS)
