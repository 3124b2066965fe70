"""In-process sliding-window admission control keyed by operation name."""

import threading
import time
from collections import deque
from typing import Callable

from simpay.services.processor.schemas import RateLimitPolicy


class SlidingWindowRateLimiter:
    """Counts attempts per key within a window that slides with each call.

    Keys are operation names ("create_payment", "get_status"), so throttling is
    process-wide per operation type rather than per customer.
    """

    def __init__(self, policy: RateLimitPolicy, clock: Callable[[], float] = time.monotonic) -> None:
        self.policy = policy
        self.clock = clock
        self._attempts: dict[str, deque[float]] = {}
        self._lock = threading.Lock()

    def _now_ms(self) -> float:
        return self.clock() * 1000.0

    def check_and_record(self, key: str) -> bool:
        """Admit and record one attempt, or deny without recording."""

        with self._lock:
            now = self._now_ms()
            attempts = self._attempts.get(key)
            if attempts is None:
                attempts = deque()
                self._attempts[key] = attempts
            while attempts and now - attempts[0] >= self.policy.window_ms:
                attempts.popleft()
            if len(attempts) >= self.policy.max_attempts:
                return False
            attempts.append(now)
            return True

    def in_window(self, key: str) -> int:
        """Number of recorded attempts for `key` still inside the window."""

        with self._lock:
            now = self._now_ms()
            return sum(1 for ts in self._attempts.get(key, ()) if now - ts < self.policy.window_ms)

    def reset(self) -> None:
        with self._lock:
            self._attempts.clear()
