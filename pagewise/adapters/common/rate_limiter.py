"""Sliding-window rate limiter for external API calls."""

from __future__ import annotations

import threading
import time
from collections import deque

WINDOW_SECONDS = 60.0


class RateLimiter:
    """Blocks callers so at most ``requests_per_minute`` calls start per minute.

    Shared between threads (parallel chunk embedding). A value of ``None``
    or ``<= 0`` disables limiting.
    """

    def __init__(self, requests_per_minute: int | None, window: float = WINDOW_SECONDS) -> None:
        self.limit = requests_per_minute if requests_per_minute and requests_per_minute > 0 else None
        self.window = window
        self._calls: deque[float] = deque()
        self._lock = threading.Lock()

    def acquire(self) -> None:
        """Block until a call slot is free."""
        if self.limit is None:
            return

        while True:
            with self._lock:
                now = time.monotonic()
                while self._calls and now - self._calls[0] >= self.window:
                    self._calls.popleft()
                if len(self._calls) < self.limit:
                    self._calls.append(now)
                    return
                wait_time = self.window - (now - self._calls[0])

            # Sleep outside the lock so other threads can check in
            time.sleep(max(wait_time, 0.01))
