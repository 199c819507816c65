"""
Keeps outbound requests under the API limit.

Usage:
    limiter = RateLimiter(interval=20.0)
    with limiter:
        resp = session.get(url)
        limiter.pace()  # sleeps what is left of the interval

The lock is held for the whole attempt, so worker threads sharing one
limiter never start two requests less than ``interval`` seconds apart.
"""

import threading
import time
from typing import Optional

from tqdm import tqdm


class RateLimiter:
    def __init__(self, interval: float):
        if interval < 0:
            raise ValueError("interval must not be negative")
        self.interval = interval
        self.requests = 0
        self._started: Optional[float] = None
        self._lock = threading.Lock()

    def __enter__(self) -> "RateLimiter":
        self._lock.acquire()
        self._started = time.monotonic()
        self.requests += 1
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self._started = None
        self._lock.release()

    def pace(self) -> float:
        """Sleep until ``interval`` seconds have passed since the request started.

        Returns:
            Seconds slept (0 if the request already took long enough)
        """
        if self._started is None:
            raise RuntimeError("pace() called outside of a request")
        wait = self.interval - (time.monotonic() - self._started)
        if wait <= 0:
            return 0.0
        tqdm.write(f"[INFO] Waiting {wait:.2f} seconds...")
        time.sleep(wait)
        return wait
