"""Client-side request pacing.

Notion allows an average of three requests per second per integration.
:class:`TokenBucket` refills at ``rate_rps`` up to ``burst`` tokens and
makes callers sleep when the bucket is empty.
"""

from __future__ import annotations

import threading
import time


class TokenBucket:
    """Thread-safe token bucket.

    Parameters
    ----------
    rate_rps:
        Refill rate in tokens per second.
    burst:
        Bucket capacity.
    """

    __slots__ = ("_lock", "burst", "last_refill", "rate", "tokens")

    def __init__(self, rate_rps: float, burst: int = 3) -> None:
        if rate_rps <= 0:
            raise ValueError(f"rate_rps must be > 0, got {rate_rps}")
        if burst < 1:
            raise ValueError(f"burst must be >= 1, got {burst}")
        self.rate = rate_rps
        self.burst = burst
        self.tokens = float(burst)
        self.last_refill = time.monotonic()
        self._lock = threading.Lock()

    def _refill(self, now: float) -> None:
        self.tokens = min(self.burst, self.tokens + (now - self.last_refill) * self.rate)
        self.last_refill = now

    def acquire(self) -> float:
        """Take one token, sleeping until one is available.

        Returns
        -------
        float
            Seconds spent waiting; ``0.0`` when a token was ready.
        """
        with self._lock:
            now = time.monotonic()
            self._refill(now)
            if self.tokens >= 1:
                self.tokens -= 1
                return 0.0
            wait = (1 - self.tokens) / self.rate
            # The token is spent now; the refill during the sleep pays it back.
            self.tokens = 0.0
            self.last_refill = now + wait

        time.sleep(wait)
        return wait
