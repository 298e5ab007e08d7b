"""
Rate Limiter implementation.

In-process token buckets keyed by client identifier. Each bucket holds
up to burst_size tokens and refills at requests_per_second.
"""

import math
import time
from dataclasses import dataclass
from typing import Callable, Dict, Tuple


@dataclass
class TokenBucket:
    """Single client's bucket."""

    tokens: float
    last_update: float


class RateLimiter:
    """
    Per-client token bucket rate limiter.

    Features:
    - Burst capacity with steady refill
    - Per-client isolation (IP address or user id)
    - Idle buckets are pruned to bound memory
    """

    def __init__(
        self,
        requests_per_second: float = 10.0,
        burst_size: int = 20,
        idle_ttl: float = 600.0,
        clock: Callable[[], float] = time.monotonic,
    ):
        """
        Initialize rate limiter.

        Args:
            requests_per_second: Refill rate per client
            burst_size: Bucket capacity per client
            idle_ttl: Seconds after which an idle bucket is dropped
            clock: Monotonic time source
        """
        if requests_per_second <= 0 or burst_size < 1:
            raise ValueError("Rate limit must be positive")

        self.requests_per_second = requests_per_second
        self.burst_size = burst_size
        self.idle_ttl = idle_ttl
        self._clock = clock
        self._buckets: Dict[str, TokenBucket] = {}
        self._last_prune = clock()

    def check_rate_limit(self, identifier: str) -> Tuple[bool, dict]:
        """
        Consume one token for identifier if available.

        Args:
            identifier: Client key (IP address or user id)

        Returns:
            Tuple of (allowed: bool, info: dict with limit details)
        """
        now = self._clock()
        self._prune(now)

        bucket = self._buckets.get(identifier)
        if bucket is None:
            bucket = TokenBucket(tokens=float(self.burst_size), last_update=now)
            self._buckets[identifier] = bucket
        else:
            elapsed = now - bucket.last_update
            bucket.tokens = min(
                float(self.burst_size),
                bucket.tokens + elapsed * self.requests_per_second,
            )
            bucket.last_update = now

        allowed = bucket.tokens >= 1.0
        if allowed:
            bucket.tokens -= 1.0

        missing = self.burst_size - bucket.tokens
        retry_after = (1.0 - bucket.tokens) / self.requests_per_second

        info = {
            "limit": self.burst_size,
            "remaining": int(bucket.tokens),
            "reset": int(time.time() + missing / self.requests_per_second),
            "retry_after": None if allowed else max(1, math.ceil(retry_after)),
        }

        return allowed, info

    def reset_limit(self, identifier: str) -> None:
        """Forget a client's bucket."""
        self._buckets.pop(identifier, None)

    def _prune(self, now: float) -> None:
        if now - self._last_prune < self.idle_ttl:
            return
        self._last_prune = now
        stale = [
            key
            for key, bucket in self._buckets.items()
            if now - bucket.last_update >= self.idle_ttl
        ]
        for key in stale:
            del self._buckets[key]
