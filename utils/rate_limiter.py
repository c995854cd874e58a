"""
In-memory rate limiter for Discord interactions.

Not a security boundary (restarts reset state); it keeps users from
hammering commands that hit the payment provider or move money.
"""

from __future__ import annotations

import time
from collections import deque
from dataclasses import dataclass


@dataclass(frozen=True)
class RateLimitResult:
    allowed: bool
    retry_after_seconds: int = 0


class RateLimiter:
    """Sliding window: allow ``limit`` events per ``per_seconds`` per (scope, user)."""

    def __init__(self, clock=time.monotonic) -> None:
        self._clock = clock
        self._hits: dict[tuple[str, int], deque[float]] = {}

    def check(self, *, scope: str, user_id: int, limit: int, per_seconds: int) -> RateLimitResult:
        now = self._clock()
        hits = self._hits.setdefault((scope, user_id), deque())
        while hits and hits[0] < now - per_seconds:
            hits.popleft()

        if len(hits) >= limit:
            retry_after = int(max(0.0, (hits[0] + per_seconds) - now) + 0.999)
            return RateLimitResult(allowed=False, retry_after_seconds=retry_after)

        hits.append(now)
        return RateLimitResult(allowed=True)

    def reset(self) -> None:
        self._hits.clear()


GLOBAL_RATE_LIMITER = RateLimiter()
