"""Per-user or per-address rate limiting, and query-string authentication."""

from __future__ import annotations

import math
import os
import threading
import time
from typing import Callable, Optional

from .framework import Context, Handler, HTTPError, Middleware
from .ip import real_ip_best_guess
from .users import User

USER_KEY = "user"


def get_user(ctx: Context) -> Optional[User]:
    """The user attached to the request by authentication, or None."""
    user = ctx.store.get(USER_KEY)
    return user if isinstance(user, User) else None


class TokenBucket:
    """Allows events at rate per second with bursts of up to burst events."""

    def __init__(self, rate: float, burst: int, clock: Callable[[], float] = time.monotonic):
        self.rate = rate
        self.burst = burst
        self._clock = clock
        self._tokens = float(burst)
        self._last = clock()
        self._lock = threading.Lock()

    def allow(self) -> bool:
        if math.isinf(self.rate):
            return True
        with self._lock:
            now = self._clock()
            elapsed = max(0.0, now - self._last)
            self._last = now
            self._tokens = min(float(self.burst), self._tokens + elapsed * self.rate)
            if self._tokens >= 1.0:
                self._tokens -= 1.0
                return True
            return False


class RateLimiter:
    """A token bucket for each key, created on first use."""

    def __init__(self, rate: float, bursts: int, clock: Callable[[], float] = time.monotonic):
        self.rate = rate
        self.bursts = bursts
        self._clock = clock
        self._buckets: dict[str, TokenBucket] = {}
        self._lock = threading.Lock()

    def get(self, key: str) -> TokenBucket:
        with self._lock:
            bucket = self._buckets.get(key)
            if bucket is None:
                bucket = TokenBucket(self.rate, self.bursts, self._clock)
                self._buckets[key] = bucket
            return bucket


def limit(duration: float, bursts: int) -> Middleware:
    """Allow one request per duration seconds per user or address, with bursts."""
    rate = math.inf if duration <= 0 else 1.0 / duration
    limiter = RateLimiter(rate, bursts)

    def middleware(next_handler: Handler) -> Handler:
        def handler(ctx: Context):
            user = get_user(ctx)
            key = str(user.id) if user is not None else real_ip_best_guess(ctx.request)
            if not limiter.get(key).allow():
                raise HTTPError(429)
            return next_handler(ctx)

        return handler

    return middleware


def auth_get_param() -> Middleware:
    """Require the auth query parameter to match API_AUTH_SECRET."""

    def middleware(next_handler: Handler) -> Handler:
        def handler(ctx: Context):
            auth = ctx.query_param("auth") + "0"
            if auth != os.environ.get("API_AUTH_SECRET", ""):
                return ctx.json(403, "auth wrong im sowwy")
            return next_handler(ctx)

        return handler

    return middleware