"""
Fixed-window rate limiting for actions.

Each key gets a one-minute window. A window opens on the first request for
its key and expires once the clock passes its reset time; the next request
then opens a fresh window. Quota per window is
``requests_per_minute + burst``.

Usage:
    limiter = RateLimiter.from_spec(action.rate_limit)
    key = RateLimiter.get_key(RateLimitScope.USER, user_id=user.id)
    result = limiter.consume(key)
    if not result.allowed:
        raise RateLimitError(result.retry_after)
"""

from __future__ import annotations

import logging
import math
import threading
import time
from collections.abc import Callable
from dataclasses import dataclass
from datetime import UTC, datetime

from pydantic import BaseModel, ConfigDict

from fdspec.core.ir import ActionRateLimit, RateLimitScope, RateLimitSpec

from .errors import RateLimitError

logger = logging.getLogger(__name__)

WINDOW_SECONDS = 60.0


class RateLimitConfig(BaseModel):
    requests_per_minute: int
    burst: int = 0
    scope: RateLimitScope = RateLimitScope.USER

    model_config = ConfigDict(frozen=True)

    @property
    def quota(self) -> int:
        return self.requests_per_minute + self.burst


class RateLimitResult(BaseModel):
    """
    Outcome of a rate limit check.

    Attributes:
        allowed: Whether the request fits in the current window
        remaining: Requests left in the window after this one
        reset_at: When the window ends (UTC)
        retry_after: Seconds until the window ends; set only when denied
    """

    allowed: bool
    remaining: int
    reset_at: datetime
    retry_after: int | None = None

    model_config = ConfigDict(frozen=True)


@dataclass
class _Window:
    count: int
    reset_at: float


class RateLimiter:
    """
    In-memory fixed-window limiter.

    Counters live in one dict guarded by a lock; ``consume`` checks and
    increments in a single critical section.
    """

    def __init__(
        self,
        config: RateLimitConfig,
        clock: Callable[[], float] = time.time,
    ):
        """
        Initialize the limiter.

        Args:
            config: Quota and scope
            clock: Returns the current time in seconds since the epoch
        """
        self.config = config
        self._clock = clock
        self._windows: dict[str, _Window] = {}
        self._lock = threading.Lock()

    @classmethod
    def from_spec(
        cls,
        spec: RateLimitSpec | ActionRateLimit,
        clock: Callable[[], float] = time.time,
    ) -> RateLimiter:
        config = RateLimitConfig(
            requests_per_minute=spec.requests_per_minute,
            burst=spec.burst,
            scope=spec.scope,
        )
        return cls(config, clock=clock)

    def _current(self, key: str, now: float) -> _Window:
        window = self._windows.get(key)
        if window is None or now > window.reset_at:
            return _Window(count=0, reset_at=now + WINDOW_SECONDS)
        return window

    def _result(self, window: _Window, now: float) -> RateLimitResult:
        quota = self.config.quota
        reset_at = datetime.fromtimestamp(window.reset_at, tz=UTC)
        if window.count >= quota:
            return RateLimitResult(
                allowed=False,
                remaining=0,
                reset_at=reset_at,
                retry_after=math.ceil(window.reset_at - now),
            )
        return RateLimitResult(
            allowed=True,
            remaining=max(0, quota - window.count) - 1,
            reset_at=reset_at,
        )

    def check(self, key: str) -> RateLimitResult:
        """Report whether a request for ``key`` would be allowed, without counting it."""
        with self._lock:
            now = self._clock()
            return self._result(self._current(key, now), now)

    def consume(self, key: str) -> RateLimitResult:
        """Count a request for ``key`` if it fits in the window."""
        with self._lock:
            now = self._clock()
            window = self._current(key, now)
            result = self._result(window, now)
            if result.allowed:
                window.count += 1
                self._windows[key] = window
            else:
                logger.debug("Rate limit exceeded for %s (retry after %ss)", key, result.retry_after)
            return result

    def consume_or_raise(self, key: str) -> RateLimitResult:
        """
        Count a request for ``key``.

        Raises:
            RateLimitError: If the window's quota is used up
        """
        result = self.consume(key)
        if not result.allowed:
            raise RateLimitError(result.retry_after or 0)
        return result

    def reset(self, key: str) -> None:
        with self._lock:
            self._windows.pop(key, None)

    def cleanup(self) -> int:
        """
        Drop expired windows.

        Returns:
            Number of windows dropped
        """
        with self._lock:
            now = self._clock()
            expired = [key for key, window in self._windows.items() if now > window.reset_at]
            for key in expired:
                del self._windows[key]
        return len(expired)

    @staticmethod
    def get_key(
        scope: RateLimitScope | str,
        user_id: str | None = None,
        tenant_id: str | None = None,
        ip: str | None = None,
    ) -> str:
        """Counter key for a scope and the caller's identifiers."""
        if scope == RateLimitScope.USER:
            return f"rate:user:{user_id or 'anonymous'}"
        if scope == RateLimitScope.TENANT:
            return f"rate:tenant:{tenant_id or 'default'}"
        if scope == RateLimitScope.IP:
            return f"rate:ip:{ip or 'unknown'}"
        if scope == RateLimitScope.GLOBAL:
            return "rate:global"
        return f"rate:{user_id or ip or 'unknown'}"
