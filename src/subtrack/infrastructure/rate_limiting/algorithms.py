"""
Fixed window rate limiting over a pluggable counter storage.
"""

import time
from collections.abc import Callable
from dataclasses import dataclass
from datetime import UTC, datetime

from .config import RateLimitRule
from .exceptions import RateLimitConfigError
from .storage import RateLimitStorage


@dataclass
class RateLimitResult:
    """Result of a rate limit check."""

    allowed: bool
    current_count: int
    limit: int
    remaining: int
    reset_time: datetime | None
    retry_after: int | None  # Seconds to wait before retry


class FixedWindowRateLimit:
    """
    Fixed Window rate limiting algorithm.

    Divides time into fixed windows and counts attempts per window. The
    counter key embeds the window start, so a new window starts from zero
    without any explicit reset. Every call is recorded, including the ones
    that end up blocked.
    """

    def __init__(
        self,
        rule: RateLimitRule,
        storage: RateLimitStorage,
        clock: Callable[[], float] = time.time,
    ) -> None:
        if rule.limit <= 0:
            raise RateLimitConfigError("Rate limit must be positive", "limit")
        if rule.window.seconds <= 0:
            raise RateLimitConfigError("Time window must be positive", "window")

        self.rule = rule
        self.storage = storage
        self._clock = clock

    def _get_window_start(self, current_time: float) -> int:
        """Get the start time of the current window."""
        return int(current_time // self.rule.window.seconds) * self.rule.window.seconds

    def _window_key(self, identifier: str, window_start: int) -> str:
        return f"{identifier}:{window_start}"

    def check_and_record(self, identifier: str) -> RateLimitResult:
        """Record one attempt for ``identifier`` and report whether it is allowed."""
        current_time = self._clock()
        window_start = self._get_window_start(current_time)
        window_end = window_start + self.rule.window.seconds
        reset_time = datetime.fromtimestamp(window_end, tz=UTC)

        count = self.storage.increment(
            self._window_key(identifier, window_start),
            ttl=self.rule.window.seconds,
        )

        if count <= self.rule.limit:
            return RateLimitResult(
                allowed=True,
                current_count=count,
                limit=self.rule.limit,
                remaining=self.rule.limit - count,
                reset_time=reset_time,
                retry_after=None,
            )

        return RateLimitResult(
            allowed=False,
            current_count=count,
            limit=self.rule.limit,
            remaining=0,
            reset_time=reset_time,
            retry_after=int(window_end - current_time) + 1,
        )

    def get_current_usage(self, identifier: str) -> tuple[int, int]:
        """Get current window usage and limit."""
        window_start = self._get_window_start(self._clock())
        count = self.storage.get(self._window_key(identifier, window_start)) or 0
        return count, self.rule.limit

    def reset_limit(self, identifier: str) -> None:
        """Reset the current window for identifier."""
        window_start = self._get_window_start(self._clock())
        self.storage.delete(self._window_key(identifier, window_start))
