"""
Login attempt limiter.

Wraps a fixed window limiter with the key scheme used for login attempts.
Instances are injected into the auth service; there is no module-level
limiter.
"""

import logging

from .algorithms import FixedWindowRateLimit, RateLimitResult
from .config import RateLimitRule, TimeWindow
from .storage import MemoryRateLimitStorage, RateLimitStorage

logger = logging.getLogger(__name__)


class LoginRateLimiter:
    """Limits login attempts per normalized e-mail (and optional client id)."""

    def __init__(
        self,
        limit: int = 5,
        window: str | int | TimeWindow = "15min",
        storage: RateLimitStorage | None = None,
        algorithm: FixedWindowRateLimit | None = None,
    ) -> None:
        if algorithm is None:
            rule = RateLimitRule(
                limit=limit,
                window=TimeWindow(window),
                identifier="login",
                description="Login attempts per identity",
            )
            algorithm = FixedWindowRateLimit(rule, storage or MemoryRateLimitStorage())
        self.algorithm = algorithm

    @property
    def limit(self) -> int:
        return self.algorithm.rule.limit

    @staticmethod
    def key_for(email: str, client_id: str | None = None) -> str:
        """Build the counter key for a login identity."""
        key = f"login:{email.strip().lower()}"
        if client_id:
            key = f"{key}:{client_id}"
        return key

    def check_and_record(self, key: str) -> RateLimitResult:
        """Record an attempt and report whether it may proceed."""
        result = self.algorithm.check_and_record(key)
        if not result.allowed:
            logger.warning(
                f"Rate limit exceeded for {key}: {result.current_count}/{result.limit}, "
                f"retry after {result.retry_after}s"
            )
        return result

    def reset(self, key: str) -> None:
        """Clear the counter of the current window."""
        self.algorithm.reset_limit(key)

    def get_usage(self, key: str) -> tuple[int, int]:
        """Current attempt count and limit."""
        return self.algorithm.get_current_usage(key)
