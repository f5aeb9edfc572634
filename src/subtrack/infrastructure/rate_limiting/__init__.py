"""
Rate limiting for authentication attempts.

Fixed window counters over in-memory or Redis storage.
"""

from .algorithms import FixedWindowRateLimit, RateLimitResult
from .config import RateLimitRule, TimeWindow
from .exceptions import RateLimitConfigError, RateLimitInfrastructureError, RateLimitStorageError
from .limiter import LoginRateLimiter
from .storage import (
    MemoryRateLimitStorage,
    RateLimitStorage,
    RedisRateLimitStorage,
    create_storage,
)

__all__ = [
    "FixedWindowRateLimit",
    "LoginRateLimiter",
    "MemoryRateLimitStorage",
    "RateLimitConfigError",
    "RateLimitInfrastructureError",
    "RateLimitResult",
    "RateLimitRule",
    "RateLimitStorage",
    "RateLimitStorageError",
    "RedisRateLimitStorage",
    "TimeWindow",
    "create_storage",
]
