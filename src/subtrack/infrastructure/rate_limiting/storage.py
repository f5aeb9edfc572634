"""
Counter storage for login rate limiting.

The in-memory backend serves a single process; the Redis backend shares
attempt counters between API instances.
"""

import threading
import time
from abc import ABC, abstractmethod

import redis
from redis.exceptions import RedisError

from .exceptions import RateLimitStorageError


class RateLimitStorage(ABC):
    """Expiring integer counters keyed by string."""

    @abstractmethod
    def get(self, key: str) -> int | None:
        """Current counter value, or None when absent or expired."""

    @abstractmethod
    def increment(self, key: str, amount: int = 1, ttl: int | None = None) -> int:
        """
        Atomically increment a counter and return the new value.

        ``ttl`` is applied only when the counter is created, so repeated
        increments never extend its lifetime.
        """

    @abstractmethod
    def delete(self, key: str) -> bool:
        """Drop a counter. Returns True if it existed."""


class MemoryRateLimitStorage(RateLimitStorage):
    """
    Process-local counters.

    Expired entries are dropped lazily on access and swept every
    ``purge_interval`` seconds.
    """

    def __init__(self, purge_interval: int = 3600) -> None:
        self._counters: dict[str, tuple[int, float | None]] = {}  # key -> (count, expires_at)
        self._lock = threading.RLock()
        self.purge_interval = purge_interval
        self._last_purge = time.monotonic()

    def _purge(self, now: float) -> None:
        if now - self._last_purge < self.purge_interval:
            return
        self._last_purge = now
        for key in [k for k, (_, exp) in self._counters.items() if exp is not None and exp <= now]:
            del self._counters[key]

    def get(self, key: str) -> int | None:
        with self._lock:
            now = time.monotonic()
            self._purge(now)
            entry = self._counters.get(key)
            if entry is None:
                return None
            count, expires_at = entry
            if expires_at is not None and expires_at <= now:
                del self._counters[key]
                return None
            return count

    def increment(self, key: str, amount: int = 1, ttl: int | None = None) -> int:
        with self._lock:
            current = self.get(key)
            if current is None:
                expires_at = time.monotonic() + ttl if ttl is not None else None
                self._counters[key] = (amount, expires_at)
                return amount

            _, expires_at = self._counters[key]
            self._counters[key] = (current + amount, expires_at)
            return current + amount

    def delete(self, key: str) -> bool:
        with self._lock:
            return self._counters.pop(key, None) is not None


class RedisRateLimitStorage(RateLimitStorage):
    """
    Redis-backed counters.

    Increment and expiry go out in one MULTI/EXEC pipeline; ``EXPIRE NX`` keeps
    the first expiry of a window.
    """

    def __init__(
        self,
        redis_url: str = "redis://localhost:6379/0",
        key_prefix: str = "rate_limit:",
        redis_client: redis.Redis | None = None,
    ) -> None:
        self.key_prefix = key_prefix

        if redis_client is not None:
            self.redis_client = redis_client
            return

        try:
            self.redis_client = redis.from_url(
                redis_url,
                decode_responses=True,
                socket_connect_timeout=5,
                socket_timeout=5,
                retry_on_timeout=True,
            )
            self.redis_client.ping()
        except RedisError as e:
            raise RateLimitStorageError(f"Failed to connect to Redis: {e}", storage_backend="redis")

    def _key(self, key: str) -> str:
        return f"{self.key_prefix}{key}"

    def get(self, key: str) -> int | None:
        try:
            value = self.redis_client.get(self._key(key))
        except RedisError as e:
            raise RateLimitStorageError(
                f"Redis GET failed: {e}", operation="get", storage_backend="redis"
            )
        return int(value) if value is not None else None

    def increment(self, key: str, amount: int = 1, ttl: int | None = None) -> int:
        redis_key = self._key(key)
        try:
            with self.redis_client.pipeline() as pipe:
                pipe.multi()
                pipe.incrby(redis_key, amount)
                if ttl is not None:
                    pipe.expire(redis_key, ttl, nx=True)
                results = pipe.execute()
        except RedisError as e:
            raise RateLimitStorageError(
                f"Redis INCRBY failed: {e}", operation="increment", storage_backend="redis"
            )
        return int(results[0])

    def delete(self, key: str) -> bool:
        try:
            return bool(self.redis_client.delete(self._key(key)))
        except RedisError as e:
            raise RateLimitStorageError(
                f"Redis DELETE failed: {e}", operation="delete", storage_backend="redis"
            )


def create_storage(backend: str, redis_url: str | None = None) -> RateLimitStorage:
    """Build the storage backend named in the configuration."""
    backend = backend.lower()
    if backend == "redis":
        return RedisRateLimitStorage(redis_url or "redis://localhost:6379/0")
    if backend == "memory":
        return MemoryRateLimitStorage()
    raise RateLimitStorageError(f"Unknown storage backend: {backend}", storage_backend=backend)
