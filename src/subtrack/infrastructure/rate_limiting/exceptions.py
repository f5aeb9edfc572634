"""
Rate limiting infrastructure exceptions.

Exceeding a limit is reported through ``RateLimitResult``; the auth service
raises the domain ``RateLimitError`` from it. These exceptions cover broken
configuration and storage backends.
"""

from typing import Any


class RateLimitInfrastructureError(Exception):
    """Base exception for rate limiting infrastructure errors."""

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or {}


class RateLimitConfigError(RateLimitInfrastructureError):
    """Raised when rate limit configuration is invalid."""

    def __init__(self, message: str, config_field: str | None = None) -> None:
        super().__init__(message, {"config_field": config_field})
        self.config_field = config_field


class RateLimitStorageError(RateLimitInfrastructureError):
    """Raised when rate limit storage operations fail."""

    def __init__(
        self,
        message: str,
        operation: str | None = None,
        storage_backend: str | None = None,
    ) -> None:
        super().__init__(message, {"operation": operation, "storage_backend": storage_backend})
        self.operation = operation
        self.storage_backend = storage_backend
