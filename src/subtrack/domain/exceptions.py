"""
Domain-level exceptions for the SubTrack backend.

Every failure a caller can observe is one of these types. Each carries a stable
HTTP status code and machine-readable code so the HTTP adapter can map it to the
response envelope without inspecting messages.
"""

from datetime import UTC, datetime
from enum import Enum
from typing import Any


class SubTrackError(Exception):
    """Base exception for all domain-level errors."""

    status_code: int = 500
    code: str = "INTERNAL_SERVER_ERROR"

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or {}
        self.timestamp = datetime.now(UTC)

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to the response envelope."""
        return {
            "success": False,
            "message": self.message,
            "error": self.code,
        }


class ValidationError(SubTrackError):
    """Raised when input is malformed or missing."""

    status_code = 400
    code = "VALIDATION_ERROR"

    def __init__(
        self,
        message: str,
        field: str | None = None,
        errors: list[str] | None = None,
    ) -> None:
        details: dict[str, Any] = {}
        if field:
            details["field"] = field
        if errors:
            details["errors"] = errors
        super().__init__(message, details)
        self.field = field
        self.errors = errors or [message]


class AuthErrorKind(Enum):
    """Internal reason for an authentication failure."""

    INVALID_CREDENTIALS = "invalid_credentials"
    UNVERIFIED = "unverified"
    INVALID_TOKEN = "invalid_token"
    EXPIRED_TOKEN = "expired_token"
    MISSING_TOKEN = "missing_token"


class AuthError(SubTrackError):
    """
    Raised when authentication fails.

    The kind is for logging and tests only. The message is what callers see,
    and is identical for unknown e-mail and wrong password.
    """

    status_code = 401
    code = "UNAUTHORIZED"

    def __init__(
        self,
        message: str = "Unauthorized",
        kind: AuthErrorKind = AuthErrorKind.INVALID_CREDENTIALS,
    ) -> None:
        super().__init__(message)
        self.kind = kind


class NotFoundError(SubTrackError):
    """Raised when a user or resource does not exist."""

    status_code = 404
    code = "NOT_FOUND"

    def __init__(self, resource: str, identifier: str | None = None) -> None:
        details: dict[str, Any] = {"resource": resource}
        if identifier:
            details["identifier"] = identifier
        super().__init__(f"{resource} not found", details)
        self.resource = resource
        self.identifier = identifier


class ConflictError(SubTrackError):
    """Raised on uniqueness violations and conflicting concurrent operations."""

    status_code = 409
    code = "CONFLICT"


class RateLimitError(SubTrackError):
    """Raised when too many attempts were made for one identity."""

    status_code = 429
    code = "RATE_LIMIT_EXCEEDED"

    def __init__(
        self,
        message: str = "Too many requests",
        retry_after: int | None = None,
        limit: int | None = None,
    ) -> None:
        super().__init__(message, {"retry_after": retry_after, "limit": limit})
        self.retry_after = retry_after
        self.limit = limit

    def to_dict(self) -> dict[str, Any]:
        base = super().to_dict()
        if self.retry_after is not None:
            base["retryAfter"] = self.retry_after
        return base


class PersistenceError(SubTrackError):
    """Raised when the store or a transaction fails."""

    status_code = 500
    code = "PERSISTENCE_ERROR"

    def __init__(self, message: str, cause: Exception | None = None) -> None:
        super().__init__(message)
        self.cause = cause
