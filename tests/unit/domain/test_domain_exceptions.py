"""
Unit tests for the domain error taxonomy.
"""

import pytest

from subtrack.domain.exceptions import (
    AuthError,
    AuthErrorKind,
    ConflictError,
    NotFoundError,
    PersistenceError,
    RateLimitError,
    SubTrackError,
    ValidationError,
)


class TestErrorTaxonomy:
    """Status codes and envelopes."""

    @pytest.mark.parametrize(
        "error, status_code",
        [
            (ValidationError("bad"), 400),
            (AuthError(), 401),
            (NotFoundError("User"), 404),
            (ConflictError("dup"), 409),
            (RateLimitError(), 429),
            (PersistenceError("down"), 500),
        ],
    )
    def test_status_codes(self, error, status_code):
        assert isinstance(error, SubTrackError)
        assert error.status_code == status_code

    def test_envelope(self):
        assert ConflictError("User with this email already exists").to_dict() == {
            "success": False,
            "message": "User with this email already exists",
            "error": "CONFLICT",
        }

    def test_auth_error_kind_is_not_exposed(self):
        error = AuthError("Invalid credentials", AuthErrorKind.UNVERIFIED)

        assert error.kind == AuthErrorKind.UNVERIFIED
        assert "unverified" not in str(error.to_dict()).lower()

    def test_rate_limit_envelope_carries_retry_after(self):
        envelope = RateLimitError(retry_after=42, limit=5).to_dict()

        assert envelope["retryAfter"] == 42
        assert envelope["error"] == "RATE_LIMIT_EXCEEDED"

    def test_not_found_message(self):
        assert NotFoundError("Session", "abc").message == "Session not found"

    def test_validation_error_details(self):
        error = ValidationError("Invalid password", field="password", errors=["too short"])

        assert error.details == {"field": "password", "errors": ["too short"]}
        assert error.errors == ["too short"]
