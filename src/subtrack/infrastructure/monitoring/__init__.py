"""Observability: structured logging with correlation and trace context."""

from .logging import (
    SensitiveDataMasker,
    StructuredJSONFormatter,
    correlation_context,
    log_auth_event,
    log_business_event,
    setup_structured_logging,
    user_context,
)

__all__ = [
    "SensitiveDataMasker",
    "StructuredJSONFormatter",
    "correlation_context",
    "log_auth_event",
    "log_business_event",
    "setup_structured_logging",
    "user_context",
]
