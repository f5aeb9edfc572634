"""Domain services for business logic that spans entities."""

from .password_policy import PasswordValidator
from .subscription_validator import (
    SubscriptionValidationResult,
    SubscriptionValidator,
    calculate_next_payment_date,
)

__all__ = [
    "PasswordValidator",
    "SubscriptionValidationResult",
    "SubscriptionValidator",
    "calculate_next_payment_date",
]
