"""
Subscription Validator - Domain service for cleaning and validating legacy subscription records.

Legacy records come from the client's local storage and are loosely typed: numbers may
arrive as strings, optional fields may be missing and enum values may use any case. This
module normalizes such a record into a ``Subscription`` entity or reports a single
human-readable reason why it cannot be imported.

It also owns the billing arithmetic that places the next payment strictly in the future.

Example:
    >>> validator = SubscriptionValidator()
    >>> result = validator.validate(
    ...     {"name": "Netflix", "amount": 15.99, "paymentDate": 15, "category": "video"},
    ...     user_id="user-1",
    ... )
    >>> result.is_valid
    True
"""

import calendar
from collections.abc import Mapping
from dataclasses import dataclass
from datetime import UTC, date, datetime, timedelta
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Any

from ..entities.subscription import (
    DEFAULT_COLOR,
    DEFAULT_SUBSCRIPTION_CURRENCY,
    BillingCycle,
    Subscription,
    SubscriptionCategory,
)

MIN_PAYMENT_DAY = 1
MAX_PAYMENT_DAY = 31

# Column limits of the subscription table
MAX_NAME_LENGTH = 255
MAX_COLOR_LENGTH = 20
MAX_AMOUNT = Decimal(10) ** 10
CENT = Decimal("0.01")


@dataclass
class SubscriptionValidationResult:
    """Result of validating one legacy subscription record.

    Attributes:
        is_valid: True if the record can be imported.
        subscription: The cleaned entity when valid.
        error_message: Reason the record was rejected when not valid.
    """

    is_valid: bool
    subscription: Subscription | None = None
    error_message: str | None = None

    @classmethod
    def success(cls, subscription: Subscription) -> "SubscriptionValidationResult":
        return cls(is_valid=True, subscription=subscription)

    @classmethod
    def failure(cls, error_message: str) -> "SubscriptionValidationResult":
        return cls(is_valid=False, error_message=error_message)


def _add_months(value: date, months: int, payment_day: int) -> date:
    """Move ``value`` by whole months, clamping the payment day to the target month."""
    month_index = value.month - 1 + months
    year = value.year + month_index // 12
    month = month_index % 12 + 1
    last_day = calendar.monthrange(year, month)[1]
    return date(year, month, min(payment_day, last_day))


def quantize_amount(value: Any) -> Decimal | None:
    """
    Parse a monetary amount and round it to cents.

    Returns None for anything that is not a finite number or that does not fit
    a 12-digit, 2-decimal column once rounded.
    """
    if value is None or isinstance(value, bool):
        return None
    try:
        amount = Decimal(str(value).strip())
    except InvalidOperation:
        return None
    if not amount.is_finite() or abs(amount) >= MAX_AMOUNT:
        return None
    return amount.quantize(CENT, rounding=ROUND_HALF_UP)


def calculate_next_payment_date(
    payment_day: int,
    billing_cycle: BillingCycle,
    now: datetime | None = None,
) -> datetime:
    """
    Calculate the next payment occurrence strictly after ``now``.

    The first candidate is the payment day of the current month, clamped to the
    month's length. While the candidate is not in the future it is advanced by
    the billing cycle.

    Args:
        payment_day: Day of month the subscription is charged (1-31)
        billing_cycle: Billing cycle used to step the candidate
        now: Reference instant, defaults to the current UTC time

    Returns:
        Timezone-aware UTC datetime at midnight of the payment date
    """
    if not MIN_PAYMENT_DAY <= payment_day <= MAX_PAYMENT_DAY:
        raise ValueError(f"Payment day must be between {MIN_PAYMENT_DAY} and {MAX_PAYMENT_DAY}")

    now = now or datetime.now(UTC)
    current = now.astimezone(UTC)
    candidate = _add_months(date(current.year, current.month, 1), 0, payment_day)

    def as_datetime(value: date) -> datetime:
        return datetime(value.year, value.month, value.day, tzinfo=UTC)

    while as_datetime(candidate) <= current:
        if billing_cycle == BillingCycle.WEEKLY:
            candidate = candidate + timedelta(days=7)
        elif billing_cycle == BillingCycle.QUARTERLY:
            candidate = _add_months(candidate, 3, payment_day)
        elif billing_cycle == BillingCycle.YEARLY:
            candidate = _add_months(candidate, 12, payment_day)
        else:
            candidate = _add_months(candidate, 1, payment_day)

    return as_datetime(candidate)


class SubscriptionValidator:
    """Validates and cleans legacy subscription records.

    Validation never raises for bad input; every problem is reported through
    ``SubscriptionValidationResult.failure`` so callers can collect the reasons.
    """

    def validate(
        self,
        record: Any,
        user_id: str,
        now: datetime | None = None,
    ) -> SubscriptionValidationResult:
        """Validate a single legacy record and build the entity it describes."""
        if not isinstance(record, Mapping):
            return SubscriptionValidationResult.failure("Subscription record must be an object")

        now = now or datetime.now(UTC)

        name = str(record.get("name") or "").strip()
        if not name:
            return SubscriptionValidationResult.failure("Name is required")
        if len(name) > MAX_NAME_LENGTH:
            return SubscriptionValidationResult.failure(
                f"Name must not exceed {MAX_NAME_LENGTH} characters"
            )

        amount = self._parse_amount(record.get("amount"))
        if amount is None or amount <= 0:
            return SubscriptionValidationResult.failure("Amount must be greater than 0")
        if amount >= MAX_AMOUNT:
            return SubscriptionValidationResult.failure(f"Amount must be less than {MAX_AMOUNT}")
        # Stored with two decimals; a sub-cent amount would be kept as zero
        amount = amount.quantize(CENT, rounding=ROUND_HALF_UP)
        if amount <= 0:
            return SubscriptionValidationResult.failure("Amount must be greater than 0")

        payment_day = self._parse_payment_day(record.get("paymentDate", record.get("paymentDay")))
        if payment_day is None:
            return SubscriptionValidationResult.failure(
                f"Payment day must be an integer between {MIN_PAYMENT_DAY} and {MAX_PAYMENT_DAY}"
            )

        raw_category = str(record.get("category") or SubscriptionCategory.OTHER.value).lower()
        try:
            category = SubscriptionCategory(raw_category)
        except ValueError:
            return SubscriptionValidationResult.failure(f"Unknown category '{raw_category}'")

        raw_cycle = str(record.get("billingCycle") or BillingCycle.MONTHLY.value).lower()
        try:
            billing_cycle = BillingCycle(raw_cycle)
        except ValueError:
            return SubscriptionValidationResult.failure(f"Unknown billing cycle '{raw_cycle}'")

        currency = str(record.get("currency") or DEFAULT_SUBSCRIPTION_CURRENCY).upper()
        if len(currency) != 3 or not currency.isalpha():
            return SubscriptionValidationResult.failure(f"Invalid currency '{currency}'")

        start_date = self._parse_start_date(record.get("startDate"), now)
        if start_date is None:
            return SubscriptionValidationResult.failure("Start date must be an ISO-8601 date")

        color = str(record.get("color") or DEFAULT_COLOR)
        if len(color) > MAX_COLOR_LENGTH:
            return SubscriptionValidationResult.failure(
                f"Color must not exceed {MAX_COLOR_LENGTH} characters"
            )

        description = record.get("description")
        logo = record.get("logo")

        subscription = Subscription(
            user_id=user_id,
            name=name,
            amount=amount,
            payment_day=payment_day,
            category=category,
            billing_cycle=billing_cycle,
            currency=currency,
            description=str(description).strip() if description else None,
            logo=str(logo) if logo else None,
            color=color,
            is_active=record.get("isActive") is not False,
            start_date=start_date,
            next_payment=calculate_next_payment_date(payment_day, billing_cycle, now),
        )
        return SubscriptionValidationResult.success(subscription)

    @staticmethod
    def _parse_amount(value: Any) -> Decimal | None:
        if value is None or isinstance(value, bool):
            return None
        try:
            amount = Decimal(str(value).strip())
        except InvalidOperation:
            return None
        if not amount.is_finite():
            return None
        return amount

    @staticmethod
    def _parse_payment_day(value: Any) -> int | None:
        if value is None or isinstance(value, bool):
            return None
        if isinstance(value, float):
            if not value.is_integer():
                return None
            value = int(value)
        elif isinstance(value, str):
            value = value.strip()
            if not value.isdigit():
                return None
            value = int(value)
        elif not isinstance(value, int):
            return None
        if not MIN_PAYMENT_DAY <= value <= MAX_PAYMENT_DAY:
            return None
        return value

    @staticmethod
    def _parse_start_date(value: Any, now: datetime) -> date | None:
        if not value:
            return now.astimezone(UTC).date()
        if isinstance(value, datetime):
            return value.date()
        if isinstance(value, date):
            return value
        try:
            return datetime.fromisoformat(str(value).replace("Z", "+00:00")).date()
        except ValueError:
            return None
