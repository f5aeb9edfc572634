"""
Unit tests for legacy subscription validation and next payment arithmetic.
"""

from datetime import UTC, date, datetime
from decimal import Decimal

import pytest

from subtrack.domain.entities.subscription import BillingCycle, SubscriptionCategory
from subtrack.domain.services.subscription_validator import (
    SubscriptionValidator,
    calculate_next_payment_date,
)

NOW = datetime(2024, 1, 10, 9, 30, tzinfo=UTC)


def _utc(year: int, month: int, day: int) -> datetime:
    return datetime(year, month, day, tzinfo=UTC)


class TestCalculateNextPaymentDate:
    """Next occurrence strictly after now."""

    def test_later_this_month(self):
        assert calculate_next_payment_date(15, BillingCycle.MONTHLY, NOW) == _utc(2024, 1, 15)

    def test_earlier_this_month_moves_to_next_month(self):
        assert calculate_next_payment_date(5, BillingCycle.MONTHLY, NOW) == _utc(2024, 2, 5)

    def test_same_instant_is_not_in_the_future(self):
        now = _utc(2024, 1, 10)

        assert calculate_next_payment_date(10, BillingCycle.MONTHLY, now) == _utc(2024, 2, 10)

    def test_day_31_clamps_to_leap_february(self):
        now = datetime(2024, 1, 31, 10, 0, tzinfo=UTC)

        assert calculate_next_payment_date(31, BillingCycle.MONTHLY, now) == _utc(2024, 2, 29)

    def test_day_31_clamps_to_february_in_common_year(self):
        now = datetime(2023, 1, 31, 10, 0, tzinfo=UTC)

        assert calculate_next_payment_date(31, BillingCycle.MONTHLY, now) == _utc(2023, 2, 28)

    def test_clamped_day_recovers_in_longer_month(self):
        now = datetime(2024, 2, 29, 12, 0, tzinfo=UTC)

        assert calculate_next_payment_date(31, BillingCycle.MONTHLY, now) == _utc(2024, 3, 31)

    def test_weekly_steps_seven_days(self):
        assert calculate_next_payment_date(1, BillingCycle.WEEKLY, NOW) == _utc(2024, 1, 15)

    def test_quarterly_steps_three_months(self):
        assert calculate_next_payment_date(5, BillingCycle.QUARTERLY, NOW) == _utc(2024, 4, 5)

    def test_yearly_steps_twelve_months(self):
        assert calculate_next_payment_date(5, BillingCycle.YEARLY, NOW) == _utc(2025, 1, 5)

    def test_december_rolls_into_next_year(self):
        now = datetime(2024, 12, 20, tzinfo=UTC)

        assert calculate_next_payment_date(1, BillingCycle.MONTHLY, now) == _utc(2025, 1, 1)

    @pytest.mark.parametrize("day", [0, 32, -1])
    def test_rejects_out_of_range_day(self, day):
        with pytest.raises(ValueError):
            calculate_next_payment_date(day, BillingCycle.MONTHLY, NOW)


class TestSubscriptionValidator:
    """Cleaning and validating legacy records."""

    @pytest.fixture
    def validator(self):
        return SubscriptionValidator()

    def test_valid_record_with_defaults(self, validator):
        result = validator.validate(
            {"name": "  Netflix ", "amount": 15.99, "paymentDate": 15, "category": "video"},
            user_id="user-1",
            now=NOW,
        )

        assert result.is_valid
        subscription = result.subscription
        assert subscription.user_id == "user-1"
        assert subscription.name == "Netflix"
        assert subscription.amount == Decimal("15.99")
        assert subscription.category == SubscriptionCategory.VIDEO
        assert subscription.billing_cycle == BillingCycle.MONTHLY
        assert subscription.currency == "USD"
        assert subscription.is_active is True
        assert subscription.color == "#000000"
        assert subscription.start_date == date(2024, 1, 10)
        assert subscription.next_payment == _utc(2024, 1, 15)

    def test_explicit_optional_fields(self, validator):
        result = validator.validate(
            {
                "name": "Spotify",
                "amount": "9.99",
                "paymentDate": "3",
                "category": "MUSIC",
                "billingCycle": "yearly",
                "currency": "eur",
                "color": "#1db954",
                "isActive": False,
                "startDate": "2023-06-01",
                "description": "Family plan",
            },
            user_id="user-1",
            now=NOW,
        )

        assert result.is_valid
        subscription = result.subscription
        assert subscription.category == SubscriptionCategory.MUSIC
        assert subscription.billing_cycle == BillingCycle.YEARLY
        assert subscription.currency == "EUR"
        assert subscription.color == "#1db954"
        assert subscription.is_active is False
        assert subscription.start_date == date(2023, 6, 1)
        assert subscription.description == "Family plan"
        assert subscription.next_payment == _utc(2025, 1, 3)

    def test_missing_category_defaults_to_other(self, validator):
        result = validator.validate({"name": "Gym", "amount": 30, "paymentDate": 1}, "u", NOW)

        assert result.subscription.category == SubscriptionCategory.OTHER

    @pytest.mark.parametrize(
        "record, reason",
        [
            ({"name": "", "amount": 10, "paymentDate": 1}, "Name is required"),
            ({"name": "   ", "amount": 10, "paymentDate": 1}, "Name is required"),
            ({"name": "X", "amount": 0, "paymentDate": 1}, "Amount must be greater than 0"),
            ({"name": "X", "amount": -5, "paymentDate": 1}, "Amount must be greater than 0"),
            ({"name": "X", "amount": "abc", "paymentDate": 1}, "Amount must be greater than 0"),
            ({"name": "X", "amount": True, "paymentDate": 1}, "Amount must be greater than 0"),
            (
                {"name": "X", "amount": 0.001, "paymentDate": 1},
                "Amount must be greater than 0",
            ),
            (
                {"name": "X", "amount": 10**10, "paymentDate": 1},
                "Amount must be less than 10000000000",
            ),
            (
                {"name": "X" * 256, "amount": 10, "paymentDate": 1},
                "Name must not exceed 255 characters",
            ),
            (
                {"name": "X", "amount": 10, "paymentDate": 1, "color": "#" + "f" * 20},
                "Color must not exceed 20 characters",
            ),
            ({"name": "X", "amount": 10, "paymentDate": 0}, "Payment day"),
            ({"name": "X", "amount": 10, "paymentDate": 32}, "Payment day"),
            ({"name": "X", "amount": 10, "paymentDate": 1.5}, "Payment day"),
            ({"name": "X", "amount": 10}, "Payment day"),
            (
                {"name": "X", "amount": 10, "paymentDate": 1, "category": "food"},
                "Unknown category 'food'",
            ),
            (
                {"name": "X", "amount": 10, "paymentDate": 1, "billingCycle": "daily"},
                "Unknown billing cycle 'daily'",
            ),
            (
                {"name": "X", "amount": 10, "paymentDate": 1, "currency": "EURO"},
                "Invalid currency 'EURO'",
            ),
            (
                {"name": "X", "amount": 10, "paymentDate": 1, "startDate": "yesterday"},
                "Start date must be an ISO-8601 date",
            ),
        ],
    )
    def test_invalid_records(self, validator, record, reason):
        result = validator.validate(record, "user-1", NOW)

        assert not result.is_valid
        assert result.subscription is None
        assert reason in result.error_message

    def test_non_mapping_record(self, validator):
        result = validator.validate(["Netflix"], "user-1", NOW)

        assert not result.is_valid
        assert result.error_message == "Subscription record must be an object"

    @pytest.mark.parametrize(
        "amount, stored",
        [
            ("9.999", Decimal("10.00")),
            (0.005, Decimal("0.01")),
            ("9999999999.99", Decimal("9999999999.99")),
        ],
    )
    def test_amount_is_rounded_to_cents(self, validator, amount, stored):
        result = validator.validate({"name": "X", "amount": amount, "paymentDate": 1}, "u", NOW)

        assert result.subscription.amount == stored
        assert result.subscription.amount.as_tuple().exponent == -2
