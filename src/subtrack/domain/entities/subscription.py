"""
Subscription and Budget Entities - Recurring expenses and spending limits
"""

# Standard library imports
from dataclasses import dataclass, field
from datetime import UTC, date, datetime
from decimal import Decimal
from enum import Enum
from typing import Any
from uuid import uuid4

DEFAULT_COLOR = "#000000"
DEFAULT_SUBSCRIPTION_CURRENCY = "USD"


class BillingCycle(Enum):
    """Billing cycle enumeration"""

    WEEKLY = "weekly"
    MONTHLY = "monthly"
    QUARTERLY = "quarterly"
    YEARLY = "yearly"


class SubscriptionCategory(Enum):
    """Known subscription categories"""

    ENTERTAINMENT = "entertainment"
    PRODUCTIVITY = "productivity"
    UTILITIES = "utilities"
    GAMING = "gaming"
    MUSIC = "music"
    VIDEO = "video"
    OTHER = "other"


@dataclass
class Subscription:
    """Subscription entity owned by one user."""

    user_id: str
    name: str
    amount: Decimal
    payment_day: int
    category: SubscriptionCategory
    next_payment: datetime
    id: str = field(default_factory=lambda: str(uuid4()))
    billing_cycle: BillingCycle = BillingCycle.MONTHLY
    currency: str = DEFAULT_SUBSCRIPTION_CURRENCY
    description: str | None = None
    logo: str | None = None
    color: str = DEFAULT_COLOR
    is_active: bool = True
    start_date: date = field(default_factory=lambda: datetime.now(UTC).date())
    created_at: datetime = field(default_factory=lambda: datetime.now(UTC))


@dataclass(frozen=True)
class BudgetAlert:
    """Spending threshold alert attached to a budget."""

    threshold: int
    type: str
    message: str
    is_active: bool = True

    def to_dict(self) -> dict[str, Any]:
        return {
            "threshold": self.threshold,
            "type": self.type,
            "message": self.message,
            "isActive": self.is_active,
        }


@dataclass
class Budget:
    """Budget entity owned by one user."""

    user_id: str
    name: str
    amount: Decimal
    id: str = field(default_factory=lambda: str(uuid4()))
    description: str | None = None
    currency: str = DEFAULT_SUBSCRIPTION_CURRENCY
    period: str = "monthly"
    is_default: bool = False
    alerts: list[BudgetAlert] = field(default_factory=list)
    created_at: datetime = field(default_factory=lambda: datetime.now(UTC))
