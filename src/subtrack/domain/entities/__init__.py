"""Domain entities with business logic."""

from .session import Session
from .subscription import Budget, BudgetAlert, BillingCycle, Subscription, SubscriptionCategory
from .user import User, UserProfile, UserSettings

__all__ = [
    "Budget",
    "BudgetAlert",
    "BillingCycle",
    "Session",
    "Subscription",
    "SubscriptionCategory",
    "User",
    "UserProfile",
    "UserSettings",
]
