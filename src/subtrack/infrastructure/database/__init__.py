"""Database models and connection management."""

from .connection import create_database_engine, create_session_factory, init_database
from .models import Base, BudgetModel, SessionModel, SubscriptionModel, UserModel

__all__ = [
    "Base",
    "BudgetModel",
    "SessionModel",
    "SubscriptionModel",
    "UserModel",
    "create_database_engine",
    "create_session_factory",
    "init_database",
]
