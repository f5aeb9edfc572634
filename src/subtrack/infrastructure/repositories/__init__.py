"""SQLAlchemy repositories and unit of work."""

from .budget_repository import SqlAlchemyBudgetRepository
from .session_repository import SqlAlchemySessionRepository
from .subscription_repository import SqlAlchemySubscriptionRepository
from .unit_of_work import SqlAlchemyUnitOfWork, SqlAlchemyUnitOfWorkFactory
from .user_repository import SqlAlchemyUserRepository

__all__ = [
    "SqlAlchemyBudgetRepository",
    "SqlAlchemySessionRepository",
    "SqlAlchemySubscriptionRepository",
    "SqlAlchemyUnitOfWork",
    "SqlAlchemyUnitOfWorkFactory",
    "SqlAlchemyUserRepository",
]
