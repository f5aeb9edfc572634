"""Application interfaces: repository, unit of work and exception contracts."""

from .exceptions import (
    ConfigurationError,
    DuplicateEntityError,
    RepositoryError,
    TransactionAlreadyActiveError,
    TransactionCommitError,
    TransactionError,
    TransactionNotActiveError,
    TransactionRollbackError,
)
from .repositories import (
    IBudgetRepository,
    ISessionRepository,
    ISubscriptionRepository,
    IUserRepository,
)
from .unit_of_work import IUnitOfWork, IUnitOfWorkFactory

__all__ = [
    "ConfigurationError",
    "DuplicateEntityError",
    "IBudgetRepository",
    "ISessionRepository",
    "ISubscriptionRepository",
    "IUnitOfWork",
    "IUnitOfWorkFactory",
    "IUserRepository",
    "RepositoryError",
    "TransactionAlreadyActiveError",
    "TransactionCommitError",
    "TransactionError",
    "TransactionNotActiveError",
    "TransactionRollbackError",
]
