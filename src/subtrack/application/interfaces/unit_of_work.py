"""
Unit of Work Interface

Defines the contract for managing transactions across multiple repositories.
Implements the Unit of Work pattern for atomic operations.
"""

# Standard library imports
from abc import abstractmethod
from typing import Protocol

from .repositories import (
    IBudgetRepository,
    ISessionRepository,
    ISubscriptionRepository,
    IUserRepository,
)


class IUnitOfWork(Protocol):
    """
    Unit of Work interface for transaction management.

    Provides atomic operations across multiple repositories.
    Ensures data consistency by managing database transactions.
    """

    # Repository access
    users: IUserRepository
    sessions: ISessionRepository
    subscriptions: ISubscriptionRepository
    budgets: IBudgetRepository

    @abstractmethod
    async def begin_transaction(self) -> None:
        """
        Begin a new database transaction.

        Raises:
            TransactionError: If transaction cannot be started
        """
        ...

    @abstractmethod
    async def commit(self) -> None:
        """
        Commit the current transaction.

        Raises:
            TransactionError: If commit fails
        """
        ...

    @abstractmethod
    async def rollback(self) -> None:
        """
        Rollback the current transaction.

        Reverts all changes made within the transaction.

        Raises:
            TransactionError: If rollback fails
        """
        ...

    @abstractmethod
    async def is_active(self) -> bool:
        """Check if a transaction is currently active."""
        ...

    @abstractmethod
    async def __aenter__(self) -> "IUnitOfWork":
        """
        Async context manager entry.

        Automatically begins a transaction.
        """
        ...

    @abstractmethod
    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        """
        Async context manager exit.

        Automatically commits on success or rolls back on exception.
        """
        ...


class IUnitOfWorkFactory(Protocol):
    """
    Factory interface for creating Unit of Work instances.

    Allows for different implementations (e.g., for testing vs production).
    """

    @abstractmethod
    def create_unit_of_work(self) -> IUnitOfWork:
        """Create a new Unit of Work instance."""
        ...
