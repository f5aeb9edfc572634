"""
SQLAlchemy Unit of Work Implementation

Concrete implementation of IUnitOfWork over a SQLAlchemy session.
Manages transactions across multiple repositories ensuring data consistency.
"""

# Standard library imports
import asyncio
import logging
from collections.abc import Callable
from concurrent.futures import ThreadPoolExecutor
from typing import TypeVar

# Third-party imports
from sqlalchemy.orm import Session, sessionmaker

# Local imports
from subtrack.application.interfaces.exceptions import (
    TransactionAlreadyActiveError,
    TransactionCommitError,
    TransactionError,
    TransactionNotActiveError,
    TransactionRollbackError,
)
from subtrack.application.interfaces.unit_of_work import IUnitOfWork, IUnitOfWorkFactory

from .budget_repository import SqlAlchemyBudgetRepository
from .session_repository import SqlAlchemySessionRepository
from .subscription_repository import SqlAlchemySubscriptionRepository
from .user_repository import SqlAlchemyUserRepository

logger = logging.getLogger(__name__)

T = TypeVar("T")


class SqlAlchemyUnitOfWork(IUnitOfWork):
    """
    SQLAlchemy implementation of IUnitOfWork.

    Each transaction owns one SQLAlchemy session and one worker thread. All
    statements, the commit and the rollback run on that thread in submission
    order, so the session is never used concurrently and a rollback issued
    after a timeout waits for the statement still in flight.
    """

    def __init__(self, session_factory: sessionmaker[Session]) -> None:
        """
        Initialize Unit of Work with a session factory.

        Args:
            session_factory: Factory producing SQLAlchemy sessions
        """
        self._session_factory = session_factory
        self._session: Session | None = None
        self._executor: ThreadPoolExecutor | None = None

        self.users = SqlAlchemyUserRepository(self)
        self.sessions = SqlAlchemySessionRepository(self)
        self.subscriptions = SqlAlchemySubscriptionRepository(self)
        self.budgets = SqlAlchemyBudgetRepository(self)

    async def _run(self, fn: Callable[[], T]) -> T:
        if self._executor is None:
            raise TransactionNotActiveError()
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(self._executor, fn)

    async def execute(self, fn: Callable[[Session], T]) -> T:
        """
        Run ``fn(session)`` on the transaction's worker thread.

        Raises:
            TransactionNotActiveError: If no transaction is active
        """
        session = self._session
        if session is None:
            raise TransactionNotActiveError()
        return await self._run(lambda: fn(session))

    async def begin_transaction(self) -> None:
        """
        Begin a new database transaction.

        Raises:
            TransactionError: If transaction cannot be started
        """
        if self._session is not None:
            raise TransactionAlreadyActiveError()

        self._executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="uow")
        try:
            self._session = await self._run(self._session_factory)
            logger.debug("Unit of Work transaction started")
        except Exception as e:
            self._shutdown()
            logger.error(f"Failed to begin transaction: {e}")
            raise TransactionError(f"Failed to begin transaction: {e}", e) from e

    async def commit(self) -> None:
        """
        Commit the current transaction.

        On failure the transaction stays open so the caller can roll back.

        Raises:
            TransactionError: If commit fails
        """
        session = self._session
        if session is None:
            raise TransactionNotActiveError()

        try:
            await self._run(session.commit)
        except Exception as e:
            logger.error(f"Failed to commit transaction: {e}")
            raise TransactionCommitError(e) from e

        await self._close()
        logger.debug("Unit of Work transaction committed")

    async def rollback(self) -> None:
        """
        Rollback the current transaction.

        Reverts all changes made within the transaction.

        Raises:
            TransactionError: If rollback fails
        """
        session = self._session
        if session is None:
            logger.warning("No active transaction to rollback")
            return

        try:
            await self._run(session.rollback)
            logger.debug("Unit of Work transaction rolled back")
        except Exception as e:
            logger.error(f"Failed to rollback transaction: {e}")
            raise TransactionRollbackError(e) from e
        finally:
            await self._close()

    async def is_active(self) -> bool:
        """Check if a transaction is currently active."""
        return self._session is not None

    async def _close(self) -> None:
        session = self._session
        self._session = None
        if session is not None:
            try:
                await self._run(session.close)
            finally:
                self._shutdown()

    def _shutdown(self) -> None:
        if self._executor is not None:
            self._executor.shutdown(wait=False)
            self._executor = None

    async def __aenter__(self) -> "SqlAlchemyUnitOfWork":
        """
        Async context manager entry.

        Automatically begins a transaction.
        """
        await self.begin_transaction()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        """
        Async context manager exit.

        Automatically commits on success or rolls back on exception,
        including cancellation by a timeout.
        """
        if exc_type is None:
            try:
                await self.commit()
            except Exception as commit_error:
                logger.error(f"Failed to commit in context manager: {commit_error}")
                try:
                    await self.rollback()
                except Exception as rollback_error:
                    logger.error(f"Failed to rollback after commit error: {rollback_error}")
                raise
        else:
            try:
                await self.rollback()
            except Exception as rollback_error:
                logger.error(f"Failed to rollback in context manager: {rollback_error}")
                # Don't suppress the original exception

        return None


class SqlAlchemyUnitOfWorkFactory(IUnitOfWorkFactory):
    """Factory for creating SQLAlchemy Unit of Work instances."""

    def __init__(self, session_factory: sessionmaker[Session]) -> None:
        self._session_factory = session_factory

    def create_unit_of_work(self) -> SqlAlchemyUnitOfWork:
        """Create a new Unit of Work instance."""
        return SqlAlchemyUnitOfWork(self._session_factory)
