"""
Repository Interface Definitions

Defines the contracts that infrastructure repositories must implement.
Following the Repository pattern and clean architecture principles.
"""

# Standard library imports
from abc import abstractmethod
from datetime import datetime
from typing import Protocol

# Local imports
from subtrack.domain.entities.session import Session
from subtrack.domain.entities.subscription import Budget, Subscription
from subtrack.domain.entities.user import User


class IUserRepository(Protocol):
    """
    User repository interface (credential store).

    E-mail lookups are case-insensitive; implementations store the
    normalized lower-case address.
    """

    @abstractmethod
    async def add(self, user: User) -> User:
        """
        Persist a new user.

        Raises:
            DuplicateEntityError: If a user with the same e-mail exists
            RepositoryError: If save operation fails
        """
        ...

    @abstractmethod
    async def get_by_id(self, user_id: str) -> User | None:
        """Retrieve a user by id, None if missing."""
        ...

    @abstractmethod
    async def get_by_email(self, email: str) -> User | None:
        """Retrieve a user by normalized e-mail, None if missing."""
        ...

    @abstractmethod
    async def update(self, user: User) -> User:
        """
        Persist changes to an existing user.

        Raises:
            RepositoryError: If the user does not exist or the update fails
        """
        ...


class ISessionRepository(Protocol):
    """
    Session repository interface (session store).

    The store is the single source of truth for refresh-token validity.
    """

    @abstractmethod
    async def add(self, session: Session) -> Session:
        """Persist a new session."""
        ...

    @abstractmethod
    async def consume(self, user_id: str, token_hash: str, now: datetime) -> bool:
        """
        Atomically delete the live session matching ``token_hash`` for ``user_id``.

        Only an unexpired row is deleted. Returns True for exactly one caller
        when several race on the same token.
        """
        ...

    @abstractmethod
    async def delete_by_token_hash(self, user_id: str, token_hash: str) -> bool:
        """Delete the session matching (user, hash). Returns whether a row was removed."""
        ...

    @abstractmethod
    async def delete_by_id(self, user_id: str, session_id: str) -> bool:
        """Delete one session owned by ``user_id``."""
        ...

    @abstractmethod
    async def delete_all_for_user(self, user_id: str) -> int:
        """Delete every session of a user. Returns the number removed."""
        ...

    @abstractmethod
    async def delete_expired(self, now: datetime) -> int:
        """Delete sessions whose expiry is not after ``now``."""
        ...

    @abstractmethod
    async def list_for_user(self, user_id: str) -> list[Session]:
        """List a user's sessions, newest first."""
        ...


class ISubscriptionRepository(Protocol):
    """Subscription repository interface."""

    @abstractmethod
    async def add_many(self, subscriptions: list[Subscription]) -> int:
        """Insert subscriptions, returning the number inserted."""
        ...

    @abstractmethod
    async def list_for_user(self, user_id: str) -> list[Subscription]:
        """List a user's subscriptions ordered by next payment."""
        ...

    @abstractmethod
    async def count_for_user(self, user_id: str) -> int:
        """Count a user's subscriptions."""
        ...


class IBudgetRepository(Protocol):
    """Budget repository interface."""

    @abstractmethod
    async def add(self, budget: Budget) -> Budget:
        """Insert a budget."""
        ...

    @abstractmethod
    async def list_for_user(self, user_id: str) -> list[Budget]:
        """List a user's budgets."""
        ...

    @abstractmethod
    async def count_for_user(self, user_id: str) -> int:
        """Count a user's budgets."""
        ...
