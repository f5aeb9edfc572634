"""
Shared plumbing for SQLAlchemy repositories.

Repositories never touch the Session directly from the event loop: every
operation is a plain function handed to the owning unit of work, which runs
it on its dedicated worker thread.
"""

# Standard library imports
import logging
from collections.abc import Callable
from typing import TYPE_CHECKING, TypeVar

# Third-party imports
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

# Local imports
from subtrack.application.interfaces.exceptions import RepositoryError

if TYPE_CHECKING:
    from .unit_of_work import SqlAlchemyUnitOfWork

logger = logging.getLogger(__name__)

T = TypeVar("T")


class SqlAlchemyRepository:
    """Base class binding a repository to its unit of work."""

    entity_name = "Entity"

    def __init__(self, uow: "SqlAlchemyUnitOfWork") -> None:
        self.uow = uow

    async def _execute(self, operation: str, fn: Callable[[Session], T]) -> T:
        """Run ``fn`` inside the current transaction, wrapping store errors."""
        try:
            return await self.uow.execute(fn)
        except RepositoryError:
            raise
        except SQLAlchemyError as e:
            logger.error(f"Failed to {operation} {self.entity_name.lower()}: {e}")
            raise RepositoryError(f"Failed to {operation} {self.entity_name.lower()}", e) from e
