"""
SQLAlchemy User Repository Implementation

Credential store. Maps between User domain entities and ``users`` rows.
"""

# Standard library imports
import logging

# Third-party imports
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

# Local imports
from subtrack.application.interfaces.exceptions import DuplicateEntityError, RepositoryError
from subtrack.domain.entities.user import User, UserSettings
from subtrack.infrastructure.database.models import UserModel

from .base import SqlAlchemyRepository

logger = logging.getLogger(__name__)


def _to_entity(model: UserModel) -> User:
    return User(
        id=model.id,
        email=model.email,
        password_hash=model.password_hash,
        name=model.name,
        is_verified=bool(model.is_verified),
        language=model.language,
        currency=model.currency,
        settings=UserSettings.from_dict(model.settings),
        created_at=model.created_at,
        updated_at=model.updated_at,
        last_login_at=model.last_login_at,
    )


def _apply(model: UserModel, user: User) -> None:
    model.email = user.email.lower()
    model.password_hash = user.password_hash
    model.name = user.name
    model.is_verified = user.is_verified
    model.language = user.language
    model.currency = user.currency
    model.settings = user.settings.to_dict()
    model.updated_at = user.updated_at
    model.last_login_at = user.last_login_at


class SqlAlchemyUserRepository(SqlAlchemyRepository):
    """SQLAlchemy implementation of IUserRepository."""

    entity_name = "User"

    async def add(self, user: User) -> User:
        """
        Persist a new user.

        The unique index on ``users.email`` decides concurrent registrations:
        the losing insert surfaces as ``DuplicateEntityError``.
        """

        def op(session: Session) -> None:
            model = UserModel(id=user.id, created_at=user.created_at)
            _apply(model, user)
            session.add(model)
            session.flush()

        try:
            await self._execute("save", op)
        except RepositoryError as e:
            if isinstance(e.cause, IntegrityError):
                logger.info(f"Duplicate registration rejected for {user.email}")
                raise DuplicateEntityError("User", user.email) from e
            raise
        return user

    async def get_by_id(self, user_id: str) -> User | None:
        def op(session: Session) -> User | None:
            model = session.get(UserModel, user_id)
            return _to_entity(model) if model else None

        return await self._execute("load", op)

    async def get_by_email(self, email: str) -> User | None:
        normalized = email.strip().lower()

        def op(session: Session) -> User | None:
            model = session.scalars(
                select(UserModel).where(UserModel.email == normalized)
            ).first()
            return _to_entity(model) if model else None

        return await self._execute("load", op)

    async def update(self, user: User) -> User:
        def op(session: Session) -> None:
            model = session.get(UserModel, user.id)
            if model is None:
                raise RepositoryError(f"User with identifier '{user.id}' not found")
            _apply(model, user)
            session.flush()

        await self._execute("update", op)
        return user
