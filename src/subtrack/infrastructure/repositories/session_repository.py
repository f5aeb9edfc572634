"""
SQLAlchemy Session Repository Implementation

Session store. The single source of truth for refresh-token validity.
"""

# Standard library imports
import logging
from datetime import datetime

# Third-party imports
from sqlalchemy import delete, select
from sqlalchemy.orm import Session as DbSession

# Local imports
from subtrack.domain.entities.session import Session
from subtrack.infrastructure.database.models import SessionModel

from .base import SqlAlchemyRepository

logger = logging.getLogger(__name__)


def _to_entity(model: SessionModel) -> Session:
    return Session(
        id=model.id,
        user_id=model.user_id,
        refresh_token_hash=model.refresh_token_hash,
        issued_at=model.issued_at,
        expires_at=model.expires_at,
    )


class SqlAlchemySessionRepository(SqlAlchemyRepository):
    """SQLAlchemy implementation of ISessionRepository."""

    entity_name = "Session"

    async def add(self, session: Session) -> Session:
        def op(db: DbSession) -> None:
            db.add(
                SessionModel(
                    id=session.id,
                    user_id=session.user_id,
                    refresh_token_hash=session.refresh_token_hash,
                    issued_at=session.issued_at,
                    expires_at=session.expires_at,
                )
            )
            db.flush()

        await self._execute("save", op)
        return session

    async def consume(self, user_id: str, token_hash: str, now: datetime) -> bool:
        """
        Delete the live session for (user, hash) in a single statement.

        Concurrent callers holding the same token race on this DELETE; the
        database lets exactly one of them see a rowcount of 1.
        """

        def op(db: DbSession) -> bool:
            result = db.execute(
                delete(SessionModel)
                .where(
                    SessionModel.refresh_token_hash == token_hash,
                    SessionModel.user_id == user_id,
                    SessionModel.expires_at > now,
                )
                .execution_options(synchronize_session=False)
            )
            return result.rowcount == 1

        return await self._execute("consume", op)

    async def delete_by_token_hash(self, user_id: str, token_hash: str) -> bool:
        def op(db: DbSession) -> bool:
            result = db.execute(
                delete(SessionModel)
                .where(
                    SessionModel.refresh_token_hash == token_hash,
                    SessionModel.user_id == user_id,
                )
                .execution_options(synchronize_session=False)
            )
            return result.rowcount > 0

        return await self._execute("delete", op)

    async def delete_by_id(self, user_id: str, session_id: str) -> bool:
        def op(db: DbSession) -> bool:
            result = db.execute(
                delete(SessionModel)
                .where(SessionModel.id == session_id, SessionModel.user_id == user_id)
                .execution_options(synchronize_session=False)
            )
            return result.rowcount > 0

        return await self._execute("delete", op)

    async def delete_all_for_user(self, user_id: str) -> int:
        def op(db: DbSession) -> int:
            result = db.execute(
                delete(SessionModel)
                .where(SessionModel.user_id == user_id)
                .execution_options(synchronize_session=False)
            )
            return int(result.rowcount)

        return await self._execute("delete", op)

    async def delete_expired(self, now: datetime) -> int:
        def op(db: DbSession) -> int:
            result = db.execute(
                delete(SessionModel)
                .where(SessionModel.expires_at <= now)
                .execution_options(synchronize_session=False)
            )
            return int(result.rowcount)

        return await self._execute("delete", op)

    async def list_for_user(self, user_id: str) -> list[Session]:
        def op(db: DbSession) -> list[Session]:
            models = db.scalars(
                select(SessionModel)
                .where(SessionModel.user_id == user_id)
                .order_by(SessionModel.issued_at.desc())
            ).all()
            return [_to_entity(model) for model in models]

        return await self._execute("load", op)
