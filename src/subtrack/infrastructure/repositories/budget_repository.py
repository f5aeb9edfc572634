"""
SQLAlchemy Budget Repository Implementation
"""

# Standard library imports
from decimal import Decimal

# Third-party imports
from sqlalchemy import func, select
from sqlalchemy.orm import Session

# Local imports
from subtrack.domain.entities.subscription import Budget, BudgetAlert
from subtrack.infrastructure.database.models import BudgetModel

from .base import SqlAlchemyRepository


def _to_entity(model: BudgetModel) -> Budget:
    return Budget(
        id=model.id,
        user_id=model.user_id,
        name=model.name,
        description=model.description,
        amount=Decimal(model.amount),
        currency=model.currency,
        period=model.period,
        is_default=bool(model.is_default),
        alerts=[
            BudgetAlert(
                threshold=alert["threshold"],
                type=alert["type"],
                message=alert["message"],
                is_active=alert.get("isActive", True),
            )
            for alert in model.alerts or []
        ],
        created_at=model.created_at,
    )


class SqlAlchemyBudgetRepository(SqlAlchemyRepository):
    """SQLAlchemy implementation of IBudgetRepository."""

    entity_name = "Budget"

    async def add(self, budget: Budget) -> Budget:
        def op(session: Session) -> None:
            session.add(
                BudgetModel(
                    id=budget.id,
                    user_id=budget.user_id,
                    name=budget.name,
                    description=budget.description,
                    amount=budget.amount,
                    currency=budget.currency,
                    period=budget.period,
                    is_default=budget.is_default,
                    alerts=[alert.to_dict() for alert in budget.alerts],
                    created_at=budget.created_at,
                )
            )
            session.flush()

        await self._execute("save", op)
        return budget

    async def list_for_user(self, user_id: str) -> list[Budget]:
        def op(session: Session) -> list[Budget]:
            models = session.scalars(
                select(BudgetModel)
                .where(BudgetModel.user_id == user_id)
                .order_by(BudgetModel.created_at)
            ).all()
            return [_to_entity(model) for model in models]

        return await self._execute("load", op)

    async def count_for_user(self, user_id: str) -> int:
        def op(session: Session) -> int:
            return int(
                session.scalar(
                    select(func.count())
                    .select_from(BudgetModel)
                    .where(BudgetModel.user_id == user_id)
                )
                or 0
            )

        return await self._execute("count", op)
