"""
SQLAlchemy Subscription Repository Implementation
"""

# Standard library imports
from decimal import Decimal

# Third-party imports
from sqlalchemy import func, select
from sqlalchemy.orm import Session

# Local imports
from subtrack.domain.entities.subscription import BillingCycle, Subscription, SubscriptionCategory
from subtrack.infrastructure.database.models import SubscriptionModel

from .base import SqlAlchemyRepository


def _to_model(subscription: Subscription) -> SubscriptionModel:
    return SubscriptionModel(
        id=subscription.id,
        user_id=subscription.user_id,
        name=subscription.name,
        amount=subscription.amount,
        currency=subscription.currency,
        billing_cycle=subscription.billing_cycle.value,
        payment_day=subscription.payment_day,
        category=subscription.category.value,
        description=subscription.description,
        logo=subscription.logo,
        color=subscription.color,
        is_active=subscription.is_active,
        start_date=subscription.start_date,
        next_payment=subscription.next_payment,
        created_at=subscription.created_at,
    )


def _to_entity(model: SubscriptionModel) -> Subscription:
    return Subscription(
        id=model.id,
        user_id=model.user_id,
        name=model.name,
        amount=Decimal(model.amount),
        currency=model.currency,
        billing_cycle=BillingCycle(model.billing_cycle),
        payment_day=model.payment_day,
        category=SubscriptionCategory(model.category),
        description=model.description,
        logo=model.logo,
        color=model.color,
        is_active=bool(model.is_active),
        start_date=model.start_date,
        next_payment=model.next_payment,
        created_at=model.created_at,
    )


class SqlAlchemySubscriptionRepository(SqlAlchemyRepository):
    """SQLAlchemy implementation of ISubscriptionRepository."""

    entity_name = "Subscription"

    async def add_many(self, subscriptions: list[Subscription]) -> int:
        if not subscriptions:
            return 0

        def op(session: Session) -> int:
            session.add_all([_to_model(subscription) for subscription in subscriptions])
            session.flush()
            return len(subscriptions)

        return await self._execute("save", op)

    async def list_for_user(self, user_id: str) -> list[Subscription]:
        def op(session: Session) -> list[Subscription]:
            models = session.scalars(
                select(SubscriptionModel)
                .where(SubscriptionModel.user_id == user_id)
                .order_by(SubscriptionModel.next_payment)
            ).all()
            return [_to_entity(model) for model in models]

        return await self._execute("load", op)

    async def count_for_user(self, user_id: str) -> int:
        def op(session: Session) -> int:
            return int(
                session.scalar(
                    select(func.count())
                    .select_from(SubscriptionModel)
                    .where(SubscriptionModel.user_id == user_id)
                )
                or 0
            )

        return await self._execute("count", op)
