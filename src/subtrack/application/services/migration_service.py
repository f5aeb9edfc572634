"""
Data migration service.

Imports the data a user kept in the browser's local storage (subscriptions,
a budget amount and preference settings) into the relational store.

Migration runs in two phases. The validation phase is pure: every legacy
subscription is cleaned and validated, rejected records are reported and left
out. The persistence phase writes everything that passed in one unit of work;
any failure there, including a timeout, rolls the whole batch back.
"""

import asyncio
import logging
import threading
from collections.abc import Mapping
from dataclasses import dataclass, field, replace
from datetime import UTC, datetime
from decimal import Decimal
from typing import Any

from subtrack.application.interfaces.unit_of_work import IUnitOfWorkFactory
from subtrack.domain.entities.subscription import Budget, BudgetAlert, Subscription
from subtrack.domain.entities.user import DEFAULT_CURRENCY, DEFAULT_LANGUAGE, UserSettings
from subtrack.domain.exceptions import ConflictError, NotFoundError, ValidationError
from subtrack.domain.services.subscription_validator import SubscriptionValidator, quantize_amount
from subtrack.infrastructure.monitoring.logging import log_business_event

logger = logging.getLogger(__name__)

DEFAULT_BUDGET_NAME = "Presupuesto Principal"
DEFAULT_BUDGET_DESCRIPTION = "Presupuesto migrado desde localStorage"
PERSISTENCE_FAILURE = "Failed to persist migrated data"
DEFAULT_BUDGET_ALERTS = (
    BudgetAlert(threshold=80, type="email", message="80% del presupuesto utilizado"),
    BudgetAlert(threshold=100, type="push", message="Presupuesto excedido"),
)


@dataclass
class MigrationCounts:
    """Per-section outcome of a migration."""

    migrated: int = 0
    failed: int = 0
    errors: list[str] = field(default_factory=list)


@dataclass
class MigrationResult:
    """Outcome of ``MigrationService.migrate_user_data``."""

    success: bool
    message: str
    subscriptions: MigrationCounts = field(default_factory=MigrationCounts)
    budget: MigrationCounts = field(default_factory=MigrationCounts)
    settings: MigrationCounts = field(default_factory=MigrationCounts)
    error: str | None = None

    @property
    def total_migrated(self) -> int:
        return self.subscriptions.migrated + self.budget.migrated + self.settings.migrated

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "success": self.success,
            "message": self.message,
            "details": {
                "subscriptions": {
                    "migrated": self.subscriptions.migrated,
                    "failed": self.subscriptions.failed,
                    "errors": list(self.subscriptions.errors),
                },
                "budget": {"migrated": self.budget.migrated},
                "settings": {"migrated": self.settings.migrated},
            },
        }
        if self.error is not None:
            data["error"] = self.error
        return data


@dataclass(frozen=True)
class MigrationStatus:
    """Migration state of one user."""

    has_migrated: bool
    subscription_count: int
    budget_count: int
    migrated_at: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "hasMigrated": self.has_migrated,
            "subscriptionCount": self.subscription_count,
            "budgetCount": self.budget_count,
            "migratedAt": self.migrated_at,
        }


@dataclass
class _MigrationPlan:
    """Validated data ready to be persisted."""

    subscriptions: list[Subscription]
    budget_amount: Decimal | None
    settings: UserSettings | None
    language: str
    currency: str

    @property
    def is_empty(self) -> bool:
        return not self.subscriptions and self.budget_amount is None and self.settings is None


class MigrationService:
    """
    Imports legacy client-side data for a user.

    Only one migration per user may run at a time; a concurrent second call is
    rejected with ``ConflictError``.
    """

    def __init__(
        self,
        uow_factory: IUnitOfWorkFactory,
        validator: SubscriptionValidator | None = None,
        persistence_timeout_seconds: float = 30.0,
    ):
        self.uow_factory = uow_factory
        self.validator = validator or SubscriptionValidator()
        self.persistence_timeout_seconds = persistence_timeout_seconds
        self._in_progress: set[str] = set()
        self._lock = threading.Lock()

    def _acquire(self, user_id: str) -> None:
        with self._lock:
            if user_id in self._in_progress:
                raise ConflictError("Migration already in progress")
            self._in_progress.add(user_id)

    def _release(self, user_id: str) -> None:
        with self._lock:
            self._in_progress.discard(user_id)

    async def migrate_user_data(
        self, user_id: str, payload: Mapping[str, Any] | None
    ) -> MigrationResult:
        """
        Migrate a user's legacy data.

        Args:
            user_id: Owner of the imported data
            payload: Legacy payload with optional ``subscriptions`` (list),
                ``budget`` (number) and ``settings`` (mapping)

        Returns:
            MigrationResult describing what was imported

        Raises:
            ValidationError: If the payload is not a mapping
            ConflictError: If a migration for the user is already running
        """
        if payload is not None and not isinstance(payload, Mapping):
            raise ValidationError("Migration payload must be an object")
        self._acquire(user_id)
        try:
            return await self._migrate(user_id, payload or {})
        finally:
            self._release(user_id)

    async def _migrate(self, user_id: str, payload: Mapping[str, Any]) -> MigrationResult:
        logger.info(f"Starting data migration for user {user_id}")
        result = MigrationResult(success=False, message="")
        plan = self._validate(user_id, payload, result)

        if plan.is_empty:
            result.success = True
            result.message = self._success_message(result)
            logger.info(f"Nothing to migrate for user {user_id}")
            return result

        try:
            await asyncio.wait_for(
                self._persist(user_id, plan), timeout=self.persistence_timeout_seconds
            )
        except NotFoundError:
            raise
        except TimeoutError:
            logger.error(
                f"Migration for user {user_id} timed out after "
                f"{self.persistence_timeout_seconds}s, rolled back"
            )
            return self._failed(result, "Migration timed out")
        except Exception as e:
            logger.error(f"Migration for user {user_id} failed, rolled back: {e}")
            return self._failed(result, PERSISTENCE_FAILURE)

        result.subscriptions.migrated = len(plan.subscriptions)
        result.budget.migrated = 1 if plan.budget_amount is not None else 0
        result.settings.migrated = 1 if plan.settings is not None else 0
        result.success = True
        result.message = self._success_message(result)

        log_business_event(
            "data_migration_completed",
            user_id,
            subscriptions_migrated=result.subscriptions.migrated,
            subscriptions_failed=result.subscriptions.failed,
            budget_migrated=result.budget.migrated,
            settings_migrated=result.settings.migrated,
        )
        return result

    def _validate(
        self, user_id: str, payload: Mapping[str, Any], result: MigrationResult
    ) -> _MigrationPlan:
        """Validation phase. Pure; collects item errors into ``result``."""
        now = datetime.now(UTC)
        subscriptions: list[Subscription] = []

        records = payload.get("subscriptions")
        if records is None:
            records = []
        elif not isinstance(records, (list, tuple)):
            message = "Subscriptions must be a list, nothing was imported from it"
            result.subscriptions.errors.append(message)
            logger.warning(f"Skipping subscriptions for user {user_id}: {message}")
            records = []

        for record in records:
            outcome = self.validator.validate(record, user_id, now)
            if outcome.is_valid and outcome.subscription is not None:
                subscriptions.append(outcome.subscription)
                continue

            name = record.get("name") if isinstance(record, Mapping) else None
            message = (
                f'Failed to migrate subscription "{name or "unknown"}": {outcome.error_message}'
            )
            result.subscriptions.failed += 1
            result.subscriptions.errors.append(message)
            logger.warning(f"Skipping subscription for user {user_id}: {message}")

        raw_settings = payload.get("settings")
        settings = None
        if isinstance(raw_settings, Mapping):
            settings, setting_errors = UserSettings.from_dict(dict(raw_settings)).validated()
            for message in setting_errors:
                result.settings.errors.append(message)
                logger.warning(f"Legacy settings of user {user_id}: {message}")
        language = DEFAULT_LANGUAGE
        currency = DEFAULT_CURRENCY
        if settings is not None:
            language = settings.language or DEFAULT_LANGUAGE
            currency = settings.currency or DEFAULT_CURRENCY

        return _MigrationPlan(
            subscriptions=subscriptions,
            budget_amount=self._parse_budget(payload.get("budget")),
            settings=settings,
            language=language,
            currency=currency,
        )

    @staticmethod
    def _parse_budget(value: Any) -> Decimal | None:
        if not isinstance(value, (int, float, Decimal)):
            return None
        amount = quantize_amount(value)
        if amount is None or amount <= 0:
            return None
        return amount

    async def _persist(self, user_id: str, plan: _MigrationPlan) -> None:
        """Persistence phase. All writes share one unit of work."""
        async with self.uow_factory.create_unit_of_work() as uow:
            user = await uow.users.get_by_id(user_id)
            if user is None:
                raise NotFoundError("User", user_id)

            await uow.subscriptions.add_many(plan.subscriptions)

            if plan.budget_amount is not None:
                await uow.budgets.add(
                    Budget(
                        user_id=user_id,
                        name=DEFAULT_BUDGET_NAME,
                        description=DEFAULT_BUDGET_DESCRIPTION,
                        amount=plan.budget_amount,
                        is_default=True,
                        alerts=list(DEFAULT_BUDGET_ALERTS),
                    )
                )

            now = datetime.now(UTC)
            settings = user.settings
            changes: dict[str, Any] = {}
            if plan.settings is not None:
                settings = settings.merged_with(plan.settings)
                changes = {"language": plan.language, "currency": plan.currency}
            await uow.users.update(
                replace(
                    user,
                    **changes,
                    settings=settings.with_migration_marker(now),
                    updated_at=now,
                )
            )

    @staticmethod
    def _failed(result: MigrationResult, error: str) -> MigrationResult:
        """Mark ``result`` failed. Nothing from the persistence phase was kept."""
        result.success = False
        result.message = "Migration failed"
        result.error = error
        result.subscriptions.migrated = 0
        result.budget.migrated = 0
        result.settings.migrated = 0
        return result

    @staticmethod
    def _success_message(result: MigrationResult) -> str:
        return f"Migration completed successfully. {result.total_migrated} items migrated."

    async def has_user_migrated(self, user_id: str) -> bool:
        """True if the user's settings carry the migration marker."""
        async with self.uow_factory.create_unit_of_work() as uow:
            user = await uow.users.get_by_id(user_id)
        return bool(user and user.settings.migrated)

    async def get_migration_status(self, user_id: str) -> MigrationStatus:
        """Report the marker and how many subscriptions and budgets the user has."""
        async with self.uow_factory.create_unit_of_work() as uow:
            user = await uow.users.get_by_id(user_id)
            subscription_count = await uow.subscriptions.count_for_user(user_id)
            budget_count = await uow.budgets.count_for_user(user_id)

        return MigrationStatus(
            has_migrated=bool(user and user.settings.migrated),
            subscription_count=subscription_count,
            budget_count=budget_count,
            migrated_at=user.settings.migrated_at if user else None,
        )

    async def clear_migration_flag(self, user_id: str) -> None:
        """Remove the migration marker, keeping every other setting."""
        async with self.uow_factory.create_unit_of_work() as uow:
            user = await uow.users.get_by_id(user_id)
            if user is None:
                logger.info(f"No user {user_id}, nothing to clear")
                return
            await uow.users.update(
                replace(
                    user,
                    settings=user.settings.without_migration_marker(),
                    updated_at=datetime.now(UTC),
                )
            )

        logger.info(f"Migration flag cleared for user {user_id}")
