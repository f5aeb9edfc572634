"""
Dependency Injection Container - Central container for application dependencies.

Builds every collaborator of the auth and migration services from an
``ApplicationConfig``. Components are created lazily and kept as singletons,
so tests can ``register`` replacements before the first ``get``.
"""

import logging
from collections.abc import Callable
from typing import Any, TypeVar, cast

from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker

from subtrack.application.config import ApplicationConfig
from subtrack.application.interfaces.unit_of_work import IUnitOfWorkFactory
from subtrack.application.services.auth_service import AuthService
from subtrack.application.services.migration_service import MigrationService
from subtrack.domain.services.password_policy import PasswordValidator
from subtrack.domain.services.subscription_validator import SubscriptionValidator
from subtrack.infrastructure.auth.jwt_service import JWTService
from subtrack.infrastructure.auth.password_service import PasswordHasher
from subtrack.infrastructure.database.connection import (
    create_database_engine,
    create_session_factory,
    init_database,
)
from subtrack.infrastructure.rate_limiting.limiter import LoginRateLimiter
from subtrack.infrastructure.rate_limiting.storage import RateLimitStorage, create_storage
from subtrack.infrastructure.repositories.unit_of_work import SqlAlchemyUnitOfWorkFactory

logger = logging.getLogger(__name__)

T = TypeVar("T")


class DIContainer:
    """
    Dependency Injection Container for the SubTrack backend.

    Manages the creation and wiring of all application components.
    """

    def __init__(self, config: ApplicationConfig | None = None) -> None:
        """Initialize the container with configuration."""
        self.config = config or ApplicationConfig()
        self._singletons: dict[type[Any], Any] = {}
        self._factories: dict[type[Any], Callable[[], Any]] = {}

        self._register_infrastructure()
        self._register_domain_services()
        self._register_application_services()

        logger.info("Dependency injection container initialized")

    def _register_infrastructure(self) -> None:
        """Register infrastructure components."""
        self._register(Engine, lambda: create_database_engine(self.config.database))
        self._register(sessionmaker, lambda: create_session_factory(self.get(Engine)))
        self._register(
            IUnitOfWorkFactory,  # type: ignore[type-abstract]
            lambda: SqlAlchemyUnitOfWorkFactory(self.get(sessionmaker)),
        )

        auth = self.config.auth
        self._register(PasswordHasher, lambda: PasswordHasher(rounds=auth.bcrypt_rounds))
        self._register(
            JWTService,
            lambda: JWTService(
                private_key_path=auth.private_key_path,
                public_key_path=auth.public_key_path,
                issuer=auth.issuer,
                access_token_expire_minutes=auth.access_token_expire_minutes,
                refresh_token_expire_days=auth.refresh_token_expire_days,
                environment=self.config.environment.value,
            ),
        )

        rate_limit = self.config.rate_limit
        self._register(
            RateLimitStorage,  # type: ignore[type-abstract]
            lambda: create_storage(rate_limit.storage, rate_limit.redis_url),
        )
        self._register(
            LoginRateLimiter,
            lambda: LoginRateLimiter(
                limit=rate_limit.login_attempts,
                window=rate_limit.login_window,
                storage=self.get(RateLimitStorage),  # type: ignore[type-abstract]
            ),
        )

    def _register_domain_services(self) -> None:
        """Register domain services."""
        self._register(
            PasswordValidator,
            lambda: PasswordValidator(min_length=self.config.auth.password_min_length),
        )
        self._register(SubscriptionValidator, SubscriptionValidator)

    def _register_application_services(self) -> None:
        """Register application services."""
        self._register(
            AuthService,
            lambda: AuthService(
                uow_factory=self.get(IUnitOfWorkFactory),  # type: ignore[type-abstract]
                password_hasher=self.get(PasswordHasher),
                jwt_service=self.get(JWTService),
                rate_limiter=self.get(LoginRateLimiter),
                password_validator=self.get(PasswordValidator),
                auto_verify_users=self.config.auth.auto_verify_users,
            ),
        )
        self._register(
            MigrationService,
            lambda: MigrationService(
                uow_factory=self.get(IUnitOfWorkFactory),  # type: ignore[type-abstract]
                validator=self.get(SubscriptionValidator),
                persistence_timeout_seconds=self.config.migration.persistence_timeout_seconds,
            ),
        )

    def _register(self, cls: type[T], factory: Callable[[], Any]) -> None:
        """Register a lazily created singleton."""
        self._factories[cls] = factory

    def get(self, cls: type[T]) -> T:
        """
        Get an instance of a registered component.

        Raises:
            KeyError: If the class is not registered
        """
        if cls in self._singletons:
            return cast(T, self._singletons[cls])

        if cls not in self._factories:
            raise KeyError(f"No registration found for {cls.__name__}")

        instance = self._factories[cls]()
        self._singletons[cls] = instance
        return cast(T, instance)

    def has(self, cls: type[T]) -> bool:
        """Check if a component is registered."""
        return cls in self._factories

    def register(self, cls: type[T], instance: T) -> None:
        """Register a pre-created instance."""
        self._singletons[cls] = instance
        self._factories[cls] = lambda: instance

    @property
    def auth_service(self) -> AuthService:
        return self.get(AuthService)

    @property
    def migration_service(self) -> MigrationService:
        return self.get(MigrationService)

    def initialize(self) -> None:
        """Create the database schema."""
        init_database(self.get(Engine))
        logger.info("Container initialized successfully")

    def cleanup(self) -> None:
        """Release pooled connections and drop all singletons."""
        if Engine in self._singletons:
            self._singletons[Engine].dispose()
        self._singletons.clear()
        logger.info("Container cleaned up")

