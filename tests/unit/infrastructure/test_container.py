"""
Unit tests for the dependency injection container.
"""

from collections.abc import Generator
from pathlib import Path

import pytest
from sqlalchemy import inspect
from sqlalchemy.engine import Engine

from subtrack.application.config import (
    ApplicationConfig,
    AuthConfig,
    DatabaseConfig,
    MigrationConfig,
)
from subtrack.application.services.auth_service import AuthService
from subtrack.application.services.migration_service import MigrationService
from subtrack.infrastructure.auth.jwt_service import JWTService
from subtrack.infrastructure.auth.password_service import PasswordHasher
from subtrack.infrastructure.container import DIContainer
from subtrack.infrastructure.rate_limiting.limiter import LoginRateLimiter


@pytest.fixture
def container(tmp_path: Path, rsa_private_key) -> Generator[DIContainer, None, None]:
    config = ApplicationConfig(
        database=DatabaseConfig(url=f"sqlite:///{tmp_path / 'container.db'}"),
        auth=AuthConfig(bcrypt_rounds=5, auto_verify_users=False),
        migration=MigrationConfig(persistence_timeout_seconds=7.5),
    )
    container = DIContainer(config)
    container.register(JWTService, JWTService(private_key=rsa_private_key))
    yield container
    container.cleanup()


class TestDIContainer:
    """Wiring and lifecycle."""

    def test_services_are_wired_from_config(self, container):
        auth_service = container.auth_service
        migration_service = container.migration_service

        assert isinstance(auth_service, AuthService)
        assert auth_service.auto_verify_users is False
        assert auth_service.password_hasher is container.get(PasswordHasher)
        assert container.get(PasswordHasher).rounds == 5
        assert auth_service.rate_limiter is container.get(LoginRateLimiter)
        assert isinstance(migration_service, MigrationService)
        assert migration_service.persistence_timeout_seconds == 7.5

    def test_components_are_singletons(self, container):
        assert container.get(AuthService) is container.get(AuthService)
        assert container.auth_service.uow_factory is container.migration_service.uow_factory

    def test_registered_instance_wins(self, container):
        assert container.auth_service.jwt_service is container.get(JWTService)

    def test_unknown_component(self, container):
        class Unregistered:
            pass

        assert container.has(Unregistered) is False
        with pytest.raises(KeyError):
            container.get(Unregistered)

    def test_initialize_creates_schema(self, container):
        container.initialize()

        tables = set(inspect(container.get(Engine)).get_table_names())
        assert {"users", "sessions", "subscriptions", "budgets"} <= tables
