"""Global pytest configuration and fixtures."""

# Standard library imports
from collections.abc import AsyncGenerator, Generator
from pathlib import Path

# Third-party imports
import pytest
import pytest_asyncio
from cryptography.hazmat.primitives.asymmetric import rsa
from sqlalchemy.engine import Engine

# Local imports
from subtrack.application.config import DatabaseConfig
from subtrack.application.services.auth_service import AuthResult, AuthService
from subtrack.application.services.migration_service import MigrationService
from subtrack.domain.services.password_policy import PasswordValidator
from subtrack.infrastructure.auth.jwt_service import JWTService
from subtrack.infrastructure.auth.password_service import PasswordHasher
from subtrack.infrastructure.database.connection import (
    create_database_engine,
    create_session_factory,
    init_database,
)
from subtrack.infrastructure.rate_limiting.limiter import LoginRateLimiter
from subtrack.infrastructure.rate_limiting.storage import MemoryRateLimitStorage
from subtrack.infrastructure.repositories.unit_of_work import SqlAlchemyUnitOfWorkFactory

TEST_PASSWORD = "password123"


@pytest.fixture(scope="session")
def rsa_private_key():
    """One RSA key for the whole run; generating keys is slow."""
    return rsa.generate_private_key(public_exponent=65537, key_size=2048)


@pytest.fixture
def jwt_service(rsa_private_key) -> JWTService:
    return JWTService(issuer="subtrack-test", private_key=rsa_private_key)


@pytest.fixture(scope="session")
def password_hasher() -> PasswordHasher:
    """Minimum bcrypt cost to keep the suite fast."""
    return PasswordHasher(rounds=4)


@pytest.fixture
def database_config(tmp_path: Path) -> DatabaseConfig:
    """File-backed SQLite so executor threads share one database."""
    url = f"sqlite:///{tmp_path / 'subtrack-test.db'}"
    return DatabaseConfig(url=url, busy_timeout_seconds=5.0)


@pytest.fixture
def db_engine(database_config: DatabaseConfig) -> Generator[Engine, None, None]:
    engine = create_database_engine(database_config)
    init_database(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(db_engine: Engine):
    return create_session_factory(db_engine)


@pytest.fixture
def uow_factory(session_factory) -> SqlAlchemyUnitOfWorkFactory:
    return SqlAlchemyUnitOfWorkFactory(session_factory)


@pytest.fixture
def rate_limiter() -> LoginRateLimiter:
    return LoginRateLimiter(limit=5, window="15min", storage=MemoryRateLimitStorage())


@pytest.fixture
def auth_service(
    uow_factory: SqlAlchemyUnitOfWorkFactory,
    password_hasher: PasswordHasher,
    jwt_service: JWTService,
    rate_limiter: LoginRateLimiter,
) -> AuthService:
    return AuthService(
        uow_factory=uow_factory,
        password_hasher=password_hasher,
        jwt_service=jwt_service,
        rate_limiter=rate_limiter,
        password_validator=PasswordValidator(),
    )


@pytest.fixture
def migration_service(uow_factory: SqlAlchemyUnitOfWorkFactory) -> MigrationService:
    return MigrationService(uow_factory, persistence_timeout_seconds=5.0)


@pytest_asyncio.fixture
async def registered_user(auth_service: AuthService) -> AsyncGenerator[AuthResult, None]:
    """A verified user registered with ``TEST_PASSWORD``."""
    yield await auth_service.register("test@example.com", TEST_PASSWORD, "Test User")
