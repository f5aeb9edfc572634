"""Fixtures for HTTP-level tests over the full application."""

from collections.abc import Generator
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

from subtrack.application.config import ApplicationConfig, AuthConfig, DatabaseConfig
from subtrack.infrastructure.auth.jwt_service import JWTService
from subtrack.infrastructure.container import DIContainer
from subtrack.interfaces.http import create_app


@pytest.fixture
def container(tmp_path: Path, rsa_private_key) -> DIContainer:
    config = ApplicationConfig(
        database=DatabaseConfig(url=f"sqlite:///{tmp_path / 'api.db'}", busy_timeout_seconds=5.0),
        auth=AuthConfig(bcrypt_rounds=4),
    )
    container = DIContainer(config)
    container.register(JWTService, JWTService(issuer="subtrack", private_key=rsa_private_key))
    return container


@pytest.fixture
def client(container: DIContainer) -> Generator[TestClient, None, None]:
    with TestClient(create_app(container)) as test_client:
        yield test_client


@pytest.fixture
def api_user(client: TestClient) -> dict:
    """Registration payload of a fresh user: ``user``, ``accessToken``, ``refreshToken``."""
    response = client.post(
        "/auth/register",
        json={"email": "api@example.com", "password": "password123", "name": "Api User"},
    )
    assert response.status_code == 201
    return response.json()["data"]
