"""
FastAPI dependencies.

Services come from the container stored on ``app.state``; the current user is
resolved from the ``Authorization: Bearer`` header.
"""

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from subtrack.application.services.auth_service import AuthService
from subtrack.application.services.migration_service import MigrationService
from subtrack.domain.exceptions import AuthError, AuthErrorKind
from subtrack.infrastructure.container import DIContainer
from subtrack.infrastructure.monitoring.logging import user_id_var

bearer_scheme = HTTPBearer(auto_error=False)


def get_container(request: Request) -> DIContainer:
    return request.app.state.container  # type: ignore[no-any-return]


def get_auth_service(container: DIContainer = Depends(get_container)) -> AuthService:
    return container.auth_service


def get_migration_service(container: DIContainer = Depends(get_container)) -> MigrationService:
    return container.migration_service


async def get_current_user(
    request: Request,
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
    auth_service: AuthService = Depends(get_auth_service),
) -> str:
    """
    Get the authenticated user ID.

    Raises:
        AuthError: If the bearer token is missing or invalid
    """
    if credentials is None:
        raise AuthError("Access token required", AuthErrorKind.MISSING_TOKEN)

    user_id = auth_service.verify_token(credentials.credentials)
    request.state.user_id = user_id
    user_id_var.set(user_id)
    return user_id
