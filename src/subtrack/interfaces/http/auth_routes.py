"""
Authentication API endpoints.

Thin adapter over ``AuthService``: parses request bodies, calls the service
and wraps results in the response envelope. Errors propagate to the
application's exception handlers.
"""

import logging
from typing import Any

from fastapi import APIRouter, Depends, Request, status
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ConfigDict, Field

from subtrack.application.services.auth_service import AuthService

from .dependencies import get_auth_service, get_current_user
from .responses import success_response

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["Authentication"])


# Request models
class RegisterRequest(BaseModel):
    """User registration request."""

    email: str
    password: str
    name: str


class LoginRequest(BaseModel):
    """User login request."""

    email: str
    password: str


class RefreshRequest(BaseModel):
    """Token refresh request."""

    model_config = ConfigDict(populate_by_name=True)

    refresh_token: str = Field(..., alias="refreshToken")


class LogoutRequest(BaseModel):
    """Logout request. The refresh token is optional."""

    model_config = ConfigDict(populate_by_name=True)

    refresh_token: str | None = Field(None, alias="refreshToken")


class ChangePasswordRequest(BaseModel):
    """Change password request."""

    model_config = ConfigDict(populate_by_name=True)

    current_password: str = Field(..., alias="currentPassword")
    new_password: str = Field(..., alias="newPassword")


class UpdateProfileRequest(BaseModel):
    """Profile update request. Omitted fields are left unchanged."""

    name: str | None = None
    language: str | None = None
    currency: str | None = None
    settings: dict[str, Any] | None = None


def _client_id(request: Request) -> str | None:
    return request.client.host if request.client else None


@router.post("/register")
async def register(
    body: RegisterRequest,
    auth_service: AuthService = Depends(get_auth_service),
) -> JSONResponse:
    """Register a new user."""
    result = await auth_service.register(body.email, body.password, body.name)
    return success_response(
        result.to_dict(), "User registered successfully", status.HTTP_201_CREATED
    )


@router.post("/login")
async def login(
    body: LoginRequest,
    request: Request,
    auth_service: AuthService = Depends(get_auth_service),
) -> JSONResponse:
    """Authenticate with email and password."""
    result = await auth_service.login(body.email, body.password, _client_id(request))
    return success_response(result.to_dict(), "Login successful")


@router.post("/refresh")
async def refresh(
    body: RefreshRequest,
    auth_service: AuthService = Depends(get_auth_service),
) -> JSONResponse:
    """Rotate a refresh token."""
    tokens = await auth_service.refresh_token(body.refresh_token)
    return success_response(tokens.to_dict(), "Token refreshed successfully")


@router.get("/profile")
async def get_profile(
    user_id: str = Depends(get_current_user),
    auth_service: AuthService = Depends(get_auth_service),
) -> JSONResponse:
    """Get the current user's profile."""
    profile = await auth_service.get_user_profile(user_id)
    return success_response({"user": profile.to_dict()})


@router.put("/profile")
async def update_profile(
    body: UpdateProfileRequest,
    user_id: str = Depends(get_current_user),
    auth_service: AuthService = Depends(get_auth_service),
) -> JSONResponse:
    """Update the current user's profile."""
    profile = await auth_service.update_profile(
        user_id,
        name=body.name,
        language=body.language,
        currency=body.currency,
        settings=body.settings,
    )
    return success_response({"user": profile.to_dict()}, "Profile updated successfully")


@router.post("/logout")
async def logout(
    body: LogoutRequest | None = None,
    user_id: str = Depends(get_current_user),
    auth_service: AuthService = Depends(get_auth_service),
) -> JSONResponse:
    """Revoke the session of the given refresh token. Always succeeds."""
    await auth_service.logout(user_id, body.refresh_token if body else None)
    return success_response(message="Logout successful")


@router.post("/logout-all")
async def logout_all(
    user_id: str = Depends(get_current_user),
    auth_service: AuthService = Depends(get_auth_service),
) -> JSONResponse:
    """Revoke every session of the current user."""
    revoked = await auth_service.logout_all(user_id)
    return success_response({"sessionsRevoked": revoked}, "Logged out from all sessions")


@router.get("/sessions")
async def list_sessions(
    user_id: str = Depends(get_current_user),
    auth_service: AuthService = Depends(get_auth_service),
) -> JSONResponse:
    """List the current user's sessions."""
    sessions = await auth_service.get_user_sessions(user_id)
    return success_response({"sessions": [session.to_dict() for session in sessions]})


@router.delete("/sessions/{session_id}")
async def revoke_session(
    session_id: str,
    user_id: str = Depends(get_current_user),
    auth_service: AuthService = Depends(get_auth_service),
) -> JSONResponse:
    """Revoke one of the current user's sessions."""
    await auth_service.revoke_user_session(user_id, session_id)
    return success_response(message="Session revoked")


@router.post("/change-password")
async def change_password(
    body: ChangePasswordRequest,
    user_id: str = Depends(get_current_user),
    auth_service: AuthService = Depends(get_auth_service),
) -> JSONResponse:
    """Change the current user's password. Every session is revoked."""
    await auth_service.change_password(user_id, body.current_password, body.new_password)
    return success_response(message="Password changed successfully")
