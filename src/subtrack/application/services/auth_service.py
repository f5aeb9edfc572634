"""
Authentication service.

Orchestrates registration, login, refresh-token rotation, logout, token
verification and profile access over the credential store, the session
store, the password hasher, the token service and the login rate limiter.

Session lineage: Unauthenticated -> Active (login) -> Rotated (refresh,
replaced by a new Active session) -> Revoked (logout or expiry).
"""

import asyncio
import logging
from collections.abc import Callable, Generator
from contextlib import contextmanager
from dataclasses import dataclass, replace
from datetime import UTC, datetime
from typing import Any, TypeVar

from email_validator import EmailNotValidError, validate_email

from subtrack.application.interfaces.exceptions import DuplicateEntityError, RepositoryError
from subtrack.application.interfaces.unit_of_work import IUnitOfWork, IUnitOfWorkFactory
from subtrack.domain.entities.session import Session
from subtrack.domain.entities.user import User, UserProfile, UserSettings
from subtrack.domain.exceptions import (
    AuthError,
    AuthErrorKind,
    ConflictError,
    NotFoundError,
    PersistenceError,
    RateLimitError,
    ValidationError,
)
from subtrack.domain.services.password_policy import PasswordValidator
from subtrack.infrastructure.auth.jwt_service import (
    InvalidTokenException,
    JWTService,
    TokenExpiredException,
)
from subtrack.infrastructure.auth.password_service import PasswordHasher
from subtrack.infrastructure.monitoring.logging import log_auth_event
from subtrack.infrastructure.rate_limiting.limiter import LoginRateLimiter

logger = logging.getLogger(__name__)

T = TypeVar("T")

INVALID_CREDENTIALS = "Invalid credentials"
INVALID_REFRESH_TOKEN = "Invalid refresh token"
MAX_NAME_LENGTH = 255


@dataclass
class TokenPair:
    """Access and refresh token issued together."""

    access_token: str
    refresh_token: str
    expires_in: int

    def to_dict(self) -> dict[str, Any]:
        return {
            "accessToken": self.access_token,
            "refreshToken": self.refresh_token,
            "expiresIn": self.expires_in,
        }


@dataclass
class AuthResult:
    """Outcome of a successful registration or login."""

    user: UserProfile
    access_token: str
    refresh_token: str
    expires_in: int

    def to_dict(self) -> dict[str, Any]:
        return {
            "user": self.user.to_dict(),
            "accessToken": self.access_token,
            "refreshToken": self.refresh_token,
            "expiresIn": self.expires_in,
        }


@dataclass
class SessionInfo:
    """Public view of a session. Never exposes the token hash."""

    id: str
    issued_at: datetime
    expires_at: datetime

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "issuedAt": self.issued_at.isoformat(),
            "expiresAt": self.expires_at.isoformat(),
        }


@contextmanager
def _store_errors(operation: str) -> Generator[None, None, None]:
    """Translate repository and transaction failures into PersistenceError."""
    try:
        yield
    except RepositoryError as e:
        logger.error(f"Store failure during {operation}: {e}")
        raise PersistenceError(f"Failed to {operation}", e) from e


class AuthService:
    """User authentication and session lifecycle service."""

    def __init__(
        self,
        uow_factory: IUnitOfWorkFactory,
        password_hasher: PasswordHasher,
        jwt_service: JWTService,
        rate_limiter: LoginRateLimiter,
        password_validator: PasswordValidator | None = None,
        auto_verify_users: bool = True,
    ):
        self.uow_factory = uow_factory
        self.password_hasher = password_hasher
        self.jwt_service = jwt_service
        self.rate_limiter = rate_limiter
        self.password_validator = password_validator or PasswordValidator()
        self.auto_verify_users = auto_verify_users

    async def _run_blocking(self, fn: Callable[..., T], *args: Any) -> T:
        """Run CPU-bound work (bcrypt) off the event loop."""
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, fn, *args)

    # Validation

    @staticmethod
    def _validate_email(email: str | None) -> str:
        """Validate syntax and return the normalized lower-case address."""
        if not email or not email.strip():
            raise ValidationError("Email is required", field="email")
        try:
            valid_email = validate_email(email.strip(), check_deliverability=False)
        except EmailNotValidError as e:
            raise ValidationError(f"Invalid email: {e!s}", field="email")
        return valid_email.normalized.lower()

    @staticmethod
    def _normalize_login_email(email: str) -> str:
        """Normalize like registration does; malformed input is only lower-cased."""
        try:
            return validate_email(email.strip(), check_deliverability=False).normalized.lower()
        except EmailNotValidError:
            return email.strip().lower()

    def _validate_password(self, password: str | None, field: str = "password") -> str:
        if not password:
            raise ValidationError("Password is required", field=field)
        is_valid, errors = self.password_validator.validate(password)
        if not is_valid:
            raise ValidationError(
                f"Invalid password: {'; '.join(errors)}", field=field, errors=errors
            )
        return password

    @staticmethod
    def _validate_name(name: str | None) -> str:
        cleaned = (name or "").strip()
        if not cleaned:
            raise ValidationError("Name is required", field="name")
        if len(cleaned) > MAX_NAME_LENGTH:
            raise ValidationError(
                f"Name must not exceed {MAX_NAME_LENGTH} characters", field="name"
            )
        return cleaned

    # Sessions

    async def _open_session(self, uow: IUnitOfWork, user: User) -> TokenPair:
        """Issue a token pair and persist the session backing the refresh token."""
        access_token = self.jwt_service.create_access_token(user.id, user.email)
        refresh_token, token_hash, expires_at = self.jwt_service.create_refresh_token(user.id)
        await uow.sessions.add(
            Session(user_id=user.id, refresh_token_hash=token_hash, expires_at=expires_at)
        )
        return TokenPair(
            access_token=access_token,
            refresh_token=refresh_token,
            expires_in=self.jwt_service.access_token_expires_in,
        )

    async def _load_user(self, user_id: str) -> User:
        with _store_errors("load user"):
            async with self.uow_factory.create_unit_of_work() as uow:
                user = await uow.users.get_by_id(user_id)
        if user is None:
            raise NotFoundError("User", user_id)
        return user

    # Operations

    async def register(self, email: str, password: str, name: str) -> AuthResult:
        """
        Register a new user and open its first session.

        Raises:
            ValidationError: If email, password or name is invalid
            ConflictError: If the email is already registered
        """
        normalized_email = self._validate_email(email)
        self._validate_password(password)
        clean_name = self._validate_name(name)

        password_hash = await self._run_blocking(self.password_hasher.hash, password)
        user = User(
            email=normalized_email,
            password_hash=password_hash,
            name=clean_name,
            is_verified=self.auto_verify_users,
        )

        with _store_errors("register user"):
            async with self.uow_factory.create_unit_of_work() as uow:
                try:
                    await uow.users.add(user)
                except DuplicateEntityError:
                    log_auth_event("registration_conflict", email=normalized_email)
                    raise ConflictError("User with this email already exists")
                tokens = await self._open_session(uow, user)

        log_auth_event("user_registered", user.id, email=normalized_email)
        return AuthResult(
            user=user.to_profile(),
            access_token=tokens.access_token,
            refresh_token=tokens.refresh_token,
            expires_in=tokens.expires_in,
        )

    async def login(self, email: str, password: str, client_id: str | None = None) -> AuthResult:
        """
        Authenticate a user and open a new session.

        Every attempt counts against the rate limit, whatever its outcome.
        Other sessions of the user are left untouched.

        Raises:
            ValidationError: If email or password is missing
            RateLimitError: If too many attempts were made in the current window
            AuthError: For unknown email, wrong password or unverified account
        """
        if not email or not email.strip() or not password:
            raise ValidationError("Email and password are required")
        normalized_email = self._normalize_login_email(email)

        key = self.rate_limiter.key_for(normalized_email, client_id)
        limit_result = self.rate_limiter.check_and_record(key)
        if not limit_result.allowed:
            log_auth_event(
                "login_rate_limited",
                level=logging.WARNING,
                email=normalized_email,
                attempts=limit_result.current_count,
            )
            raise RateLimitError(
                "Too many login attempts. Please try again later.",
                retry_after=limit_result.retry_after,
                limit=limit_result.limit,
            )

        with _store_errors("load user"):
            async with self.uow_factory.create_unit_of_work() as uow:
                user = await uow.users.get_by_email(normalized_email)

        if user is None:
            await self._run_blocking(self.password_hasher.dummy_verify, password)
            log_auth_event(
                "login_failed",
                level=logging.WARNING,
                email=normalized_email,
                reason="unknown_email",
            )
            raise AuthError(INVALID_CREDENTIALS, AuthErrorKind.INVALID_CREDENTIALS)

        if not await self._run_blocking(self.password_hasher.verify, password, user.password_hash):
            log_auth_event("login_failed", user.id, level=logging.WARNING, reason="wrong_password")
            raise AuthError(INVALID_CREDENTIALS, AuthErrorKind.INVALID_CREDENTIALS)

        if not user.is_verified:
            log_auth_event("login_failed", user.id, level=logging.WARNING, reason="unverified")
            raise AuthError(INVALID_CREDENTIALS, AuthErrorKind.UNVERIFIED)

        now = datetime.now(UTC)
        user = replace(user, last_login_at=now, updated_at=now)
        if self.password_hasher.needs_rehash(user.password_hash):
            password_hash = await self._run_blocking(self.password_hasher.hash, password)
            user = replace(user, password_hash=password_hash)
            log_auth_event("password_rehashed", user.id)
        with _store_errors("log in"):
            async with self.uow_factory.create_unit_of_work() as uow:
                await uow.users.update(user)
                tokens = await self._open_session(uow, user)

        log_auth_event("user_logged_in", user.id, client_id=client_id)
        return AuthResult(
            user=user.to_profile(),
            access_token=tokens.access_token,
            refresh_token=tokens.refresh_token,
            expires_in=tokens.expires_in,
        )

    async def refresh_token(self, refresh_token: str) -> TokenPair:
        """
        Rotate a refresh token.

        The old session is deleted by a single conditional statement; among
        concurrent callers presenting the same token only the one whose delete
        removed the row gets a new pair.

        Raises:
            ValidationError: If the token is missing
            AuthError: For unknown, expired, revoked or already rotated tokens
        """
        if not refresh_token:
            raise ValidationError("Refresh token is required", field="refreshToken")

        try:
            payload = self.jwt_service.decode_refresh_token(refresh_token)
        except TokenExpiredException:
            log_auth_event("token_refresh_failed", level=logging.WARNING, reason="expired")
            raise AuthError(INVALID_REFRESH_TOKEN, AuthErrorKind.EXPIRED_TOKEN)
        except InvalidTokenException as e:
            log_auth_event("token_refresh_failed", level=logging.WARNING, reason=str(e))
            raise AuthError(INVALID_REFRESH_TOKEN, AuthErrorKind.INVALID_TOKEN)

        user_id = payload["sub"]
        token_hash = self.jwt_service.hash_token(refresh_token)

        with _store_errors("refresh token"):
            async with self.uow_factory.create_unit_of_work() as uow:
                if not await uow.sessions.consume(user_id, token_hash, datetime.now(UTC)):
                    log_auth_event(
                        "token_refresh_failed", user_id, level=logging.WARNING, reason="no_session"
                    )
                    raise AuthError(INVALID_REFRESH_TOKEN, AuthErrorKind.INVALID_TOKEN)

                user = await uow.users.get_by_id(user_id)
                if user is None:
                    raise AuthError(INVALID_REFRESH_TOKEN, AuthErrorKind.INVALID_TOKEN)

                tokens = await self._open_session(uow, user)

        log_auth_event("token_refreshed", user_id)
        return tokens

    async def logout(self, user_id: str, refresh_token: str | None) -> None:
        """
        Revoke the session behind ``refresh_token``.

        Unknown, malformed or already revoked tokens are not an error.
        """
        if refresh_token:
            token_hash = self.jwt_service.hash_token(refresh_token)
            with _store_errors("log out"):
                async with self.uow_factory.create_unit_of_work() as uow:
                    removed = await uow.sessions.delete_by_token_hash(user_id, token_hash)
        else:
            removed = False

        log_auth_event("user_logged_out", user_id, session_removed=removed)

    def verify_token(self, access_token: str | None) -> str:
        """
        Verify an access token and return its user id.

        Pure verification; the store is not consulted.

        Raises:
            AuthError: For missing, malformed, expired or badly signed tokens
        """
        if not access_token:
            raise AuthError("Access token required", AuthErrorKind.MISSING_TOKEN)
        try:
            payload = self.jwt_service.verify_access_token(access_token)
        except TokenExpiredException:
            raise AuthError("Token expired", AuthErrorKind.EXPIRED_TOKEN)
        except InvalidTokenException:
            raise AuthError("Invalid token", AuthErrorKind.INVALID_TOKEN)
        return str(payload["sub"])

    async def get_user_profile(self, user_id: str) -> UserProfile:
        """
        Get the public profile of a user.

        Raises:
            NotFoundError: If the user does not exist
        """
        user = await self._load_user(user_id)
        return user.to_profile()

    async def logout_all(self, user_id: str) -> int:
        """Revoke every session of a user. Returns the number revoked."""
        with _store_errors("log out all sessions"):
            async with self.uow_factory.create_unit_of_work() as uow:
                revoked = await uow.sessions.delete_all_for_user(user_id)

        log_auth_event("user_logged_out_all", user_id, sessions_revoked=revoked)
        return revoked

    async def get_user_sessions(self, user_id: str) -> list[SessionInfo]:
        """List a user's sessions, newest first."""
        with _store_errors("list sessions"):
            async with self.uow_factory.create_unit_of_work() as uow:
                sessions = await uow.sessions.list_for_user(user_id)

        return [
            SessionInfo(id=session.id, issued_at=session.issued_at, expires_at=session.expires_at)
            for session in sessions
        ]

    async def revoke_user_session(self, user_id: str, session_id: str) -> None:
        """
        Revoke one session owned by the user.

        Raises:
            NotFoundError: If the user owns no such session
        """
        with _store_errors("revoke session"):
            async with self.uow_factory.create_unit_of_work() as uow:
                removed = await uow.sessions.delete_by_id(user_id, session_id)

        if not removed:
            raise NotFoundError("Session", session_id)
        log_auth_event("session_revoked", user_id, session_id=session_id)

    async def change_password(self, user_id: str, current_password: str, new_password: str) -> None:
        """
        Change a user's password and revoke all of their sessions.

        Raises:
            NotFoundError: If the user does not exist
            AuthError: If the current password is wrong
            ValidationError: If the new password violates the policy
        """
        user = await self._load_user(user_id)

        if not await self._run_blocking(
            self.password_hasher.verify, current_password or "", user.password_hash
        ):
            log_auth_event("password_change_failed", user_id, level=logging.WARNING)
            raise AuthError("Current password is incorrect", AuthErrorKind.INVALID_CREDENTIALS)

        self._validate_password(new_password, field="newPassword")
        password_hash = await self._run_blocking(self.password_hasher.hash, new_password)
        user = replace(user, password_hash=password_hash, updated_at=datetime.now(UTC))

        with _store_errors("change password"):
            async with self.uow_factory.create_unit_of_work() as uow:
                await uow.users.update(user)
                revoked = await uow.sessions.delete_all_for_user(user_id)

        log_auth_event("password_changed", user_id, sessions_revoked=revoked)

    async def update_profile(
        self,
        user_id: str,
        name: str | None = None,
        language: str | None = None,
        currency: str | None = None,
        settings: dict[str, Any] | None = None,
    ) -> UserProfile:
        """
        Update profile fields. Settings are merged, never replaced.

        The migration marker cannot be changed through this operation.
        """
        changes: dict[str, Any] = {}
        if name is not None:
            changes["name"] = self._validate_name(name)
        if language is not None:
            if not 2 <= len(language.strip()) <= 10:
                raise ValidationError("Language must be 2-10 characters", field="language")
            changes["language"] = language.strip()
        if currency is not None:
            if len(currency.strip()) != 3 or not currency.strip().isalpha():
                raise ValidationError("Currency must be a 3-letter code", field="currency")
            changes["currency"] = currency.strip().upper()

        user = await self._load_user(user_id)
        if settings is not None:
            changes["settings"] = user.settings.merged_with(UserSettings.from_dict(settings))

        user = replace(user, **changes, updated_at=datetime.now(UTC))
        with _store_errors("update profile"):
            async with self.uow_factory.create_unit_of_work() as uow:
                await uow.users.update(user)

        log_auth_event("profile_updated", user_id, fields=sorted(changes))
        return user.to_profile()

    async def mark_email_verified(self, user_id: str) -> UserProfile:
        """Flag a user's email as verified."""
        user = await self._load_user(user_id)
        if not user.is_verified:
            user = replace(user, is_verified=True, updated_at=datetime.now(UTC))
            with _store_errors("verify email"):
                async with self.uow_factory.create_unit_of_work() as uow:
                    await uow.users.update(user)
            log_auth_event("email_verified", user_id)
        return user.to_profile()

    async def cleanup_expired_sessions(self) -> int:
        """Delete every expired session. Returns the number removed."""
        with _store_errors("clean up sessions"):
            async with self.uow_factory.create_unit_of_work() as uow:
                removed = await uow.sessions.delete_expired(datetime.now(UTC))

        logger.info(f"Cleaned up {removed} expired sessions")
        return removed
