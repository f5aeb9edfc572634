"""
Application Configuration - Central configuration management.

This module provides configuration management for the application,
including environment variables and runtime settings for the store,
authentication, rate limiting, migration and logging.
"""

import os
import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from subtrack.application.interfaces.exceptions import ConfigurationError

_WINDOW_PATTERN = re.compile(r"^(\d+)([smhd]|min|sec|hour|day)$")


class Environment(Enum):
    """Application environment types."""

    DEVELOPMENT = "development"
    TESTING = "testing"
    STAGING = "staging"
    PRODUCTION = "production"


def _env_bool(name: str, default: str) -> bool:
    return os.getenv(name, default).lower() == "true"


def _env_int(name: str, default: str) -> int:
    raw = os.getenv(name, default)
    try:
        return int(raw)
    except ValueError:
        raise ConfigurationError(name, f"expected an integer, got '{raw}'")


def _env_float(name: str, default: str) -> float:
    raw = os.getenv(name, default)
    try:
        return float(raw)
    except ValueError:
        raise ConfigurationError(name, f"expected a number, got '{raw}'")


@dataclass
class DatabaseConfig:
    """Database configuration."""

    url: str = "sqlite:///./subtrack.db"
    echo: bool = False
    busy_timeout_seconds: float = 15.0

    @classmethod
    def from_env(cls) -> "DatabaseConfig":
        """Create configuration from environment variables."""
        return cls(
            url=os.getenv("DATABASE_URL", "sqlite:///./subtrack.db"),
            echo=_env_bool("DB_ECHO", "false"),
            busy_timeout_seconds=_env_float("DB_BUSY_TIMEOUT_SECONDS", "15"),
        )


@dataclass
class AuthConfig:
    """Authentication configuration."""

    private_key_path: str | None = None
    public_key_path: str | None = None
    issuer: str = "subtrack"
    access_token_expire_minutes: int = 15
    refresh_token_expire_days: int = 7
    bcrypt_rounds: int = 12
    password_min_length: int = 8
    auto_verify_users: bool = True

    @classmethod
    def from_env(cls) -> "AuthConfig":
        """Create configuration from environment variables."""
        return cls(
            private_key_path=os.getenv("JWT_PRIVATE_KEY_PATH") or None,
            public_key_path=os.getenv("JWT_PUBLIC_KEY_PATH") or None,
            issuer=os.getenv("JWT_ISSUER", "subtrack"),
            access_token_expire_minutes=_env_int("JWT_ACCESS_EXPIRE_MINUTES", "15"),
            refresh_token_expire_days=_env_int("JWT_REFRESH_EXPIRE_DAYS", "7"),
            bcrypt_rounds=_env_int("BCRYPT_ROUNDS", "12"),
            password_min_length=_env_int("PASSWORD_MIN_LENGTH", "8"),
            auto_verify_users=_env_bool("AUTH_AUTO_VERIFY_USERS", "true"),
        )


@dataclass
class RateLimitConfig:
    """Login rate limiting configuration."""

    storage: str = "memory"
    redis_url: str = "redis://localhost:6379/0"
    login_attempts: int = 5
    login_window: str = "15min"

    @classmethod
    def from_env(cls) -> "RateLimitConfig":
        """Create configuration from environment variables."""
        return cls(
            storage=os.getenv("RATE_LIMIT_STORAGE", "memory").lower(),
            redis_url=os.getenv("REDIS_URL", "redis://localhost:6379/0"),
            login_attempts=_env_int("LOGIN_RATE_LIMIT_ATTEMPTS", "5"),
            login_window=os.getenv("LOGIN_RATE_LIMIT_WINDOW", "15min"),
        )


@dataclass
class MigrationConfig:
    """Legacy data migration configuration."""

    persistence_timeout_seconds: float = 30.0

    @classmethod
    def from_env(cls) -> "MigrationConfig":
        """Create configuration from environment variables."""
        return cls(
            persistence_timeout_seconds=_env_float("MIGRATION_PERSISTENCE_TIMEOUT_SECONDS", "30"),
        )


@dataclass
class LoggingConfig:
    """Logging configuration."""

    level: str = "INFO"
    format_type: str = "json"
    file: str | None = None

    @classmethod
    def from_env(cls) -> "LoggingConfig":
        """Create configuration from environment variables."""
        file_path = os.getenv("LOG_FILE")
        return cls(
            level=os.getenv("LOG_LEVEL", "INFO").upper(),
            format_type=os.getenv("LOG_FORMAT_TYPE", "json").lower(),
            file=file_path if file_path else None,
        )


@dataclass
class ApplicationConfig:
    """Main application configuration."""

    environment: Environment = Environment.DEVELOPMENT
    database: DatabaseConfig = field(default_factory=DatabaseConfig)
    auth: AuthConfig = field(default_factory=AuthConfig)
    rate_limit: RateLimitConfig = field(default_factory=RateLimitConfig)
    migration: MigrationConfig = field(default_factory=MigrationConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    def to_dict(self) -> dict[str, Any]:
        """Convert configuration to dictionary."""
        return {
            "environment": self.environment.value,
            "database": {
                "url": self.database.url,
                "echo": self.database.echo,
                "busy_timeout_seconds": self.database.busy_timeout_seconds,
            },
            "auth": {
                "private_key_path": self.auth.private_key_path,
                "public_key_path": self.auth.public_key_path,
                "issuer": self.auth.issuer,
                "access_token_expire_minutes": self.auth.access_token_expire_minutes,
                "refresh_token_expire_days": self.auth.refresh_token_expire_days,
                "bcrypt_rounds": self.auth.bcrypt_rounds,
                "password_min_length": self.auth.password_min_length,
                "auto_verify_users": self.auth.auto_verify_users,
            },
            "rate_limit": {
                "storage": self.rate_limit.storage,
                "redis_url": self.rate_limit.redis_url,
                "login_attempts": self.rate_limit.login_attempts,
                "login_window": self.rate_limit.login_window,
            },
            "migration": {
                "persistence_timeout_seconds": self.migration.persistence_timeout_seconds,
            },
            "logging": {
                "level": self.logging.level,
                "format_type": self.logging.format_type,
                "file": self.logging.file,
            },
        }

    def validate(self) -> bool:
        """
        Validate the configuration.

        Returns:
            True if valid, raises ConfigurationError otherwise
        """
        if self.environment == Environment.PRODUCTION:
            if not self.auth.private_key_path or not self.auth.public_key_path:
                raise ConfigurationError("auth", "RSA key paths are required in production")
            if self.database.echo:
                raise ConfigurationError("database.echo", "must be disabled in production")

        if self.database.busy_timeout_seconds <= 0:
            raise ConfigurationError("database.busy_timeout_seconds", "must be positive")

        if self.auth.access_token_expire_minutes <= 0:
            raise ConfigurationError("auth.access_token_expire_minutes", "must be positive")
        if self.auth.refresh_token_expire_days <= 0:
            raise ConfigurationError("auth.refresh_token_expire_days", "must be positive")
        if not 4 <= self.auth.bcrypt_rounds <= 31:
            raise ConfigurationError("auth.bcrypt_rounds", "must be between 4 and 31")
        if self.auth.password_min_length < 1:
            raise ConfigurationError("auth.password_min_length", "must be positive")

        if self.rate_limit.storage not in ("memory", "redis"):
            raise ConfigurationError("rate_limit.storage", "must be 'memory' or 'redis'")
        if self.rate_limit.login_attempts <= 0:
            raise ConfigurationError("rate_limit.login_attempts", "must be positive")
        if not _WINDOW_PATTERN.match(self.rate_limit.login_window.lower().strip()):
            raise ConfigurationError(
                "rate_limit.login_window", f"invalid window '{self.rate_limit.login_window}'"
            )

        if self.migration.persistence_timeout_seconds <= 0:
            raise ConfigurationError("migration.persistence_timeout_seconds", "must be positive")

        if self.logging.format_type not in ("json", "text"):
            raise ConfigurationError("logging.format_type", "must be 'json' or 'text'")

        return True
