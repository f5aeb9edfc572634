"""
User Entity - Account holder with credentials and typed preference settings
"""

# Standard library imports
from dataclasses import dataclass, field, replace
from datetime import UTC, datetime
from typing import Any
from uuid import uuid4

DEFAULT_LANGUAGE = "es"
DEFAULT_CURRENCY = "USD"


@dataclass(frozen=True)
class UserSettings:
    """
    Typed user preference record.

    Known preferences are explicit optional fields. Keys the backend does not
    know about are kept in ``extra`` and written back untouched. The migration
    marker (``migrated`` / ``migrated_at``) is reserved and can only be changed
    through ``with_migration_marker`` and ``without_migration_marker``.
    """

    dark_mode: bool | None = None
    app_theme: str | None = None
    language: str | None = None
    currency: str | None = None
    notifications: dict[str, Any] | None = None
    privacy: dict[str, Any] | None = None
    extra: dict[str, Any] = field(default_factory=dict)

    # Migration marker
    migrated: bool = False
    migrated_at: str | None = None

    # Stored key -> attribute name
    _KEYS = {
        "darkMode": "dark_mode",
        "appTheme": "app_theme",
        "language": "language",
        "currency": "currency",
        "notifications": "notifications",
        "privacy": "privacy",
    }
    _MARKER_KEYS = ("migrated", "migratedAt")

    @classmethod
    def from_dict(cls, data: dict[str, Any] | None) -> "UserSettings":
        """Build settings from the stored JSON mapping."""
        if not data:
            return cls()

        known: dict[str, Any] = {}
        extra: dict[str, Any] = {}
        for key, value in data.items():
            if key in cls._KEYS:
                known[cls._KEYS[key]] = value
            elif key not in cls._MARKER_KEYS:
                extra[key] = value

        return cls(
            **known,
            extra=extra,
            migrated=data.get("migrated") is True,
            migrated_at=data.get("migratedAt"),
        )

    def validated(self) -> tuple["UserSettings", list[str]]:
        """
        Drop known fields whose value has the wrong type or shape.

        ``language`` must be a 2-10 character string and ``currency`` a
        3-letter code (upper-cased here). Returns the cleaned settings and one
        message per dropped field.
        """
        changes: dict[str, Any] = {}
        errors: list[str] = []

        def reject(key: str) -> None:
            changes[self._KEYS[key]] = None
            errors.append(f"Invalid setting '{key}' ignored")

        if self.dark_mode is not None and not isinstance(self.dark_mode, bool):
            reject("darkMode")
        if self.app_theme is not None and not isinstance(self.app_theme, str):
            reject("appTheme")
        if self.language is not None:
            if isinstance(self.language, str) and 2 <= len(self.language.strip()) <= 10:
                changes["language"] = self.language.strip()
            else:
                reject("language")
        if self.currency is not None:
            code = self.currency.strip() if isinstance(self.currency, str) else ""
            if len(code) == 3 and code.isascii() and code.isalpha():
                changes["currency"] = code.upper()
            else:
                reject("currency")
        for key in ("notifications", "privacy"):
            value = getattr(self, key)
            if value is not None and not isinstance(value, dict):
                reject(key)

        return replace(self, **changes), errors

    def to_dict(self) -> dict[str, Any]:
        """Serialize to the stored JSON mapping, omitting unset fields."""
        data: dict[str, Any] = dict(self.extra)
        for key, attr in self._KEYS.items():
            value = getattr(self, attr)
            if value is not None:
                data[key] = value
        if self.migrated:
            data["migrated"] = True
            if self.migrated_at:
                data["migratedAt"] = self.migrated_at
        return data

    def merged_with(self, other: "UserSettings") -> "UserSettings":
        """
        Merge another settings record over this one.

        Fields set in ``other`` win; unset fields keep the current value.
        The migration marker of ``self`` is never touched by a merge.
        """
        changes: dict[str, Any] = {}
        for attr in self._KEYS.values():
            value = getattr(other, attr)
            if value is not None:
                changes[attr] = value
        return replace(self, **changes, extra={**self.extra, **other.extra})

    def with_migration_marker(self, at: datetime | None = None) -> "UserSettings":
        """Return a copy flagged as migrated at the given instant."""
        moment = at or datetime.now(UTC)
        return replace(self, migrated=True, migrated_at=moment.isoformat())

    def without_migration_marker(self) -> "UserSettings":
        """Return a copy with only the migration marker removed."""
        return replace(self, migrated=False, migrated_at=None)


@dataclass
class User:
    """
    User entity.

    ``email`` is always stored normalized (lower-case). ``password_hash`` never
    leaves the service layer; callers receive ``UserProfile`` instead.
    """

    email: str
    password_hash: str
    name: str | None = None
    id: str = field(default_factory=lambda: str(uuid4()))
    is_verified: bool = True
    language: str = DEFAULT_LANGUAGE
    currency: str = DEFAULT_CURRENCY
    settings: UserSettings = field(default_factory=UserSettings)

    # Timestamps
    created_at: datetime = field(default_factory=lambda: datetime.now(UTC))
    updated_at: datetime = field(default_factory=lambda: datetime.now(UTC))
    last_login_at: datetime | None = None

    def to_profile(self) -> "UserProfile":
        """Project the user to its public view."""
        return UserProfile(
            id=self.id,
            email=self.email,
            name=self.name,
            is_verified=self.is_verified,
            language=self.language,
            currency=self.currency,
            settings=self.settings.to_dict(),
            created_at=self.created_at,
        )


@dataclass(frozen=True)
class UserProfile:
    """Public view of a user. Has no password hash by construction."""

    id: str
    email: str
    name: str | None
    is_verified: bool
    language: str
    currency: str
    settings: dict[str, Any]
    created_at: datetime

    def to_dict(self) -> dict[str, Any]:
        """Convert to API representation."""
        return {
            "id": self.id,
            "email": self.email,
            "name": self.name,
            "isVerified": self.is_verified,
            "language": self.language,
            "currency": self.currency,
            "settings": self.settings,
            "createdAt": self.created_at.isoformat(),
        }
