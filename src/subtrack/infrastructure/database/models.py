"""
Database models for users, sessions, subscriptions and budgets.

This module defines the SQLAlchemy models backing the credential store,
the session store and the migration targets.
"""

from datetime import UTC, datetime
from typing import Any

from sqlalchemy import (
    JSON,
    Boolean,
    Column,
    Date,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    Numeric,
    String,
    Text,
)
from sqlalchemy.orm import declarative_base, relationship
from sqlalchemy.types import TypeDecorator


class UTCDateTime(TypeDecorator[datetime]):
    """Database-agnostic timezone-aware datetime stored as naive UTC."""

    impl = DateTime
    cache_ok = True

    def process_bind_param(self, value: datetime | None, dialect: Any) -> datetime | None:
        if value is None:
            return None
        if value.tzinfo is None:
            raise ValueError("Naive datetimes are not accepted; use timezone-aware UTC values")
        return value.astimezone(UTC).replace(tzinfo=None)

    def process_result_value(self, value: datetime | None, dialect: Any) -> datetime | None:
        if value is None:
            return None
        return value.replace(tzinfo=UTC)


def _utcnow() -> datetime:
    return datetime.now(UTC)


Base = declarative_base()


class UserModel(Base):  # type: ignore[valid-type, misc]
    """User model. ``email`` holds the normalized lower-case address."""

    __tablename__ = "users"

    id = Column(String(36), primary_key=True)
    email = Column(String(255), unique=True, nullable=False, index=True)
    password_hash = Column(String(255), nullable=False)
    name = Column(String(255))

    is_verified = Column(Boolean, nullable=False, default=True)
    language = Column(String(10), nullable=False, default="es")
    currency = Column(String(3), nullable=False, default="USD")
    settings = Column(JSON, nullable=True)

    # Timestamps
    created_at = Column(UTCDateTime, nullable=False, default=_utcnow)
    updated_at = Column(UTCDateTime, nullable=False, default=_utcnow, onupdate=_utcnow)
    last_login_at = Column(UTCDateTime, nullable=True)

    # Relationships
    sessions = relationship("SessionModel", back_populates="user", passive_deletes=True)

    def __repr__(self) -> str:
        return f"<UserModel(id={self.id}, email={self.email})>"


class SessionModel(Base):  # type: ignore[valid-type, misc]
    """Server-side session; one row per live refresh token."""

    __tablename__ = "sessions"

    id = Column(String(36), primary_key=True)
    user_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    refresh_token_hash = Column(String(64), unique=True, nullable=False)
    issued_at = Column(UTCDateTime, nullable=False, default=_utcnow)
    expires_at = Column(UTCDateTime, nullable=False)

    # Relationships
    user = relationship("UserModel", back_populates="sessions")

    __table_args__ = (
        Index("idx_sessions_user", "user_id"),
        Index("idx_sessions_expires", "expires_at"),
    )


class SubscriptionModel(Base):  # type: ignore[valid-type, misc]
    """Recurring subscription owned by a user."""

    __tablename__ = "subscriptions"

    id = Column(String(36), primary_key=True)
    user_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    name = Column(String(255), nullable=False)
    amount = Column(Numeric(12, 2, asdecimal=True), nullable=False)
    currency = Column(String(3), nullable=False, default="USD")
    billing_cycle = Column(String(20), nullable=False, default="monthly")
    payment_day = Column(Integer, nullable=False)
    category = Column(String(50), nullable=False)
    description = Column(Text)
    logo = Column(Text)
    color = Column(String(20), nullable=False, default="#000000")
    is_active = Column(Boolean, nullable=False, default=True)
    start_date = Column(Date, nullable=False)
    next_payment = Column(UTCDateTime, nullable=False)
    created_at = Column(UTCDateTime, nullable=False, default=_utcnow)

    __table_args__ = (Index("idx_subscriptions_user", "user_id"),)


class BudgetModel(Base):  # type: ignore[valid-type, misc]
    """Spending budget owned by a user."""

    __tablename__ = "budgets"

    id = Column(String(36), primary_key=True)
    user_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    name = Column(String(255), nullable=False)
    description = Column(Text)
    amount = Column(Numeric(12, 2, asdecimal=True), nullable=False)
    currency = Column(String(3), nullable=False, default="USD")
    period = Column(String(20), nullable=False, default="monthly")
    is_default = Column(Boolean, nullable=False, default=False)
    alerts = Column(JSON, nullable=False, default=list)
    created_at = Column(UTCDateTime, nullable=False, default=_utcnow)

    __table_args__ = (Index("idx_budgets_user", "user_id"),)
