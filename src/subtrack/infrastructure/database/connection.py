"""
Database Connection Management

Builds the SQLAlchemy engine and session factory from ``DatabaseConfig``
and creates the schema.
"""

# Standard library imports
import logging
from typing import Any

# Third-party imports
from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker

# Local imports
from subtrack.application.config import DatabaseConfig

from .models import Base

logger = logging.getLogger(__name__)


def _enable_sqlite_foreign_keys(dbapi_connection: Any, connection_record: Any) -> None:
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def create_database_engine(config: DatabaseConfig) -> Engine:
    """
    Create an engine honoring the configured busy timeout.

    SQLite connections are shared across executor threads, wait up to
    ``busy_timeout_seconds`` for a competing writer and enforce foreign keys.
    """
    if config.url.startswith("sqlite"):
        engine = create_engine(
            config.url,
            echo=config.echo,
            connect_args={"check_same_thread": False, "timeout": config.busy_timeout_seconds},
        )
        event.listen(engine, "connect", _enable_sqlite_foreign_keys)
    else:
        engine = create_engine(
            config.url,
            echo=config.echo,
            pool_pre_ping=True,
            pool_timeout=config.busy_timeout_seconds,
        )

    logger.info(f"Database engine created for {engine.url.render_as_string(hide_password=True)}")
    return engine


def create_session_factory(engine: Engine) -> sessionmaker[Session]:
    """Create the session factory used by units of work."""
    return sessionmaker(bind=engine, expire_on_commit=False)


def init_database(engine: Engine) -> None:
    """Create all tables that do not exist yet."""
    Base.metadata.create_all(engine)
    logger.info("Database schema initialized")
