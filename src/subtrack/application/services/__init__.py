"""
Application Services - Business logic orchestration

Services coordinate domain entities, repositories and infrastructure
collaborators. Each operation runs in its own unit of work.
"""

from .auth_service import AuthResult, AuthService, SessionInfo, TokenPair
from .migration_service import MigrationResult, MigrationService, MigrationStatus

__all__ = [
    "AuthResult",
    "AuthService",
    "MigrationResult",
    "MigrationService",
    "MigrationStatus",
    "SessionInfo",
    "TokenPair",
]
