"""
Session Entity - One live refresh-token lineage for a user
"""

# Standard library imports
from dataclasses import dataclass, field
from datetime import UTC, datetime
from uuid import uuid4


@dataclass
class Session:
    """
    Server-side session record.

    Holds only the hash of the refresh token. A refresh token is accepted
    only while its session row exists and is unexpired.
    """

    user_id: str
    refresh_token_hash: str
    expires_at: datetime
    id: str = field(default_factory=lambda: str(uuid4()))
    issued_at: datetime = field(default_factory=lambda: datetime.now(UTC))

    def is_expired(self, now: datetime | None = None) -> bool:
        """Check if session is expired."""
        return (now or datetime.now(UTC)) >= self.expires_at
