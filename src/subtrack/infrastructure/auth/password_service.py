"""
Password hashing service.

Handles bcrypt hashing and verification. Strength rules live in
``subtrack.domain.services.password_policy``.
"""

import logging

import bcrypt

logger = logging.getLogger(__name__)

# bcrypt only considers the first 72 bytes of its input
BCRYPT_MAX_BYTES = 72


class PasswordHasher:
    """Bcrypt password hashing utility."""

    def __init__(self, rounds: int = 12) -> None:
        """Initialize with bcrypt rounds (cost factor)."""
        self.rounds = rounds
        # Verified against when the stored hash is unusable or the user is unknown
        self._dummy_hash = bcrypt.hashpw(b"dummy-password", bcrypt.gensalt(rounds=rounds))

    @staticmethod
    def _encode(password: str) -> bytes:
        # surrogatepass keeps lone surrogates hashable instead of raising
        return password.encode("utf-8", errors="surrogatepass")[:BCRYPT_MAX_BYTES]

    def hash(self, password: str) -> str:
        """Hash a password using bcrypt with a fresh random salt."""
        salt = bcrypt.gensalt(rounds=self.rounds)
        hashed = bcrypt.hashpw(self._encode(password), salt)
        return hashed.decode("utf-8")

    def verify(self, password: str, password_hash: str) -> bool:
        """
        Verify a password against its hash.

        A malformed hash costs the same as a wrong password: the candidate is
        checked against the dummy hash and the result discarded.
        """
        try:
            return bcrypt.checkpw(self._encode(password), password_hash.encode("utf-8"))
        except ValueError as e:
            logger.error(f"Password verification failed: {e}")
            bcrypt.checkpw(self._encode(password), self._dummy_hash)
            return False

    def dummy_verify(self, password: str) -> bool:
        """Spend the time of one verification for an unknown user. Always False."""
        bcrypt.checkpw(self._encode(password), self._dummy_hash)
        return False

    def needs_rehash(self, password_hash: str) -> bool:
        """Check if password needs rehashing with updated rounds."""
        hash_parts = password_hash.split("$")
        if len(hash_parts) >= 3 and hash_parts[2].isdigit():
            return int(hash_parts[2]) < self.rounds
        return False
