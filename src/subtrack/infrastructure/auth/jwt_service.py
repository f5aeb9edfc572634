"""
JWT token management service for authentication.

This module handles access and refresh token creation and validation.
Refresh-token revocation is not tracked here: the session store holds the
hash of every live refresh token and is checked by the auth service.
"""

import hashlib
import logging
import os
import secrets
from datetime import UTC, datetime, timedelta
from typing import Any

import jwt
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import rsa

logger = logging.getLogger(__name__)


class TokenExpiredException(Exception):
    """Raised when a token has expired."""

    pass


class InvalidTokenException(Exception):
    """Raised when a token is invalid."""

    pass


class JWTService:
    """
    JWT token service for creating and validating tokens.

    Supports:
    - Access tokens (15 minutes default)
    - Refresh tokens (7 days default), hashed for server-side storage
    - Persistent RSA keys from PEM files, ephemeral keys outside production
    """

    def __init__(
        self,
        private_key_path: str | None = None,
        public_key_path: str | None = None,
        issuer: str = "subtrack",
        access_token_expire_minutes: int = 15,
        refresh_token_expire_days: int = 7,
        environment: str = "development",
        private_key: Any = None,
    ):
        """
        Initialize JWT service.

        Args:
            private_key_path: Path to RSA private key for signing
            public_key_path: Path to RSA public key for verification
            issuer: Token issuer identifier
            access_token_expire_minutes: Access token expiration in minutes
            refresh_token_expire_days: Refresh token expiration in days
            environment: Deployment environment; production requires key files
            private_key: Already loaded RSA private key, takes precedence over paths
        """
        self.issuer = issuer
        self.refresh_audience = f"{issuer}/refresh"
        self.algorithm = "RS256"
        self.access_token_expire = timedelta(minutes=access_token_expire_minutes)
        self.refresh_token_expire = timedelta(days=refresh_token_expire_days)

        if private_key is not None:
            self.private_key = private_key
            self.public_key = private_key.public_key()
        elif private_key_path and os.path.exists(private_key_path):
            self.private_key = self._load_private_key(private_key_path)
            if public_key_path and os.path.exists(public_key_path):
                self.public_key = self._load_public_key(public_key_path)
            else:
                self.public_key = self.private_key.public_key()
        elif environment == "production":
            raise InvalidTokenException(
                "JWT private key is required for production. "
                "Please generate RSA keys and set JWT_PRIVATE_KEY_PATH. "
                "Use: openssl genrsa -out private_key.pem 2048"
            )
        else:
            logger.warning(
                "No private key found - generating ephemeral keys for DEVELOPMENT ONLY. "
                "These keys will be lost on restart and all tokens will be invalidated!"
            )
            self.private_key, self.public_key = self._generate_key_pair()

        self._private_pem = self._get_private_key_pem()
        self._public_pem = self._get_public_key_pem()

    @property
    def access_token_expires_in(self) -> int:
        """Access token lifetime in seconds."""
        return int(self.access_token_expire.total_seconds())

    def _load_private_key(self, path: str) -> Any:
        """Load RSA private key from file."""
        with open(path, "rb") as key_file:
            return serialization.load_pem_private_key(key_file.read(), password=None)

    def _load_public_key(self, path: str) -> Any:
        """Load RSA public key from file."""
        with open(path, "rb") as key_file:
            return serialization.load_pem_public_key(key_file.read())

    @staticmethod
    def _generate_key_pair() -> tuple[Any, Any]:
        """Generate new RSA key pair for development."""
        private_key = rsa.generate_private_key(public_exponent=65537, key_size=2048)
        return private_key, private_key.public_key()

    def _get_private_key_pem(self) -> bytes:
        """Get private key in PEM format."""
        pem_bytes: bytes = self.private_key.private_bytes(
            encoding=serialization.Encoding.PEM,
            format=serialization.PrivateFormat.PKCS8,
            encryption_algorithm=serialization.NoEncryption(),
        )
        return pem_bytes

    def _get_public_key_pem(self) -> bytes:
        """Get public key in PEM format."""
        pem_bytes: bytes = self.public_key.public_bytes(
            encoding=serialization.Encoding.PEM,
            format=serialization.PublicFormat.SubjectPublicKeyInfo,
        )
        return pem_bytes

    @staticmethod
    def hash_token(token: str) -> str:
        """SHA-256 hex digest of a raw token, the only form the store keeps."""
        return hashlib.sha256(token.encode("utf-8")).hexdigest()

    def create_access_token(self, user_id: str, email: str) -> str:
        """
        Create JWT access token.

        Every token carries a random ``jti``, so two tokens issued for the same
        user within the same second still differ.

        Args:
            user_id: User identifier
            email: User email

        Returns:
            Signed JWT access token
        """
        now = datetime.now(UTC)
        jti = f"jwt_{secrets.token_urlsafe(16)}"

        payload = {
            "iss": self.issuer,
            "sub": user_id,
            "aud": [self.issuer],
            "exp": now + self.access_token_expire,
            "nbf": now,
            "iat": now,
            "jti": jti,
            "type": "access",
            "email": email,
        }

        token = jwt.encode(payload, self._private_pem, algorithm=self.algorithm)
        logger.debug(f"Created access token for user {user_id} with JTI {jti}")
        return token

    def create_refresh_token(self, user_id: str) -> tuple[str, str, datetime]:
        """
        Create JWT refresh token.

        Args:
            user_id: User identifier

        Returns:
            Tuple of (raw token, token hash, expiry). Only the hash may be stored.
        """
        now = datetime.now(UTC)
        expires_at = now + self.refresh_token_expire
        jti = f"refresh_{secrets.token_urlsafe(16)}"

        payload = {
            "iss": self.issuer,
            "sub": user_id,
            "aud": [self.refresh_audience],
            "exp": expires_at,
            "iat": now,
            "jti": jti,
            "type": "refresh",
        }

        token = jwt.encode(payload, self._private_pem, algorithm=self.algorithm)
        logger.debug(f"Created refresh token for user {user_id}")
        return token, self.hash_token(token), expires_at

    def verify_access_token(self, token: str) -> dict[str, Any]:
        """
        Verify and decode access token.

        Args:
            token: JWT access token

        Returns:
            Decoded token payload

        Raises:
            TokenExpiredException: If token is expired
            InvalidTokenException: If token is invalid
        """
        payload = self._decode(token, audience=self.issuer, kind="access")
        if payload.get("type") != "access":
            raise InvalidTokenException("Invalid access token: wrong token type")
        return payload

    def decode_refresh_token(self, token: str) -> dict[str, Any]:
        """
        Verify signature, expiry and audience of a refresh token.

        Session-store validity is checked by the caller.

        Raises:
            TokenExpiredException: If token is expired
            InvalidTokenException: If token is invalid
        """
        payload = self._decode(token, audience=self.refresh_audience, kind="refresh")
        if payload.get("type") != "refresh":
            raise InvalidTokenException("Invalid refresh token: wrong token type")
        return payload

    def _decode(self, token: str, audience: str, kind: str) -> dict[str, Any]:
        try:
            payload = jwt.decode(
                token,
                self._public_pem,
                algorithms=[self.algorithm],
                issuer=self.issuer,
                audience=audience,
                options={
                    "verify_signature": True,
                    "verify_exp": True,
                    "verify_iat": True,
                    "verify_aud": True,
                    "verify_iss": True,
                    "require": ["exp", "iat", "sub", "jti"],
                },
            )
        except jwt.ExpiredSignatureError:
            raise TokenExpiredException(f"{kind.capitalize()} token has expired")
        except jwt.InvalidTokenError as e:
            raise InvalidTokenException(f"Invalid {kind} token: {e!s}")
        return dict(payload)
