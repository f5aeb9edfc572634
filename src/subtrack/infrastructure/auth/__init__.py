"""Authentication infrastructure: password hashing and JWT tokens."""

from .jwt_service import InvalidTokenException, JWTService, TokenExpiredException
from .password_service import PasswordHasher

__all__ = [
    "InvalidTokenException",
    "JWTService",
    "PasswordHasher",
    "TokenExpiredException",
]
