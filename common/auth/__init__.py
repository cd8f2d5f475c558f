"""
Authentication module - Token provider (JWT) and password hashing.
"""

from common.auth.base import (
    ACCESS_TOKEN,
    REFRESH_TOKEN,
    TokenProvider,
    InvalidTokenError,
    MalformedTokenError,
)
from common.auth.jwt_auth import JWTAuth
from common.auth.password import PasswordHasher

__all__ = [
    "ACCESS_TOKEN",
    "REFRESH_TOKEN",
    "TokenProvider",
    "InvalidTokenError",
    "MalformedTokenError",
    "JWTAuth",
    "PasswordHasher",
]
