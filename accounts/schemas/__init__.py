"""
Pydantic request schemas for the accounts API.
"""

from accounts.schemas.auth import (
    LoginRequest,
    RefreshTokenRequest,
    ChangePasswordRequest,
)
from accounts.schemas.user import UpdateAccountRequest

__all__ = [
    "LoginRequest",
    "RefreshTokenRequest",
    "ChangePasswordRequest",
    "UpdateAccountRequest",
]
