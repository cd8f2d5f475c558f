"""
Pydantic models for Auth system request validation.

Registration is multipart and validated in the pipeline, so it has no
model here.
"""

from typing import Optional
from pydantic import BaseModel, Field


class LoginRequest(BaseModel):
    """Request body for user login. Either username or email is required."""
    username: Optional[str] = Field(None, description="Username (case-insensitive)")
    email: Optional[str] = Field(None, description="Email address (case-insensitive)")
    password: str = Field(..., description="Plaintext password")


class RefreshTokenRequest(BaseModel):
    """Request body for token refresh. The refreshToken cookie takes precedence."""
    refreshToken: Optional[str] = None


class ChangePasswordRequest(BaseModel):
    """Request body for changing the current user's password."""
    oldPassword: str = Field(..., min_length=1)
    newPassword: str = Field(..., min_length=1)
