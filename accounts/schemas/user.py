"""
Pydantic models for User system request validation.
"""

from pydantic import BaseModel, Field, EmailStr


class UpdateAccountRequest(BaseModel):
    """Request body for updating account details. Both fields are required."""
    fullName: str = Field(..., min_length=1, max_length=100)
    email: EmailStr
