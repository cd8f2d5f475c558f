"""
User System

Owns the user record: credentials, refresh-token slots and profile fields.
"""

from accounts.user.services.user_service import UserService
from accounts.user.services.profile_service import ProfileService

__all__ = [
    "UserService",
    "ProfileService",
]
