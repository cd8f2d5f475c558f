"""
User system services.
"""

from accounts.user.services.user_service import UserService
from accounts.user.services.profile_service import ProfileService

__all__ = [
    "UserService",
    "ProfileService",
]
