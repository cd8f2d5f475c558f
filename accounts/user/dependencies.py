"""
FastAPI dependencies for User system.

Provides dependency injection for user-related services.
"""

from motor.motor_asyncio import AsyncIOMotorDatabase

from common.storage import MediaStorage
from accounts.user.services.user_service import UserService
from accounts.user.services.profile_service import ProfileService


_user_service: UserService | None = None
_profile_service: ProfileService | None = None
_media_storage: MediaStorage | None = None


def init_user_services(db: AsyncIOMotorDatabase, media_storage: MediaStorage) -> None:
    """
    Initialize user services with database connection.

    Called once at application startup.

    Args:
        db: MongoDB database connection
        media_storage: Provider for avatar and cover image uploads
    """
    global _user_service, _profile_service, _media_storage

    _media_storage = media_storage
    _user_service = UserService(db=db)
    _profile_service = ProfileService(
        user_service=_user_service,
        media_storage=media_storage,
    )


def get_user_service() -> UserService:
    """Get user service instance."""
    if _user_service is None:
        raise RuntimeError("User services not initialized. Call init_user_services first.")
    return _user_service


def get_profile_service() -> ProfileService:
    """Get profile service instance."""
    if _profile_service is None:
        raise RuntimeError("User services not initialized. Call init_user_services first.")
    return _profile_service


def get_media_storage() -> MediaStorage:
    """Get media storage provider."""
    if _media_storage is None:
        raise RuntimeError("User services not initialized. Call init_user_services first.")
    return _media_storage
