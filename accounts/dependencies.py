"""
Service initialization for the accounts application.

Wires the user and auth systems together at startup.
"""

import logging

from motor.motor_asyncio import AsyncIOMotorDatabase

from common.storage import CloudinaryStorage, LocalMediaStorage, MediaStorage
from accounts.config import Settings
from accounts.auth.dependencies import init_auth_services
from accounts.user.dependencies import get_user_service, init_user_services

logger = logging.getLogger(__name__)


def create_media_storage(settings: Settings) -> MediaStorage:
    """
    Build the media storage provider selected by MEDIA_PROVIDER.

    Raises:
        ValueError: Unknown provider
    """
    provider = settings.MEDIA_PROVIDER.lower()

    if provider == "cloudinary":
        return CloudinaryStorage(
            cloud_name=settings.CLOUDINARY_CLOUD_NAME,
            api_key=settings.CLOUDINARY_API_KEY,
            api_secret=settings.CLOUDINARY_API_SECRET,
            folder=settings.CLOUDINARY_FOLDER,
        )

    if provider == "local":
        return LocalMediaStorage(
            root_dir=settings.MEDIA_ROOT,
            base_url=settings.MEDIA_BASE_URL,
        )

    raise ValueError(f"Unknown MEDIA_PROVIDER: {settings.MEDIA_PROVIDER}")


def init_all_services(db: AsyncIOMotorDatabase, settings: Settings) -> None:
    """
    Initialize all services.

    Called once at application startup.

    Args:
        db: MongoDB database connection
        settings: Application settings
    """
    media_storage = create_media_storage(settings)
    init_user_services(db=db, media_storage=media_storage)
    init_auth_services(user_service=get_user_service(), settings=settings)
    logger.info(f"Services initialized (media provider: {settings.MEDIA_PROVIDER})")
