"""
Profile service.

Updates the non-credential fields of a user: display name, email and
the avatar / cover image URLs.
"""

import logging
from pathlib import Path
from typing import Optional, Union

from common.storage import MediaStorage, MediaUploadError
from common.utils.exceptions import NotFoundException, ValidationException
from accounts.user.services.user_service import UserService

logger = logging.getLogger(__name__)


class ProfileService:
    """Service for profile updates."""

    def __init__(self, user_service: UserService, media_storage: MediaStorage):
        """
        Initialize ProfileService.

        Args:
            user_service: Credential store holding the user documents
            media_storage: Provider used for avatar and cover uploads
        """
        self._user_service = user_service
        self._media_storage = media_storage

    async def update_account_details(
        self,
        user_id: str,
        full_name: Optional[str],
        email: Optional[str],
    ) -> dict:
        """
        Update display name and email.

        Args:
            user_id: User's ID
            full_name: New display name
            email: New email address

        Returns:
            Redacted updated user

        Raises:
            ValidationException: Either field is missing
            ConflictException: Email belongs to another user
            NotFoundException: User no longer exists
        """
        if not (full_name and full_name.strip()) or not (email and email.strip()):
            raise ValidationException(message="All fields are required", code="MISSING_FIELDS")

        user = await self._user_service.update_details(user_id, full_name, email)
        if not user:
            raise NotFoundException(message="User not found", code="USER_NOT_FOUND")

        logger.info(f"Account details updated for user {user_id}")
        return user

    async def update_avatar(self, user_id: str, local_path: Optional[Union[str, Path]]) -> dict:
        """Replace the avatar with a newly uploaded file."""
        return await self._update_image(user_id, "avatar", local_path, "Avatar")

    async def update_cover_image(
        self,
        user_id: str,
        local_path: Optional[Union[str, Path]],
    ) -> dict:
        """Replace the cover image with a newly uploaded file."""
        return await self._update_image(user_id, "coverImage", local_path, "Cover image")

    async def _update_image(
        self,
        user_id: str,
        field: str,
        local_path: Optional[Union[str, Path]],
        label: str,
    ) -> dict:
        if not local_path:
            raise ValidationException(
                message=f"{label} file is missing",
                code="MISSING_FILE",
            )

        try:
            uploaded = await self._media_storage.upload(local_path)
        except MediaUploadError as e:
            logger.warning(f"{label} upload failed for user {user_id}: {e}")
            raise ValidationException(
                message=f"Error while uploading {label.lower()}",
                code="UPLOAD_FAILED",
            )

        user = await self._user_service.update_image(user_id, field, uploaded.url)
        if not user:
            try:
                await self._media_storage.delete(uploaded.public_id)
            except MediaUploadError as e:
                logger.error(f"Failed to remove orphaned media {uploaded.public_id}: {e}")
            raise NotFoundException(message="User not found", code="USER_NOT_FOUND")

        logger.info(f"{label} updated for user {user_id}")
        return user
