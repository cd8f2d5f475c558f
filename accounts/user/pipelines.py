"""
User system pipeline functions.

Stateless orchestration logic for user operations.
"""

import logging
from pathlib import Path
from typing import Optional, Union

from accounts.user.services.profile_service import ProfileService

logger = logging.getLogger(__name__)


async def update_account_pipeline(
    profile_service: ProfileService,
    user_id: str,
    full_name: str,
    email: str
) -> dict:
    """
    Update user's name and email.

    Args:
        profile_service: For profile updates
        user_id: MongoDB user ID
        full_name: New display name
        email: New email address

    Returns:
        Redacted updated user
    """
    return await profile_service.update_account_details(user_id, full_name, email)


async def update_avatar_pipeline(
    profile_service: ProfileService,
    user_id: str,
    local_path: Optional[Union[str, Path]]
) -> dict:
    """
    Upload and set a new avatar.

    Args:
        profile_service: For profile updates
        user_id: MongoDB user ID
        local_path: Staged upload, or None when no file was sent

    Returns:
        Redacted updated user
    """
    return await profile_service.update_avatar(user_id, local_path)


async def update_cover_image_pipeline(
    profile_service: ProfileService,
    user_id: str,
    local_path: Optional[Union[str, Path]]
) -> dict:
    """Upload and set a new cover image."""
    return await profile_service.update_cover_image(user_id, local_path)
