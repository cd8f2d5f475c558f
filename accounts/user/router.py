"""
FastAPI router for User system endpoints.

Provides endpoints for the current user's profile, avatar and cover image.
"""

import logging
from typing import Annotated, Optional

from fastapi import APIRouter, Depends, File, UploadFile

from common.utils import success_response
from accounts.config import Settings, get_settings
from accounts.auth.dependencies import require_auth
from accounts.schemas.user import UpdateAccountRequest
from accounts.user import pipelines
from accounts.user.dependencies import get_profile_service
from accounts.user.services.profile_service import ProfileService
from accounts.user.uploads import stage_upload

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/users", tags=["user"])


@router.get("/me")
async def get_current_user(
    user: Annotated[dict, Depends(require_auth)],
):
    """Get the current user."""
    return success_response(user, message="User fetched successfully")


@router.patch("/me")
async def update_account(
    body: UpdateAccountRequest,
    user: Annotated[dict, Depends(require_auth)],
    profile_service: Annotated[ProfileService, Depends(get_profile_service)],
):
    """Update the current user's full name and email."""
    updated = await pipelines.update_account_pipeline(
        profile_service=profile_service,
        user_id=user["id"],
        full_name=body.fullName,
        email=body.email,
    )

    return success_response(updated, message="Account details updated successfully")


@router.patch("/me/avatar")
async def update_avatar(
    user: Annotated[dict, Depends(require_auth)],
    profile_service: Annotated[ProfileService, Depends(get_profile_service)],
    settings: Annotated[Settings, Depends(get_settings)],
    avatar: Annotated[Optional[UploadFile], File()] = None,
):
    """Replace the current user's avatar."""
    async with stage_upload(avatar, settings.TEMP_UPLOAD_DIR, settings.MAX_UPLOAD_BYTES) as path:
        updated = await pipelines.update_avatar_pipeline(
            profile_service=profile_service,
            user_id=user["id"],
            local_path=path,
        )

    return success_response(updated, message="Avatar updated successfully")


@router.patch("/me/cover-image")
async def update_cover_image(
    user: Annotated[dict, Depends(require_auth)],
    profile_service: Annotated[ProfileService, Depends(get_profile_service)],
    settings: Annotated[Settings, Depends(get_settings)],
    coverImage: Annotated[Optional[UploadFile], File()] = None,
):
    """Replace the current user's cover image."""
    async with stage_upload(
        coverImage, settings.TEMP_UPLOAD_DIR, settings.MAX_UPLOAD_BYTES
    ) as path:
        updated = await pipelines.update_cover_image_pipeline(
            profile_service=profile_service,
            user_id=user["id"],
            local_path=path,
        )

    return success_response(updated, message="Cover image updated successfully")
