"""
Auth system pipeline functions.

Stateless orchestration logic for authentication flows.
"""

import logging
from pathlib import Path
from typing import Optional, Union

from pydantic import EmailStr, TypeAdapter, ValidationError

from common.auth import PasswordHasher
from common.storage import MediaStorage, MediaUploadError, UploadResult
from common.utils.exceptions import ConflictException, ValidationException
from accounts.auth.services.session_manager import SessionManager
from accounts.user.services.user_service import UserService

logger = logging.getLogger(__name__)

# Same rules as UpdateAccountRequest.email
_email_adapter = TypeAdapter(EmailStr)


async def registration_pipeline(
    user_service: UserService,
    password_hasher: PasswordHasher,
    media_storage: MediaStorage,
    full_name: Optional[str],
    email: Optional[str],
    username: Optional[str],
    password: Optional[str],
    avatar_path: Optional[Union[str, Path]],
    cover_image_path: Optional[Union[str, Path]] = None,
) -> dict:
    """
    Orchestrates the user registration flow.

    Args:
        user_service: Credential store for the new user record
        password_hasher: Hashes the password before insert
        media_storage: Provider for avatar and cover image
        full_name: Display name
        email: Email address
        username: Username
        password: Plaintext password
        avatar_path: Staged avatar file (required)
        cover_image_path: Staged cover image file (optional)

    Returns:
        Redacted user dict

    Raises:
        ValidationException: Missing fields, malformed email, missing avatar
            or failed avatar upload
        ConflictException: Username or email already registered
    """
    fields = [full_name, email, username, password]
    if any(not value or not value.strip() for value in fields):
        raise ValidationException(message="All fields are required", code="MISSING_FIELDS")

    try:
        _email_adapter.validate_python(email.strip())
    except ValidationError:
        raise ValidationException(message="Invalid email address", code="INVALID_EMAIL")

    existing_user = await user_service.find_by_username_or_email(username=username, email=email)
    if existing_user:
        raise ConflictException(
            message="User with email or username already exists",
            code="USER_ALREADY_EXISTS"
        )

    if not avatar_path:
        raise ValidationException(message="Avatar file is required", code="AVATAR_REQUIRED")

    try:
        avatar = await media_storage.upload(avatar_path)
    except MediaUploadError as e:
        logger.warning(f"Avatar upload failed during registration: {e}")
        raise ValidationException(message="Avatar file is required", code="AVATAR_UPLOAD_FAILED")

    uploaded = [avatar]
    cover_image: Optional[UploadResult] = None
    if cover_image_path:
        try:
            cover_image = await media_storage.upload(cover_image_path)
            uploaded.append(cover_image)
        except MediaUploadError as e:
            logger.warning(f"Cover image upload failed during registration: {e}")

    password_hash = password_hasher.hash_password(password)

    try:
        user = await user_service.create_user(
            full_name=full_name,
            email=email,
            username=username,
            password_hash=password_hash,
            avatar=avatar.url,
            cover_image=cover_image.url if cover_image else "",
        )
    except Exception:
        await _discard_media(media_storage, uploaded)
        raise

    logger.info(f"User registered: {user['_id']}")

    return UserService.to_public_view(user)


async def login_pipeline(
    session_manager: SessionManager,
    password: str,
    username: Optional[str] = None,
    email: Optional[str] = None,
) -> dict:
    """
    Orchestrates the user login flow.

    Returns:
        dict with accessToken, refreshToken and user
    """
    return await session_manager.login(password=password, username=username, email=email)


async def logout_pipeline(session_manager: SessionManager, user_id: str) -> None:
    """Orchestrates the user logout flow."""
    await session_manager.logout(user_id)


async def refresh_pipeline(
    session_manager: SessionManager,
    cookie_token: Optional[str],
    body_token: Optional[str],
) -> dict:
    """
    Orchestrates the token refresh flow.

    The cookie takes precedence over a token sent in the request body.

    Returns:
        dict with accessToken and refreshToken
    """
    return await session_manager.refresh(cookie_token or body_token)


async def change_password_pipeline(
    session_manager: SessionManager,
    user_id: str,
    old_password: str,
    new_password: str,
) -> None:
    """Orchestrates the password change flow."""
    await session_manager.change_password(user_id, old_password, new_password)


async def _discard_media(media_storage: MediaStorage, uploaded: list) -> None:
    """Delete media uploaded for a registration that did not complete."""
    for item in uploaded:
        try:
            await media_storage.delete(item.public_id)
        except MediaUploadError as e:
            logger.error(f"Failed to remove orphaned media {item.public_id}: {e}")
