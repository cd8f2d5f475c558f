"""
FastAPI router for Auth system endpoints.

Provides registration, login, logout, token refresh and password change.
"""

import logging
from typing import Annotated, Optional

from fastapi import APIRouter, Depends, File, Form, Request, Response, UploadFile

from common.auth import PasswordHasher
from common.storage import MediaStorage
from common.utils import success_response
from accounts.config import Settings, get_settings
from accounts.auth import pipelines
from accounts.auth.cookies import clear_auth_cookies, set_auth_cookies
from accounts.auth.dependencies import (
    get_password_hasher,
    get_session_manager,
    require_auth,
)
from accounts.auth.services.session_manager import SessionManager
from accounts.schemas.auth import ChangePasswordRequest, LoginRequest, RefreshTokenRequest
from accounts.user.dependencies import get_media_storage, get_user_service
from accounts.user.services.user_service import UserService
from accounts.user.uploads import stage_upload

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/users", tags=["auth"])


@router.post("/register", status_code=201)
async def register(
    user_service: Annotated[UserService, Depends(get_user_service)],
    password_hasher: Annotated[PasswordHasher, Depends(get_password_hasher)],
    media_storage: Annotated[MediaStorage, Depends(get_media_storage)],
    settings: Annotated[Settings, Depends(get_settings)],
    fullName: Annotated[str, Form()] = "",
    email: Annotated[str, Form()] = "",
    username: Annotated[str, Form()] = "",
    password: Annotated[str, Form()] = "",
    avatar: Annotated[Optional[UploadFile], File()] = None,
    coverImage: Annotated[Optional[UploadFile], File()] = None,
):
    """
    Register a new user account.

    Multipart form with the account fields, a required avatar image and an
    optional cover image.
    """
    async with stage_upload(
        avatar, settings.TEMP_UPLOAD_DIR, settings.MAX_UPLOAD_BYTES
    ) as avatar_path, stage_upload(
        coverImage, settings.TEMP_UPLOAD_DIR, settings.MAX_UPLOAD_BYTES
    ) as cover_image_path:
        user = await pipelines.registration_pipeline(
            user_service=user_service,
            password_hasher=password_hasher,
            media_storage=media_storage,
            full_name=fullName,
            email=email,
            username=username,
            password=password,
            avatar_path=avatar_path,
            cover_image_path=cover_image_path,
        )

    return success_response(user, message="User registered successfully")


@router.post("/login")
async def login(
    body: LoginRequest,
    response: Response,
    session_manager: Annotated[SessionManager, Depends(get_session_manager)],
    settings: Annotated[Settings, Depends(get_settings)],
):
    """
    Log in with username or email and password.

    Sets the access and refresh token cookies and returns both tokens.
    """
    result = await pipelines.login_pipeline(
        session_manager=session_manager,
        password=body.password,
        username=body.username,
        email=body.email,
    )

    set_auth_cookies(response, result["accessToken"], result["refreshToken"], settings)

    return success_response(result, message="User logged in successfully")


@router.post("/logout")
async def logout(
    response: Response,
    user: Annotated[dict, Depends(require_auth)],
    session_manager: Annotated[SessionManager, Depends(get_session_manager)],
    settings: Annotated[Settings, Depends(get_settings)],
):
    """Log out the current user and clear token cookies."""
    await pipelines.logout_pipeline(session_manager=session_manager, user_id=user["id"])

    clear_auth_cookies(response, settings)

    return success_response({}, message="User logged out")


@router.post("/refresh-token")
async def refresh_token(
    request: Request,
    response: Response,
    session_manager: Annotated[SessionManager, Depends(get_session_manager)],
    settings: Annotated[Settings, Depends(get_settings)],
    body: Optional[RefreshTokenRequest] = None,
):
    """
    Exchange a refresh token for a new token pair.

    Reads the refreshToken cookie, falling back to the request body.
    """
    tokens = await pipelines.refresh_pipeline(
        session_manager=session_manager,
        cookie_token=request.cookies.get(settings.REFRESH_TOKEN_COOKIE),
        body_token=body.refreshToken if body else None,
    )

    set_auth_cookies(response, tokens["accessToken"], tokens["refreshToken"], settings)

    return success_response(tokens, message="Access token refreshed")


@router.post("/change-password")
async def change_password(
    body: ChangePasswordRequest,
    response: Response,
    user: Annotated[dict, Depends(require_auth)],
    session_manager: Annotated[SessionManager, Depends(get_session_manager)],
    settings: Annotated[Settings, Depends(get_settings)],
):
    """
    Change the current user's password.

    All sessions are revoked, so the client must log in again.
    """
    await pipelines.change_password_pipeline(
        session_manager=session_manager,
        user_id=user["id"],
        old_password=body.oldPassword,
        new_password=body.newPassword,
    )

    clear_auth_cookies(response, settings)

    return success_response({}, message="Password changed successfully")
