"""
Session management for user authentication.

Sessions are a pair of signed tokens. The refresh token is also kept in the
user document's refresh-token slot, which makes it single-use: every login
or refresh overwrites the slot, and logout clears it.
"""

import logging
from typing import Optional, Tuple

from common.auth import REFRESH_TOKEN, InvalidTokenError, PasswordHasher, TokenProvider
from common.utils.exceptions import (
    InternalServerException,
    InvalidCredentialsException,
    NotFoundException,
    UnauthorizedException,
    ValidationException,
)
from accounts.user.services.user_service import DEFAULT_DEVICE, UserService

logger = logging.getLogger(__name__)


class SessionManager:
    """
    Handles the login / refresh / logout / change-password lifecycle.
    """

    def __init__(
        self,
        user_service: UserService,
        token_provider: TokenProvider,
        password_hasher: PasswordHasher,
    ):
        """
        Initialize SessionManager.

        Args:
            user_service: Credential store holding the refresh-token slot
            token_provider: Issues and verifies access/refresh tokens
            password_hasher: Verifies and hashes passwords
        """
        self._user_service = user_service
        self._token_provider = token_provider
        self._password_hasher = password_hasher

    async def login(
        self,
        password: str,
        username: Optional[str] = None,
        email: Optional[str] = None,
    ) -> dict:
        """
        Authenticate a user and start a session.

        Args:
            password: Plaintext password
            username: Username (either this or email is required)
            email: Email address

        Returns:
            dict with accessToken, refreshToken and the redacted user

        Raises:
            ValidationException: Neither username nor email provided
            NotFoundException: No matching user
            InvalidCredentialsException: Password does not match
        """
        if not (username and username.strip()) and not (email and email.strip()):
            raise ValidationException(
                message="Username or email is required",
                code="MISSING_IDENTIFIER",
            )

        user = await self._user_service.find_by_username_or_email(
            username=username,
            email=email,
        )
        if not user:
            raise NotFoundException(message="User does not exist", code="USER_NOT_FOUND")

        if not self._password_hasher.verify_password(password, user.get("password", "")):
            logger.warning(f"Failed login attempt for user {user['_id']}")
            raise InvalidCredentialsException()

        user_id = str(user["_id"])
        access_token, refresh_token = self._issue_token_pair(user)
        await self._user_service.set_refresh_token(user_id, refresh_token, DEFAULT_DEVICE)

        logger.info(f"User logged in: {user_id}")

        return {
            "accessToken": access_token,
            "refreshToken": refresh_token,
            "user": UserService.to_public_view(user),
        }

    async def refresh(self, presented_token: Optional[str]) -> dict:
        """
        Exchange a refresh token for a new token pair.

        The presented token must equal the one in the user's slot. The new
        refresh token replaces it atomically, so the presented token can
        only be used once.

        Args:
            presented_token: Refresh token from cookie or request body

        Returns:
            dict with accessToken and refreshToken

        Raises:
            UnauthorizedException: Token missing, invalid, expired or already used
        """
        if not presented_token:
            raise UnauthorizedException(message="Unauthorized request", code="REFRESH_TOKEN_MISSING")

        try:
            claims = self._token_provider.verify_token(presented_token, REFRESH_TOKEN)
        except InvalidTokenError as e:
            logger.info(f"Refresh token rejected: {e}")
            raise UnauthorizedException(message="Invalid refresh token", code="INVALID_REFRESH_TOKEN")

        user = await self._user_service.get_user_by_id(claims["sub"])
        if not user:
            raise UnauthorizedException(message="Invalid refresh token", code="INVALID_REFRESH_TOKEN")

        user_id = str(user["_id"])

        if not UserService.refresh_token_matches(user, presented_token, DEFAULT_DEVICE):
            logger.warning(f"Refresh token replay or reuse for user {user_id}")
            raise UnauthorizedException(
                message="Refresh token is expired or used",
                code="REFRESH_TOKEN_REUSED",
            )

        access_token, refresh_token = self._issue_token_pair(user)

        rotated = await self._user_service.rotate_refresh_token(
            user_id,
            presented_token,
            refresh_token,
            DEFAULT_DEVICE,
        )
        if not rotated:
            # Another refresh with the same token won the race
            logger.warning(f"Concurrent refresh lost for user {user_id}")
            raise UnauthorizedException(
                message="Refresh token is expired or used",
                code="REFRESH_TOKEN_REUSED",
            )

        logger.info(f"Refresh token rotated for user {user_id}")

        return {"accessToken": access_token, "refreshToken": refresh_token}

    async def logout(self, user_id: str) -> None:
        """
        End the user's session by clearing the refresh-token slot.

        Idempotent. Access tokens already issued remain valid until expiry.
        """
        await self._user_service.clear_refresh_token(user_id, DEFAULT_DEVICE)
        logger.info(f"User logged out: {user_id}")

    async def change_password(
        self,
        user_id: str,
        old_password: str,
        new_password: str,
    ) -> None:
        """
        Change a user's password and revoke all refresh tokens.

        Args:
            user_id: User's ID
            old_password: Current plaintext password
            new_password: New plaintext password

        Raises:
            ValidationException: New password is empty
            UnauthorizedException: User no longer exists
            InvalidCredentialsException: Old password does not match
        """
        if not new_password:
            raise ValidationException(message="New password is required", code="MISSING_FIELDS")

        user = await self._user_service.get_user_by_id(user_id)
        if not user:
            raise UnauthorizedException(message="User not found", code="USER_NOT_FOUND")

        if not self._password_hasher.verify_password(old_password, user.get("password", "")):
            logger.warning(f"Password change rejected for user {user_id}: wrong old password")
            raise InvalidCredentialsException(message="Invalid old password")

        password_hash = self._password_hasher.hash_password(new_password)
        await self._user_service.update_password(user_id, password_hash)

        logger.info(f"Password changed for user {user_id}")

    def _issue_token_pair(self, user: dict) -> Tuple[str, str]:
        """
        Mint an access/refresh pair for a user.

        Raises:
            InternalServerException: Token signing failed
        """
        user_id = str(user["_id"])
        try:
            access_token = self._token_provider.issue_access_token(
                user_id,
                username=user.get("username"),
                email=user.get("email"),
            )
            refresh_token = self._token_provider.issue_refresh_token(user_id)
        except Exception as e:
            logger.exception(f"Token generation failed for user {user_id}")
            raise InternalServerException(
                message="Something went wrong while generating tokens",
                code="TOKEN_GENERATION_FAILED",
            ) from e

        return access_token, refresh_token
