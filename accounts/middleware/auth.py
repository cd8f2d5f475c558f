"""
Authentication middleware for protected routes.

Validates access tokens and attaches the user to requests.
"""

import logging
from typing import Optional

from fastapi import Request

from common.auth import ACCESS_TOKEN, InvalidTokenError, TokenProvider
from common.utils.exceptions import UnauthorizedException
from accounts.user.services.user_service import UserService

logger = logging.getLogger(__name__)


class AuthMiddleware:
    """
    Middleware that validates the access token and attaches user to request.
    """

    def __init__(
        self,
        user_service: UserService,
        token_provider: TokenProvider,
        access_cookie_name: str = "accessToken",
    ):
        """
        Initialize AuthMiddleware.

        Args:
            user_service: For the user existence lookup
            token_provider: For access token verification
            access_cookie_name: Cookie carrying the access token
        """
        self._user_service = user_service
        self._token_provider = token_provider
        self._access_cookie_name = access_cookie_name

    async def require_auth(self, request: Request) -> dict:
        """
        Validate request is authenticated.

        Args:
            request: HTTP request object

        Returns:
            Redacted user dict attached to request

        Raises:
            UnauthorizedException: No token, invalid or expired token, or
                the user no longer exists

        Side Effects:
            - Attaches user to request.state.user
        """
        token = self._extract_token(request)

        if not token:
            raise UnauthorizedException(
                message="Unauthorized request",
                code="AUTH_REQUIRED"
            )

        try:
            claims = self._token_provider.verify_token(token, ACCESS_TOKEN)
        except InvalidTokenError as e:
            logger.debug(f"Access token rejected: {e}")
            raise UnauthorizedException(
                message="Invalid access token",
                code="INVALID_ACCESS_TOKEN"
            )

        user = await self._user_service.get_public_user(claims["sub"])

        if not user:
            raise UnauthorizedException(
                message="Invalid access token",
                code="INVALID_ACCESS_TOKEN"
            )

        request.state.user = user

        return user

    def _extract_token(self, request: Request) -> Optional[str]:
        """
        Extract the access token from the cookie, else the Authorization header.

        Expected header format: "Authorization: Bearer <token>"
        """
        token = request.cookies.get(self._access_cookie_name)
        if token:
            return token

        auth_header = request.headers.get("Authorization")

        if not auth_header:
            return None

        parts = auth_header.split()

        if len(parts) != 2:
            return None

        scheme, token = parts

        if scheme.lower() != "bearer":
            return None

        return token
