"""
Abstract token provider interface.

Defines the contract that token issuers must implement. Application code
depends on this interface, so the signing scheme (HS256 JWT today) can be
swapped without touching session or middleware code.

Example:
    from common.auth import TokenProvider, JWTAuth

    def get_token_provider(settings) -> TokenProvider:
        return JWTAuth(
            access_secret=settings.ACCESS_TOKEN_SECRET,
            refresh_secret=settings.REFRESH_TOKEN_SECRET,
        )
"""

from abc import ABC, abstractmethod
from typing import Dict, Any


ACCESS_TOKEN = "access"
REFRESH_TOKEN = "refresh"
TOKEN_TYPES = (ACCESS_TOKEN, REFRESH_TOKEN)


class InvalidTokenError(ValueError):
    """Token signature, expiry or type check failed."""


class MalformedTokenError(InvalidTokenError):
    """Token or its claims could not be parsed."""


class TokenProvider(ABC):
    """
    Abstract token provider.

    Issues and verifies the two bearer tokens of a session:
    a short-lived access token and a long-lived refresh token.
    """

    @abstractmethod
    def issue_access_token(self, user_id: str, **claims: Any) -> str:
        """
        Create a short-lived access token.

        Args:
            user_id: The user's ID (stored in the "sub" claim)
            **claims: Additional non-secret claims to embed

        Returns:
            Signed token string
        """
        pass

    @abstractmethod
    def issue_refresh_token(self, user_id: str) -> str:
        """
        Create a long-lived refresh token.

        Args:
            user_id: The user's ID (stored in the "sub" claim)

        Returns:
            Signed token string
        """
        pass

    @abstractmethod
    def verify_token(self, token: str, expected_type: str) -> Dict[str, Any]:
        """
        Verify a token and return its claims.

        Args:
            token: The token to verify
            expected_type: "access" or "refresh"

        Returns:
            Decoded claims (at minimum: sub, type)

        Raises:
            MalformedTokenError: Token or claims cannot be parsed
            InvalidTokenError: Bad signature, expired, or wrong type
        """
        pass
