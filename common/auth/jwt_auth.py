"""
JWT token provider.

Issues and verifies HS256 JWTs for the access/refresh token pair:
- Access tokens are short-lived and verified without a database lookup
- Refresh tokens are long-lived and signed with a separate secret

Example:
    auth = JWTAuth(
        access_secret="access-secret",
        refresh_secret="refresh-secret",
        access_token_expire_minutes=15,
        refresh_token_expire_days=10,
    )

    token = auth.issue_access_token(user_id, username="alice")
    claims = auth.verify_token(token, "access")
    print(claims["sub"])  # user_id
"""

import logging
import secrets
from datetime import datetime, timedelta, timezone
from typing import Dict, Any

from jose import jwt, JWTError
from jose.exceptions import ExpiredSignatureError

from common.auth.base import (
    ACCESS_TOKEN,
    REFRESH_TOKEN,
    TOKEN_TYPES,
    InvalidTokenError,
    MalformedTokenError,
    TokenProvider,
)

logger = logging.getLogger(__name__)


class JWTAuth(TokenProvider):
    """
    JWT implementation of TokenProvider.

    Secrets and lifetimes are injected at construction; nothing is read
    from the environment here.
    """

    def __init__(
        self,
        access_secret: str,
        refresh_secret: str,
        algorithm: str = "HS256",
        access_token_expire_minutes: int = 15,
        refresh_token_expire_days: int = 10,
    ):
        """
        Initialize JWT token provider.

        Args:
            access_secret: Secret key for signing access tokens
            refresh_secret: Secret key for signing refresh tokens
            algorithm: JWT algorithm (default: HS256)
            access_token_expire_minutes: Access token lifetime
            refresh_token_expire_days: Refresh token lifetime

        Raises:
            ValueError: If a secret is missing or both secrets are equal
        """
        if not access_secret or not refresh_secret:
            raise ValueError("Both access and refresh token secrets are required")
        if access_secret == refresh_secret:
            raise ValueError("Access and refresh token secrets must differ")

        self.algorithm = algorithm
        self.access_token_expire = timedelta(minutes=access_token_expire_minutes)
        self.refresh_token_expire = timedelta(days=refresh_token_expire_days)

        self._secrets = {
            ACCESS_TOKEN: access_secret,
            REFRESH_TOKEN: refresh_secret,
        }
        self._lifetimes = {
            ACCESS_TOKEN: self.access_token_expire,
            REFRESH_TOKEN: self.refresh_token_expire,
        }

    def _encode(self, user_id: str, token_type: str, claims: Dict[str, Any]) -> str:
        now = datetime.now(timezone.utc)
        payload = {
            **claims,
            "sub": user_id,
            "type": token_type,
            "jti": secrets.token_hex(16),
            "iat": now,
            "exp": now + self._lifetimes[token_type],
        }
        return jwt.encode(payload, self._secrets[token_type], algorithm=self.algorithm)

    def issue_access_token(self, user_id: str, **claims: Any) -> str:
        """Create a signed access token for the user."""
        return self._encode(user_id, ACCESS_TOKEN, claims)

    def issue_refresh_token(self, user_id: str) -> str:
        """Create a signed refresh token for the user."""
        return self._encode(user_id, REFRESH_TOKEN, {})

    def verify_token(self, token: str, expected_type: str) -> Dict[str, Any]:
        """Verify signature, expiry and type of a token."""
        if expected_type not in TOKEN_TYPES:
            raise ValueError(f"Unknown token type: {expected_type}")

        try:
            jwt.get_unverified_claims(token)
        except JWTError as e:
            raise MalformedTokenError(f"Malformed token: {e}")

        try:
            payload = jwt.decode(
                token,
                self._secrets[expected_type],
                algorithms=[self.algorithm],
            )
        except ExpiredSignatureError:
            raise InvalidTokenError("Token has expired")
        except JWTError as e:
            raise InvalidTokenError(f"Invalid token: {e}")

        if not payload.get("sub") or not payload.get("type"):
            raise MalformedTokenError("Token is missing required claims")

        if payload["type"] != expected_type:
            raise InvalidTokenError(
                f"Expected {expected_type} token, got {payload['type']}"
            )

        return payload
