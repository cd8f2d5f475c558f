"""
FastAPI dependencies for Auth system.

Provides dependency injection for auth-related services and middleware.
"""

from typing import Annotated

from fastapi import Depends, Request

from common.auth import JWTAuth, PasswordHasher, TokenProvider
from accounts.config import Settings
from accounts.auth.services.session_manager import SessionManager
from accounts.middleware.auth import AuthMiddleware
from accounts.user.services.user_service import UserService


_token_provider: TokenProvider | None = None
_password_hasher: PasswordHasher | None = None
_session_manager: SessionManager | None = None
_auth_middleware: AuthMiddleware | None = None


def init_auth_services(user_service: UserService, settings: Settings) -> None:
    """
    Initialize auth services.

    Called once at application startup, after the user services.

    Args:
        user_service: Credential store
        settings: Application settings with token secrets and lifetimes
    """
    global _token_provider, _password_hasher, _session_manager, _auth_middleware

    _token_provider = JWTAuth(
        access_secret=settings.ACCESS_TOKEN_SECRET,
        refresh_secret=settings.REFRESH_TOKEN_SECRET,
        algorithm=settings.JWT_ALGORITHM,
        access_token_expire_minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES,
        refresh_token_expire_days=settings.REFRESH_TOKEN_EXPIRE_DAYS,
    )
    _password_hasher = PasswordHasher(rounds=settings.PASSWORD_HASH_ROUNDS)

    _session_manager = SessionManager(
        user_service=user_service,
        token_provider=_token_provider,
        password_hasher=_password_hasher,
    )

    _auth_middleware = AuthMiddleware(
        user_service=user_service,
        token_provider=_token_provider,
        access_cookie_name=settings.ACCESS_TOKEN_COOKIE,
    )


def get_password_hasher() -> PasswordHasher:
    """Get password hasher instance."""
    if _password_hasher is None:
        raise RuntimeError("Auth services not initialized. Call init_auth_services first.")
    return _password_hasher


def get_session_manager() -> SessionManager:
    """Get session manager instance."""
    if _session_manager is None:
        raise RuntimeError("Auth services not initialized. Call init_auth_services first.")
    return _session_manager


def get_auth_middleware() -> AuthMiddleware:
    """Get auth middleware instance."""
    if _auth_middleware is None:
        raise RuntimeError("Auth services not initialized. Call init_auth_services first.")
    return _auth_middleware


async def require_auth(
    request: Request,
    auth_middleware: Annotated[AuthMiddleware, Depends(get_auth_middleware)]
) -> dict:
    """
    Dependency that requires authentication.

    Usage:
        @router.get("/protected")
        async def protected_route(user: Annotated[dict, Depends(require_auth)]):
            return {"user_id": user["id"]}
    """
    return await auth_middleware.require_auth(request)
