"""
Auth System

Handles credential verification and the access/refresh token session
lifecycle, with tokens transported as HTTP-only cookies.
"""

from accounts.auth.services.session_manager import SessionManager

__all__ = [
    "SessionManager",
]
