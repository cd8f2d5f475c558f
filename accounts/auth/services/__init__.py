"""
Auth System Services

Contains service classes for authentication operations.
"""

from accounts.auth.services.session_manager import SessionManager

__all__ = [
    "SessionManager",
]
