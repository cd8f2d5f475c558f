"""
Accounts Middleware.

All middleware components are imported here.
"""

from accounts.middleware.auth import AuthMiddleware
from accounts.middleware.body_limit import BodySizeLimitMiddleware

__all__ = [
    "AuthMiddleware",
    "BodySizeLimitMiddleware",
]
