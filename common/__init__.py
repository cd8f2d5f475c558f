"""
Common library for reusable infrastructure components.

This package provides generic modules that can be used across projects:

- database: Async MongoDB connection with Motor
- auth: JWT token provider and bcrypt password hashing
- storage: Pluggable media storage (local disk, Cloudinary)
- utils: Standard responses and HTTP exceptions
- config: Base settings class
"""

from common.database import MongoDB
from common.auth import TokenProvider, JWTAuth, PasswordHasher
from common.storage import MediaStorage, LocalMediaStorage, CloudinaryStorage
from common.utils import (
    success_response,
    error_response,
    APIException,
    UnauthorizedException,
    NotFoundException,
    ConflictException,
    ValidationException,
)
from common.config import BaseAppSettings

__all__ = [
    # Database
    "MongoDB",
    # Auth
    "TokenProvider",
    "JWTAuth",
    "PasswordHasher",
    # Storage
    "MediaStorage",
    "LocalMediaStorage",
    "CloudinaryStorage",
    # Utils
    "success_response",
    "error_response",
    "APIException",
    "UnauthorizedException",
    "NotFoundException",
    "ConflictException",
    "ValidationException",
    # Config
    "BaseAppSettings",
]
