"""
Accounts application settings.

Extends the base settings with account-service configuration.
"""

from typing import Optional
from common.config import BaseAppSettings


class Settings(BaseAppSettings):
    """Accounts-specific settings."""

    # ==========================================================================
    # Cookies
    # ==========================================================================
    ACCESS_TOKEN_COOKIE: str = "accessToken"
    REFRESH_TOKEN_COOKIE: str = "refreshToken"
    COOKIE_SECURE: bool = True
    COOKIE_SAMESITE: str = "lax"  # lax, strict, none
    COOKIE_DOMAIN: Optional[str] = None

    # ==========================================================================
    # Passwords
    # ==========================================================================
    PASSWORD_HASH_ROUNDS: int = 12

    # ==========================================================================
    # Request Limits
    # ==========================================================================
    MAX_JSON_BODY_BYTES: int = 16 * 1024
    MAX_UPLOAD_BYTES: int = 5 * 1024 * 1024  # per file
    MAX_MULTIPART_BYTES: int = 12 * 1024 * 1024  # whole form

    # ==========================================================================
    # Media Storage
    # ==========================================================================
    MEDIA_PROVIDER: str = "local"  # "local" or "cloudinary"
    TEMP_UPLOAD_DIR: str = "public/temp"

    # Local provider
    MEDIA_ROOT: str = "public/uploads"
    MEDIA_BASE_URL: str = "/static/uploads"

    # Cloudinary provider
    CLOUDINARY_CLOUD_NAME: Optional[str] = None
    CLOUDINARY_API_KEY: Optional[str] = None
    CLOUDINARY_API_SECRET: Optional[str] = None
    CLOUDINARY_FOLDER: Optional[str] = None

    def validate_required(self) -> None:
        """Validate base settings plus media provider credentials."""
        super().validate_required()

        if self.MEDIA_PROVIDER == "cloudinary" and not (
            self.CLOUDINARY_CLOUD_NAME and self.CLOUDINARY_API_KEY and self.CLOUDINARY_API_SECRET
        ):
            raise ValueError(
                "Configuration errors:\n- CLOUDINARY_CLOUD_NAME, CLOUDINARY_API_KEY and "
                "CLOUDINARY_API_SECRET are required when MEDIA_PROVIDER is cloudinary"
            )


# Global settings instance
settings = Settings()


def get_settings() -> Settings:
    """Get settings instance (FastAPI dependency)."""
    return settings
