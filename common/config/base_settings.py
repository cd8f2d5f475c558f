"""
Base settings class for environment configuration.

Uses Pydantic Settings for automatic environment variable loading.
Extend this class for application-specific settings.

Example:
    from common.config import BaseAppSettings

    class Settings(BaseAppSettings):
        # App-specific settings
        COOKIE_SECURE: bool = True

    settings = Settings()
    print(settings.MONGODB_URI)
"""

from typing import Optional
from pydantic_settings import BaseSettings, SettingsConfigDict


class BaseAppSettings(BaseSettings):
    """
    Base settings class with common configuration options.

    Automatically loads values from environment variables.
    Extend this class for application-specific settings.
    """

    # ==========================================================================
    # Database Settings
    # ==========================================================================
    MONGODB_URI: str = "mongodb://localhost:27017"
    MONGODB_DATABASE: str = "accounts"

    # ==========================================================================
    # Token Settings
    # ==========================================================================
    # Must differ from each other
    ACCESS_TOKEN_SECRET: Optional[str] = None
    REFRESH_TOKEN_SECRET: Optional[str] = None
    JWT_ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 15
    REFRESH_TOKEN_EXPIRE_DAYS: int = 10

    # ==========================================================================
    # Server Settings
    # ==========================================================================
    HOST: str = "0.0.0.0"
    PORT: int = 8000
    DEBUG: bool = False
    ENVIRONMENT: str = "development"  # development, staging, production
    LOG_LEVEL: str = "INFO"

    # CORS Settings
    CORS_ORIGINS: str = "*"  # Comma-separated origins or "*"
    CORS_ALLOW_CREDENTIALS: bool = True

    # ==========================================================================
    # Pydantic Settings Configuration
    # ==========================================================================
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="allow",  # Allow app-specific settings
        case_sensitive=True,
    )

    def get_cors_origins(self) -> list:
        """Parse CORS_ORIGINS into a list."""
        if self.CORS_ORIGINS == "*":
            return ["*"]
        return [origin.strip() for origin in self.CORS_ORIGINS.split(",")]

    def is_production(self) -> bool:
        """Check if running in production environment."""
        return self.ENVIRONMENT.lower() == "production"

    def is_development(self) -> bool:
        """Check if running in development environment."""
        return self.ENVIRONMENT.lower() == "development"

    def validate_required(self) -> None:
        """
        Validate that required settings are configured.

        Raises:
            ValueError: If required settings are missing
        """
        errors = []

        if not self.ACCESS_TOKEN_SECRET:
            errors.append("ACCESS_TOKEN_SECRET is required")

        if not self.REFRESH_TOKEN_SECRET:
            errors.append("REFRESH_TOKEN_SECRET is required")

        if (
            self.ACCESS_TOKEN_SECRET
            and self.ACCESS_TOKEN_SECRET == self.REFRESH_TOKEN_SECRET
        ):
            errors.append("ACCESS_TOKEN_SECRET and REFRESH_TOKEN_SECRET must differ")

        if self.CORS_ALLOW_CREDENTIALS and self.get_cors_origins() == ["*"] and self.is_production():
            errors.append("CORS_ORIGINS must list explicit origins when credentials are allowed")

        if errors:
            raise ValueError("Configuration errors:\n- " + "\n- ".join(errors))
