"""Settings management for Snapgram.

This module provides centralized configuration management for the Snapgram
application using Pydantic Settings with environment variable support and
validation.

The settings are organized into logical groups:
- APISettings: Core API configuration
- SecuritySettings: Token signing secrets, lifetimes and cookie attributes
- DatabaseSettings: MongoDB connection configuration
- UploadSettings: Image upload storage configuration

Example:
    Basic usage:
        from snapgram.core.settings import settings

        if settings.debug:
            print(f"Running {settings.project_name} v{settings.version}")

    Environment variables:
        API_DEBUG=true
        DATABASE_URI=mongodb://localhost:27017
        ACCESS_TOKEN_SECRET=...
        REFRESH_TOKEN_SECRET=...
"""

from functools import lru_cache
from typing import List, Literal

from pydantic import AliasChoices, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_SECRET = "change-me-in-production"


class APISettings(BaseSettings):
    """API server configuration settings.

    Attributes:
        version: Application version string.
        project_name: Human-readable project name.
        debug: Enable debug mode with verbose logging.
        host: Server bind address.
        port: Server bind port (1-65535).
        cors_origins: List of allowed CORS origins.
        log_dir: Directory receiving the rotating JSON log files.

    Environment Variables:
        All attributes can be configured via environment variables with
        the 'API_' prefix (e.g., API_DEBUG). The port also honours a bare
        PORT variable.
    """

    version: str = Field(default="1.0.0", description="Application version string")
    project_name: str = Field(
        default="Snapgram API", description="Human-readable project name"
    )
    debug: bool = Field(
        default=False, description="Enable debug mode with verbose logging"
    )
    host: str = Field(default="0.0.0.0", description="Server bind address")
    port: int = Field(
        default=3500,
        ge=1,
        le=65535,
        validation_alias=AliasChoices("API_PORT", "PORT"),
        description="Server bind port",
    )
    cors_origins: List[str] = Field(
        default=["*"], description="List of allowed CORS origins"
    )
    log_dir: str = Field(default="logs", description="Log file directory")

    model_config = SettingsConfigDict(env_prefix="API_")


class SecuritySettings(BaseSettings):
    """Token and session cookie configuration.

    The signing secrets are read from ACCESS_TOKEN_SECRET and
    REFRESH_TOKEN_SECRET. Default values must be changed in production: the
    validator raises when they are left in place outside debug mode.
    """

    access_token_secret: str = Field(
        default=DEFAULT_SECRET, description="HS256 secret for access tokens"
    )
    refresh_token_secret: str = Field(
        default=DEFAULT_SECRET, description="HS256 secret for refresh tokens"
    )
    access_token_expire_minutes: int = Field(
        default=120, ge=1, description="Access token lifetime in minutes"
    )
    refresh_token_expire_days: int = Field(
        default=30, ge=1, description="Refresh token lifetime in days"
    )
    algorithm: str = Field(default="HS256", description="JWT signing algorithm")
    cookie_name: str = Field(default="jwt", description="Refresh cookie name")
    cookie_secure: bool = Field(default=True, description="Send cookie over HTTPS only")
    cookie_samesite: Literal["lax", "strict", "none"] = Field(
        default="none", description="SameSite attribute of the refresh cookie"
    )

    @field_validator("access_token_secret", "refresh_token_secret")
    def validate_not_default(cls, v: str, info) -> str:
        """Refuse the placeholder secrets outside debug mode.

        Raises:
            ValueError: If default values are used in production.
        """
        if v == DEFAULT_SECRET and not APISettings().debug:
            raise ValueError(f"{info.field_name} must be changed in production")
        return v

    model_config = SettingsConfigDict(env_prefix="", validate_default=True)


class DatabaseSettings(BaseSettings):
    """MongoDB connection settings.

    Attributes:
        uri: MongoDB connection string (DATABASE_URI).
        name: Database name (DATABASE_NAME).
        use_transactions: Wrap multi-document writes in a transaction. Only
            available when the server is a replica set or sharded cluster.
    """

    uri: str = Field(
        default="mongodb://localhost:27017", description="MongoDB connection string"
    )
    name: str = Field(default="snapgram", description="Database name")
    use_transactions: bool = Field(
        default=False, description="Use multi-document transactions"
    )

    model_config = SettingsConfigDict(env_prefix="DATABASE_")


class UploadSettings(BaseSettings):
    """Image upload storage settings."""

    directory: str = Field(
        default="public/uploads", description="Root directory for uploaded images"
    )
    max_files: int = Field(
        default=10, ge=1, description="Maximum number of images per request"
    )

    model_config = SettingsConfigDict(env_prefix="UPLOAD_")


class Settings(BaseSettings):
    """Composite settings container with nested configuration groups.

    Example:
        from snapgram.core.settings import settings

        print(f"Server running on {settings.api.host}:{settings.api.port}")
        print(f"Database: {settings.database.name}")
    """

    api: APISettings = Field(default_factory=APISettings)
    security: SecuritySettings = Field(default_factory=SecuritySettings)
    database: DatabaseSettings = Field(default_factory=DatabaseSettings)
    uploads: UploadSettings = Field(default_factory=UploadSettings)

    @property
    def debug(self) -> bool:
        """Get debug mode status from API settings."""
        return self.api.debug

    @property
    def version(self) -> str:
        """Get application version from API settings."""
        return self.api.version

    @property
    def project_name(self) -> str:
        """Get human-readable project name from API settings."""
        return self.api.project_name

    @property
    def cors_origins(self) -> List[str]:
        """Get CORS allowed origins from API settings."""
        return self.api.cors_origins

    model_config = SettingsConfigDict(
        env_file=".env", case_sensitive=False, extra="ignore"
    )


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance with environment variables loaded.

    The .env file is loaded into the process environment first so the
    nested groups, which read the environment on their own, see it too.
    """
    from dotenv import load_dotenv

    load_dotenv()
    return Settings()


# Global settings instance for convenient access throughout the application
settings = get_settings()
