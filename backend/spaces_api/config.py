"""
Spaces File API Configuration Management Module

This module provides configuration management for the Spaces File API using
Pydantic Settings. Two settings groups are loaded from environment variables
and an optional .env file:

- Settings: application and server knobs (name, environment, logging, CORS,
  upload size limit, download chunk size). Every field has a default.
- StorageSettings: DigitalOcean Spaces credentials and addressing. Every field
  is required and must be non-blank; the model is frozen once constructed.

Both loaders are cached so that configuration is read once at startup and
shared read-only for the lifetime of the process.
"""

from functools import lru_cache

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


# Placeholder replaced with the configured region in the endpoint template
REGION_PLACEHOLDER = "{region}"


class Settings(BaseSettings):
    """
    Application settings for the Spaces File API.

    Example usage:
        ```python
        from spaces_api.config import get_settings

        settings = get_settings()
        print(f"Upload limit: {settings.max_upload_size_bytes} bytes")
        ```
    """

    # =========================================================================
    # Application Settings
    # =========================================================================

    app_name: str = Field(
        default="spaces-file-api",
        description="Application name displayed in API documentation and logs",
    )

    app_env: str = Field(
        default="development",
        description="Application environment (development, staging, production, testing)",
    )

    debug: bool = Field(default=False, description="Enable debug mode with hot-reload")

    log_level: str = Field(
        default="info", description="Logging level (debug, info, warning, error, critical)"
    )

    json_logs: bool = Field(
        default=False, description="Emit structured JSON log lines instead of plain text"
    )

    host: str = Field(default="0.0.0.0", description="Host address for the API server to bind to")

    port: int = Field(default=8080, description="Port number for the API server", ge=1, le=65535)

    cors_origins: list[str] = Field(
        default=["*"],
        description="List of allowed CORS origins",
    )

    # =========================================================================
    # Upload / Download Settings
    # =========================================================================

    max_upload_size_mb: int = Field(
        default=10,
        description="Maximum accepted upload request size in megabytes",
        ge=1,
        le=5120,
    )

    download_chunk_size: int = Field(
        default=64 * 1024,
        description="Chunk size in bytes used when streaming downloads",
        ge=1024,
    )

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", case_sensitive=False, extra="ignore"
    )

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate that log_level is a valid logging level."""
        valid_levels = {"debug", "info", "warning", "error", "critical"}
        normalized = v.lower()
        if normalized not in valid_levels:
            raise ValueError(f"Invalid log_level '{v}'. Must be one of: {', '.join(valid_levels)}")
        return normalized

    @field_validator("app_env")
    @classmethod
    def validate_app_env(cls, v: str) -> str:
        """Validate that app_env is a valid environment name."""
        valid_envs = {"development", "staging", "production", "testing"}
        normalized = v.lower()
        if normalized not in valid_envs:
            raise ValueError(f"Invalid app_env '{v}'. Must be one of: {', '.join(valid_envs)}")
        return normalized

    @field_validator("cors_origins", mode="before")
    @classmethod
    def validate_cors_origins(cls, v: str | list[str]) -> list[str]:
        """Parse CORS origins from comma-separated string if provided as string."""
        if isinstance(v, str):
            return [origin.strip() for origin in v.split(",") if origin.strip()]
        return v

    @property
    def max_upload_size_bytes(self) -> int:
        """Maximum upload size converted to bytes."""
        return self.max_upload_size_mb * 1024 * 1024

    @property
    def is_development(self) -> bool:
        """Check if running in development environment."""
        return self.app_env == "development"


class StorageSettings(BaseSettings):
    """
    Object store settings for DigitalOcean Spaces.

    Loaded from SPACES_* environment variables:

        SPACES_ACCESS_KEY=DO00EXAMPLE
        SPACES_SECRET_KEY=secret
        SPACES_REGION=nyc3
        SPACES_BUCKET_NAME=my-space
        SPACES_ENDPOINT_URL_TEMPLATE=https://{region}.digitaloceanspaces.com

    All values are required and must not be blank. The instance is frozen,
    so the settings cannot change after startup.
    """

    access_key: str = Field(..., description="Spaces access key ID")

    secret_key: str = Field(..., description="Spaces secret access key")

    region: str = Field(..., description="Spaces region slug (e.g. nyc3, fra1)")

    bucket_name: str = Field(..., description="Name of the Space (bucket) holding all objects")

    endpoint_url_template: str = Field(
        ...,
        description="Endpoint URL template; '{region}' is replaced with the configured region",
    )

    model_config = SettingsConfigDict(
        env_prefix="SPACES_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        frozen=True,
    )

    @field_validator(
        "access_key", "secret_key", "region", "bucket_name", "endpoint_url_template"
    )
    @classmethod
    def validate_not_blank(cls, v: str) -> str:
        """Reject empty or whitespace-only values."""
        stripped = v.strip()
        if not stripped:
            raise ValueError("must not be blank")
        return stripped

    @property
    def endpoint_url(self) -> str:
        """Endpoint URL with the region substituted into the template."""
        return self.endpoint_url_template.replace(REGION_PLACEHOLDER, self.region)


@lru_cache
def get_settings() -> Settings:
    """Return the process-wide application settings, loading them on first use."""
    return Settings()


@lru_cache
def get_storage_settings() -> StorageSettings:
    """
    Return the process-wide storage settings, loading them on first use.

    Raises:
        pydantic.ValidationError: If any SPACES_* value is missing or blank.
    """
    return StorageSettings()
