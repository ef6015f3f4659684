# =============================================================================
# app/config.py - Application Settings
# =============================================================================
# This module loads configuration from environment variables using pydantic-settings.
# It provides a single Settings class with all configuration values.
#
# Usage:
#   from app.config import settings
#   print(settings.SUPABASE_URL)
#
# Environment variables are loaded from:
# 1. System environment variables
# 2. .env file in project root (if exists)
# =============================================================================

from functools import lru_cache
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    All settings are accessed via the global `settings` instance.
    """

    # -------------------------------------------------------------------------
    # Supabase Configuration
    # -------------------------------------------------------------------------

    SUPABASE_URL: str = Field(
        ...,
        description="Supabase project URL (e.g., https://xxx.supabase.co)"
    )

    SUPABASE_ANON_KEY: str = Field(
        ...,
        description="Supabase anon/public API key"
    )

    SUPABASE_SERVICE_KEY: str = Field(
        ...,
        description="Supabase service_role key (bypasses RLS)"
    )

    SUPABASE_JWT_SECRET: str = Field(
        default="",
        description="Legacy HS256 secret used to verify Supabase access tokens"
    )

    # -------------------------------------------------------------------------
    # AI Text Generation
    # -------------------------------------------------------------------------
    # Any OpenAI-compatible endpoint works (OpenAI, OpenRouter, ...)

    OPENAI_API_KEY: str = Field(
        ...,
        description="API key for the text-generation provider"
    )

    OPENAI_BASE_URL: str | None = Field(
        default=None,
        description="Override the API base URL (e.g. https://openrouter.ai/api/v1)"
    )

    OPENAI_MODEL: str = Field(
        default="gpt-4o-mini",
        description="Model used for listing copy"
    )

    AGREEMENT_MODEL: str = Field(
        default="gpt-4o",
        description="Model used for rental agreement drafting"
    )

    AGREEMENT_TEMPERATURE: float = Field(
        default=0.3,
        ge=0.0,
        le=2.0,
        description="Lower temperature keeps legal wording consistent"
    )

    # -------------------------------------------------------------------------
    # Marketplace Rules
    # -------------------------------------------------------------------------

    PLATFORM_NAME: str = Field(
        default="Lendify",
        description="Marketplace name used in generated documents"
    )

    AGREEMENT_EXPIRY_DAYS: int = Field(
        default=7,
        ge=1,
        le=90,
        description="Days a sent agreement stays open for signature"
    )

    # -------------------------------------------------------------------------
    # Rate Limiting
    # -------------------------------------------------------------------------

    RATE_LIMIT_ENABLED: bool = Field(
        default=True,
        description="Throttle requests per client IP and path"
    )

    # -------------------------------------------------------------------------
    # Application Settings
    # -------------------------------------------------------------------------

    ENVIRONMENT: Literal["development", "staging", "production"] = Field(
        default="development",
        description="Current environment"
    )

    DEBUG: bool = Field(
        default=False,
        description="Enable debug mode (verbose logging, error details)"
    )

    API_HOST: str = Field(
        default="0.0.0.0",
        description="Host to bind the API server to"
    )

    API_PORT: int = Field(
        default=8000,
        ge=1,
        le=65535,
        description="Port for the API server"
    )

    CORS_ORIGINS: str = Field(
        default="http://localhost:3000",
        description="Allowed CORS origins (comma-separated)"
    )

    # -------------------------------------------------------------------------
    # File Upload Settings
    # -------------------------------------------------------------------------

    MAX_UPLOAD_SIZE_MB: int = Field(
        default=5,
        ge=1,
        le=50,
        description="Maximum image upload size in MB"
    )

    ALLOWED_IMAGE_TYPES: str = Field(
        default="image/jpeg,image/jpg,image/png,image/webp,image/gif",
        description="Allowed upload content types (comma-separated)"
    )

    LISTING_PHOTOS_BUCKET: str = Field(
        default="listing-photos",
        description="Storage bucket for listing photos"
    )

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_ignore_empty=True,
        case_sensitive=True,
        extra="ignore",
    )

    # -------------------------------------------------------------------------
    # Computed Properties
    # -------------------------------------------------------------------------

    @property
    def cors_origins_list(self) -> list[str]:
        """
        Parse CORS_ORIGINS string into a list.

        Example: "http://localhost:3000, https://myapp.com" -> ["http://localhost:3000", "https://myapp.com"]
        """
        return [origin.strip() for origin in self.CORS_ORIGINS.split(",")]

    @property
    def allowed_image_types_list(self) -> list[str]:
        """Parse ALLOWED_IMAGE_TYPES into a list of lowercase MIME types."""
        return [t.strip().lower() for t in self.ALLOWED_IMAGE_TYPES.split(",") if t.strip()]

    @property
    def max_upload_size_bytes(self) -> int:
        """Convert MB to bytes for file size validation."""
        return self.MAX_UPLOAD_SIZE_MB * 1024 * 1024

    @property
    def is_development(self) -> bool:
        """Check if running in development mode."""
        return self.ENVIRONMENT == "development"

    @property
    def is_production(self) -> bool:
        """Check if running in production mode."""
        return self.ENVIRONMENT == "production"


@lru_cache
def get_settings() -> Settings:
    """
    Get cached Settings instance.

    Using lru_cache ensures we only parse .env and validate once,
    not on every access.
    """
    return Settings()


# Global settings instance for easy importing
# Usage: from app.config import settings
settings = get_settings()
