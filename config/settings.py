"""
Application settings loaded from environment variables.

Uses pydantic-settings for validation and type safety.
Keep secrets (Supabase keys) in .env, never in code.
"""

from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field
from functools import lru_cache
from typing import Optional


class Settings(BaseSettings):
    """
    Application settings.

    All values loaded from .env file or environment variables.
    Validation happens automatically on startup.
    """

    model_config = SettingsConfigDict(
        env_file=(".env", "../.env"),  # Check current dir, then parent
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"  # Ignore extra env vars
    )

    # ===================
    # SUPABASE
    # ===================
    supabase_url: str = Field(
        ...,
        description="Supabase project URL"
    )
    supabase_key: str = Field(
        ...,
        description="Supabase anon/public key"
    )
    supabase_service_key: Optional[str] = Field(
        None,
        description="Supabase service role key (for admin operations)"
    )

    # ===================
    # STORAGE
    # ===================
    storage_bucket: str = Field(
        default="item-images",
        description="Storage bucket for item icons"
    )
    storage_cache_control: str = Field(
        default="604800",
        description="Cache-Control max-age for uploaded icons (1 week)"
    )

    # ===================
    # DATA DRAGON
    # ===================
    ddragon_base_url: str = Field(
        default="https://ddragon.leagueoflegends.com",
        description="Riot Data Dragon base URL"
    )
    ddragon_locale: str = Field(
        default="ja_JP",
        description="Locale of fetched item data"
    )
    request_timeout_seconds: float = Field(
        default=15.0,
        gt=0,
        le=120,
        description="HTTP timeout for Data Dragon requests"
    )

    # ===================
    # IMAGE PROCESSING
    # ===================
    image_width: int = Field(
        default=32,
        ge=8,
        le=512,
        description="Stored icon width in pixels"
    )
    image_height: int = Field(
        default=32,
        ge=8,
        le=512,
        description="Stored icon height in pixels"
    )
    image_quality: int = Field(
        default=90,
        ge=1,
        le=100,
        description="WebP quality (1-100)"
    )

    # ===================
    # SYNC
    # ===================
    sync_batch_size: int = Field(
        default=5,
        ge=1,
        le=20,
        description="Items processed concurrently per batch"
    )
    patch_check_interval_seconds: int = Field(
        default=60,
        ge=0,
        le=86400,
        description="Minimum seconds between Data Dragon version checks"
    )
    fallback_patch_version: str = Field(
        default="16.1.1",
        description="Patch reported when the version check fails"
    )

    # ===================
    # APP SETTINGS
    # ===================
    environment: str = Field(
        default="development",
        pattern="^(development|staging|production)$",
        description="Application environment"
    )
    debug: bool = Field(
        default=True,
        description="Enable debug mode"
    )
    log_level: str = Field(
        default="INFO",
        pattern="^(DEBUG|INFO|WARNING|ERROR|CRITICAL)$",
        description="Logging level"
    )
    api_host: str = Field(
        default="0.0.0.0",
        description="API host"
    )
    api_port: int = Field(
        default=8000,
        ge=1000,
        le=65535,
        description="API port"
    )

    # ===================
    # COMPUTED PROPERTIES
    # ===================
    @property
    def is_production(self) -> bool:
        """Check if running in production."""
        return self.environment == "production"


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Uses lru_cache to ensure settings are only loaded once.
    Call get_settings.cache_clear() to reload.

    Returns:
        Settings: Application settings

    Raises:
        ValidationError: If required env vars are missing or invalid
    """
    return Settings()


# For convenient imports: from config.settings import settings
settings = get_settings()
