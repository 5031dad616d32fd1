"""
Application settings loaded from environment variables.

Uses pydantic-settings for validation and type safety.
Core services never read these directly; orchestrators pass values in.
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
        description="Supabase service role key (preferred for catalog writes)"
    )

    # ===================
    # EXTERNAL CATALOG (SHOPIFY)
    # ===================
    shopify_shop_domain: Optional[str] = Field(
        None,
        description="Shop domain, e.g. my-store.myshopify.com"
    )
    shopify_admin_token: Optional[str] = Field(
        None,
        description="Shopify Admin API access token"
    )
    shopify_api_version: str = Field(
        default="2024-01",
        description="Shopify Admin API version"
    )
    catalog_page_size: int = Field(
        default=100,
        ge=1,
        le=250,
        description="Products requested per catalog page"
    )
    catalog_page_delay_seconds: float = Field(
        default=0.25,
        ge=0,
        le=10,
        description="Pause between catalog pages (upstream rate limit)"
    )

    # ===================
    # INGESTION
    # ===================
    error_sample_size: int = Field(
        default=10,
        ge=0,
        le=1000,
        description="Error details surfaced to callers per report"
    )

    # ===================
    # APP SETTINGS
    # ===================
    environment: str = Field(
        default="development",
        pattern="^(development|staging|production)$",
        description="Application environment"
    )
    log_level: str = Field(
        default="INFO",
        pattern="^(DEBUG|INFO|WARNING|ERROR|CRITICAL)$",
        description="Logging level"
    )

    # ===================
    # COMPUTED PROPERTIES
    # ===================
    @property
    def is_production(self) -> bool:
        """Check if running in production."""
        return self.environment == "production"

    @property
    def shopify_configured(self) -> bool:
        """Check if the Shopify connector is properly configured."""
        return bool(self.shopify_shop_domain and self.shopify_admin_token)


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
