"""
Database connection management.

Provides Supabase client singletons for catalog storage.
"""

from supabase import create_client, Client
from functools import lru_cache
from typing import Optional
import structlog

from config.settings import get_settings

logger = structlog.get_logger(__name__)


class ConnectionError(Exception):
    """Failed to connect to database."""
    pass


@lru_cache()
def get_supabase_client() -> Client:
    """
    Get cached Supabase client instance.

    Uses lru_cache to ensure only one client is created.
    Call get_supabase_client.cache_clear() to reconnect.

    Returns:
        Client: Supabase client

    Raises:
        ConnectionError: If the client cannot be created
    """
    settings = get_settings()
    try:
        logger.info(
            "connecting_to_supabase",
            url=settings.supabase_url[:30] + "..."  # Log partial URL only
        )

        client = create_client(
            settings.supabase_url,
            settings.supabase_key
        )

        logger.info("supabase_connected", status="success")

        return client

    except Exception as e:
        logger.error(
            "supabase_connection_failed",
            error=str(e),
            error_type=type(e).__name__
        )
        raise ConnectionError(f"Failed to connect to Supabase: {e}") from e


@lru_cache()
def get_admin_client() -> Optional[Client]:
    """
    Get Supabase client with service role key (admin access).

    Only available if SUPABASE_SERVICE_KEY is configured.

    Returns:
        Client: Admin Supabase client, or None if not configured
    """
    settings = get_settings()
    if not settings.supabase_service_key:
        logger.warning("admin_client_not_configured")
        return None

    try:
        return create_client(
            settings.supabase_url,
            settings.supabase_service_key
        )
    except Exception as e:
        logger.error("admin_client_failed", error=str(e))
        return None


def get_write_client() -> Client:
    """Admin client when configured, otherwise the public client."""
    return get_admin_client() or get_supabase_client()


def reset_connection():
    """
    Reset the cached database connections.

    Call this if connection becomes stale or after config changes.
    """
    get_supabase_client.cache_clear()
    get_admin_client.cache_clear()
    logger.info("database_connection_reset")
