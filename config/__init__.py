"""
Configuration module.

Exports:
    get_settings: Function to get cached settings
    get_supabase_client / get_admin_client / get_write_client: Supabase clients
    configure_logging: structlog setup
"""

from config.settings import get_settings, Settings
from config.database import (
    get_supabase_client,
    get_admin_client,
    get_write_client,
    reset_connection,
    ConnectionError
)
from config.logging import configure_logging

__all__ = [
    # Settings
    "get_settings",
    "Settings",

    # Database
    "get_supabase_client",
    "get_admin_client",
    "get_write_client",
    "reset_connection",
    "ConnectionError",

    # Logging
    "configure_logging",
]
