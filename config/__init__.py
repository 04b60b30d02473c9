"""
Configuration module.

Exports:
    settings: Application settings instance (pydantic-settings)
    get_supabase_client: Cached Supabase client for rows and storage
    get_admin_client: Service-role client, None when not configured
    check_connection: Health check over the items tables
"""

from config.settings import settings, get_settings, Settings
from config.database import (
    get_supabase_client,
    get_admin_client,
    check_connection,
)

__all__ = [
    "settings",
    "get_settings",
    "Settings",
    "get_supabase_client",
    "get_admin_client",
    "check_connection",
]
