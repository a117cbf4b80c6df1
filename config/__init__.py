"""
Configuration: settings, rule store connection and seed data.
"""

from config.settings import settings, get_settings, Settings
from config.database import get_supabase_client, check_connection, reset_connection

__all__ = [
    "settings",
    "get_settings",
    "Settings",
    "get_supabase_client",
    "check_connection",
    "reset_connection",
]
