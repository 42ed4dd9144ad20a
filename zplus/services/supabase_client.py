"""
Supabase client initialization.

Provides centralized access to the Supabase admin client used by the hosted
key-value store backend. The service role key is required because word-list
rows are written server-side, not by end users.
"""

from __future__ import annotations
from typing import Optional
from supabase import create_client, Client

# Global client instance (initialized once per app)
_supabase_admin: Optional[Client] = None   # Admin client (service role key)


def init_supabase(app) -> None:
    """
    Initialize the Supabase admin client with app config.

    Leaves the client unset (and logs a warning) when the URL or service role
    key is missing. Call this from the Flask app factory.
    """
    global _supabase_admin

    url = app.config.get("SUPABASE_URL", "")
    service_key = app.config.get("SUPABASE_SERVICE_ROLE_KEY", "")

    if not url or not service_key:
        app.logger.warning("Supabase URL or SERVICE_ROLE_KEY not configured. Supabase storage will be disabled.")
        _supabase_admin = None
        return

    try:
        _supabase_admin = create_client(url, service_key)
        app.logger.info("Supabase admin client initialized successfully")
    except Exception as e:
        app.logger.error(f"Failed to initialize Supabase client: {e}")
        _supabase_admin = None


def get_admin_client() -> Optional[Client]:
    """Get the admin Supabase client instance (service role key)."""
    return _supabase_admin


def is_configured() -> bool:
    """Check if Supabase is properly configured."""
    return _supabase_admin is not None
