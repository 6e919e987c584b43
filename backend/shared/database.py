"""
Database client factory for Supabase.

The backend talks to Supabase only through the service-role client (which
bypasses database RLS). Row access is decided in Python by the access module,
with the acting principal passed explicitly to every call.
"""

from typing import Optional
from supabase import create_client, Client

from .config import Settings, get_settings
from .memory import InMemoryTableGateway
from .repository import SupabaseTableGateway, TableGateway

# Module-level client cache
_service_client: Optional[Client] = None


def get_supabase_client() -> Client:
    """
    Get Supabase client with service role (bypasses RLS).

    Returns:
        Supabase client configured with service role key

    Raises:
        RuntimeError: If the Supabase URL or service role key is not set
    """
    global _service_client

    if _service_client is None:
        settings = get_settings()
        if not settings.supabase_url or not settings.supabase_service_role_key:
            raise RuntimeError(
                "Supabase configuration missing. "
                "Set SUPABASE_URL and SUPABASE_SERVICE_ROLE_KEY environment variables."
            )
        _service_client = create_client(
            settings.supabase_url,
            settings.supabase_service_role_key,
        )

    return _service_client


def create_table_gateway(settings: Optional[Settings] = None) -> TableGateway:
    """
    Build the table gateway selected by ``storage_backend``.

    Args:
        settings: Settings to read; defaults to the cached settings

    Returns:
        An in-memory gateway or a Supabase-backed gateway
    """
    settings = settings or get_settings()
    if settings.storage_backend == "supabase":
        return SupabaseTableGateway(get_supabase_client())
    return InMemoryTableGateway()


def reset_client_cache() -> None:
    """
    Reset the cached database client.

    Useful for testing or when configuration changes.
    """
    global _service_client
    _service_client = None
