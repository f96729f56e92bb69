"""
Database client factory for Supabase.

Provides a service-role client (for profile storage, bypassing RLS)
and an anon-key client (for end-user auth flows against Supabase Auth).
"""

from typing import Optional
from supabase import create_client, Client

from .config import get_settings

# Module-level client cache
_service_client: Optional[Client] = None
_auth_client: Optional[Client] = None


def get_supabase_client() -> Client:
    """
    Get Supabase client with service role (bypasses RLS).

    Use this for profile storage operations, such as creating the
    application profile for a first-time federated login.

    Returns:
        Supabase client configured with service role key
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


def get_supabase_auth_client() -> Client:
    """
    Get Supabase client authenticated with the anon key.

    This client holds the end-user session: sign-in, sign-up, OAuth
    and auth state change notifications all go through it.

    Returns:
        Supabase client configured with the anon key
    """
    global _auth_client

    if _auth_client is None:
        settings = get_settings()
        if not settings.supabase_url or not settings.supabase_anon_key:
            raise RuntimeError(
                "Supabase configuration missing. "
                "Set SUPABASE_URL and SUPABASE_ANON_KEY environment variables."
            )
        _auth_client = create_client(
            settings.supabase_url,
            settings.supabase_anon_key,
        )

    return _auth_client


def reset_client_cache() -> None:
    """
    Reset the cached database clients.

    Useful for testing or when configuration changes.
    """
    global _service_client, _auth_client
    _service_client = None
    _auth_client = None
