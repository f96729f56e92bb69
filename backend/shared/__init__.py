"""
Shared infrastructure for Baaba backend.

This package contains cross-cutting concerns that are used by multiple modules:
- config: Centralized settings management
- database: Supabase client factory
- exceptions: Base exception classes
- cache: Query cache owned by the session core

Note: Business logic should NOT go here. This is for infrastructure only.
"""

from .config import Settings, get_settings
from .database import get_supabase_client, get_supabase_auth_client, reset_client_cache
from .exceptions import (
    BaabaError,
    NotFoundError,
    ValidationError,
    ConflictError,
    AuthenticationError,
    AuthorizationError,
    ExternalServiceError,
)
from .cache import QueryCache

__all__ = [
    "Settings",
    "get_settings",
    "get_supabase_client",
    "get_supabase_auth_client",
    "reset_client_cache",
    "BaabaError",
    "NotFoundError",
    "ValidationError",
    "ConflictError",
    "AuthenticationError",
    "AuthorizationError",
    "ExternalServiceError",
    "QueryCache",
]
