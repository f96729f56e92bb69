"""
Dependency injection setup for FastAPI.

This module provides the "container" that wires together the session
core and its collaborators. One container is created per application
and stored on ``app.state``, so the session cell is scoped to the
application root rather than to a module-level global.
"""

from typing import TYPE_CHECKING, Optional

from fastapi import Request

from shared.cache import QueryCache
from shared.config import Settings, get_settings

# Type checking imports for interfaces (avoids circular imports)
if TYPE_CHECKING:
    from modules.auth.interfaces import (
        IIdentityProvider,
        IProfileRepository,
        ISessionService,
    )


class ServiceContainer:
    """
    Container for the session core and its collaborators.

    Collaborators are created lazily on first access and cached.
    Tests pass fakes to the constructor instead.
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        identity_provider: "IIdentityProvider | None" = None,
        profile_repository: "IProfileRepository | None" = None,
        session: "ISessionService | None" = None,
        cache: Optional[QueryCache] = None,
    ) -> None:
        self._settings = settings
        self._identity_provider = identity_provider
        self._profile_repository = profile_repository
        self._session = session
        self._cache = cache

    @property
    def settings(self) -> Settings:
        if self._settings is None:
            self._settings = get_settings()
        return self._settings

    @property
    def cache(self) -> QueryCache:
        """Get the query cache owned by the session core."""
        if self._cache is None:
            self._cache = QueryCache()
        return self._cache

    @property
    def identity_provider(self) -> "IIdentityProvider":
        """Get the identity provider instance."""
        if self._identity_provider is None:
            from modules.auth.provider import SupabaseIdentityProvider
            from shared.database import get_supabase_auth_client
            self._identity_provider = SupabaseIdentityProvider(get_supabase_auth_client())
        return self._identity_provider

    @property
    def profile_repository(self) -> "IProfileRepository":
        """Get the profile repository instance."""
        if self._profile_repository is None:
            from modules.auth.repository import UserProfileRepository
            from shared.database import get_supabase_client
            self._profile_repository = UserProfileRepository(
                get_supabase_client(),
                table=self.settings.profiles_table,
            )
        return self._profile_repository

    @property
    def session(self) -> "ISessionService":
        """Get the session service instance."""
        if self._session is None:
            from modules.auth.service import SessionService
            self._session = SessionService(
                provider=self.identity_provider,
                repository=self.profile_repository,
                cache=self.cache,
                settings=self.settings,
            )
        return self._session


# FastAPI dependency functions
# These are the functions that should be used in route Depends() calls


def get_container(request: Request) -> ServiceContainer:
    """FastAPI dependency for the application's container."""
    return request.app.state.container


def get_session_service(request: Request) -> "ISessionService":
    """FastAPI dependency for the session service."""
    return get_container(request).session


def get_query_cache(request: Request) -> QueryCache:
    """FastAPI dependency for the query cache."""
    return get_container(request).cache


def get_app_settings(request: Request) -> Settings:
    """FastAPI dependency for shared settings."""
    return get_container(request).settings
