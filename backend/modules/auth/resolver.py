"""
Profile resolution for authenticated identities.

Turns a live provider session into the canonical UserProfile, creating a
provisional (``pending``) profile the first time a federated identity
signs in.
"""

import asyncio
import logging
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Any, AsyncIterator, Optional

from .interfaces import IProfileRepository
from .models import Identity, ProviderSession, Role, UserProfile
from .exceptions import ProfileResolutionError

logger = logging.getLogger(__name__)


def derive_names(metadata: dict[str, Any]) -> tuple[str, str]:
    """
    Derive first and last name from provider metadata.

    The full name is split on whitespace: the first token is the first
    name and the remaining tokens form the last name. Falls back to
    given/family name fields, then to empty strings.

    Examples:
        >>> derive_names({"full_name": "Ada Okafor"})
        ('Ada', 'Okafor')
        >>> derive_names({"full_name": "Chidi  Ngozi Eze"})
        ('Chidi', 'Ngozi Eze')
        >>> derive_names({"given_name": "Ada", "family_name": "Okafor"})
        ('Ada', 'Okafor')
    """
    full_name = metadata.get("full_name") or metadata.get("name")
    if isinstance(full_name, str) and full_name.strip():
        first, *rest = full_name.split()
        return first, " ".join(rest)

    first = metadata.get("given_name") or metadata.get("first_name") or ""
    last = metadata.get("family_name") or metadata.get("last_name") or ""
    return str(first).strip(), str(last).strip()


def derive_avatar(metadata: dict[str, Any]) -> Optional[str]:
    return metadata.get("avatar_url") or metadata.get("picture") or None


def build_provisional_profile(identity: Identity) -> UserProfile:
    """Build the pending profile for an identity seen for the first time."""
    first_name, last_name = derive_names(identity.user_metadata)
    return UserProfile(
        id=identity.id,
        email=identity.email,
        role=Role.PENDING,
        first_name=first_name,
        last_name=last_name,
        profile_image=derive_avatar(identity.user_metadata),
        verified=False,
        created_at=datetime.now(timezone.utc),
    )


class ProfileResolver:
    """
    Fetches or lazily creates the profile for an identity.

    Resolution for one identity is serialized within the process, and
    the insert ignores primary key conflicts, so redundant resolution
    from the bootstrapper and the event listener never duplicates a row.
    """

    def __init__(self, repository: IProfileRepository):
        self._repository = repository
        self._locks: dict[str, asyncio.Lock] = {}
        self._lock_users: dict[str, int] = {}

    @asynccontextmanager
    async def _identity_lock(self, identity_id: str) -> AsyncIterator[None]:
        lock = self._locks.setdefault(identity_id, asyncio.Lock())
        self._lock_users[identity_id] = self._lock_users.get(identity_id, 0) + 1
        try:
            async with lock:
                yield
        finally:
            self._lock_users[identity_id] -= 1
            if self._lock_users[identity_id] == 0:
                del self._lock_users[identity_id]
                del self._locks[identity_id]

    async def resolve(self, session: ProviderSession) -> UserProfile:
        """
        Resolve the profile for a live session.

        Args:
            session: Session carrying the authenticated identity

        Returns:
            The stored UserProfile for the identity

        Raises:
            ProfileResolutionError: If lookup or creation fails
        """
        identity = session.identity

        async with self._identity_lock(identity.id):
            try:
                existing = await self._repository.find_by_id(identity.id)
                if existing is not None:
                    return existing

                created = await self._repository.insert_if_absent(
                    build_provisional_profile(identity)
                )
            except Exception as e:
                raise ProfileResolutionError(identity.id, e) from e

        logger.info(f"Created provisional profile for {identity.id}")
        return created

    async def register(self, profile: UserProfile) -> UserProfile:
        """
        Store the profile for a credential sign-up.

        If a provisional profile was created for the same identity in the
        meantime (e.g. by a sign-in event racing the sign-up), the explicit
        sign-up details replace it.

        Returns:
            The stored UserProfile
        """
        async with self._identity_lock(profile.id):
            stored = await self._repository.insert_if_absent(profile)
            if stored.role == Role.PENDING and profile.role != Role.PENDING:
                stored = await self._repository.update(
                    profile.id,
                    {
                        "role": profile.role,
                        "first_name": profile.first_name,
                        "last_name": profile.last_name,
                        "default_landlord_id": profile.default_landlord_id,
                    },
                )
        return stored
