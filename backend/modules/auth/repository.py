"""
User profile repository for database access.

Encapsulates all Supabase queries and data mapping for the ``users`` table.
"""

import logging
from enum import Enum
from typing import Any, Optional

from supabase import Client

from shared.repository import BaseRepository
from .models import UserProfile
from .exceptions import ProfileNotFoundError

logger = logging.getLogger(__name__)


class UserProfileRepository(BaseRepository[UserProfile]):
    """
    Repository for application user profiles.

    All methods return UserProfile models mapped from database rows.
    Supabase errors propagate to the caller unchanged.

    Note: This repository does NOT perform authorization checks.
    The session service is responsible for deciding who may write.
    """

    def __init__(self, db: Client, table: str = "users") -> None:
        super().__init__(db)
        self._table = table

    async def find_by_id(self, user_id: str) -> Optional[UserProfile]:
        """
        Get a profile by identity ID.

        Returns:
            UserProfile if found, None otherwise.
        """
        result = await self._execute(
            self._db.table(self._table).select("*").eq("id", user_id).limit(1)
        )
        row = self._first_row(result)
        return UserProfile.from_row(row) if row else None

    async def find_by_email(self, email: str) -> Optional[UserProfile]:
        """
        Get a profile by email address.

        Returns:
            UserProfile if found, None otherwise.
        """
        result = await self._execute(
            self._db.table(self._table)
            .select("*")
            .eq("email", email.strip().lower())
            .limit(1)
        )
        row = self._first_row(result)
        return UserProfile.from_row(row) if row else None

    async def insert(self, profile: UserProfile) -> UserProfile:
        """
        Insert a new profile.

        Returns:
            The persisted row, including any server-generated fields.
        """
        result = await self._execute(self._db.table(self._table).insert(profile.to_row()))
        return UserProfile.from_row(result.data[0])

    async def insert_if_absent(self, profile: UserProfile) -> UserProfile:
        """
        Insert a profile unless one already exists for the same ID.

        Uses an upsert that ignores primary key conflicts, then re-reads
        the row, so two concurrent first logins for one identity both end
        up with the single stored profile.

        Returns:
            The stored profile.
        """
        await self._execute(
            self._db.table(self._table).upsert(
                profile.to_row(),
                on_conflict="id",
                ignore_duplicates=True,
            )
        )

        stored = await self.find_by_id(profile.id)
        if stored is None:
            raise ProfileNotFoundError(profile.id)
        return stored

    async def update(self, user_id: str, patch: dict[str, Any]) -> UserProfile:
        """
        Apply a partial update to a profile.

        Args:
            user_id: The identity ID.
            patch: Column values to set.

        Returns:
            The updated row as stored.

        Raises:
            ProfileNotFoundError: If no row matched user_id.
        """
        data = {k: (v.value if isinstance(v, Enum) else v) for k, v in patch.items()}
        result = await self._execute(self._db.table(self._table).update(data).eq("id", user_id))

        row = self._first_row(result)
        if row is None:
            raise ProfileNotFoundError(user_id)

        logger.debug(f"Updated profile {user_id}: {sorted(data)}")
        return UserProfile.from_row(row)
