"""
Base repository class for Supabase table access.

Repositories wrap PostgREST queries and map rows into Pydantic models,
so services never see raw dicts.
"""

import asyncio
from typing import Any, Generic, Optional, TypeVar

from supabase import Client


T = TypeVar("T")


class BaseRepository(Generic[T]):
    """
    Base class for all repositories.

    Subclasses implement the queries for one table and map rows into
    ``T``. No authorization is done at this layer.
    """

    def __init__(self, db: Client) -> None:
        self._db = db

    async def _execute(self, query: Any) -> Any:
        """Run a built PostgREST query in a worker thread so the event loop is never blocked."""
        return await asyncio.to_thread(query.execute)

    @staticmethod
    def _first_row(result: Any) -> Optional[dict[str, Any]]:
        """Return the first row of a PostgREST response, or None if it has none."""
        if not result.data:
            return None
        return result.data[0]
