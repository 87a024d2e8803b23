"""
Geocoding cache storage.
"""
from typing import Any, List, Optional

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from civicpulse.database.connection import utcnow
from civicpulse.database.models.cache import CacheEntry


class CacheRepository:
    """Keyed by the hashed request string, so not a BaseRepository."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def lookup(self, key: str) -> Optional[List[Any]]:
        """
        Return the stored candidate payload for ``key`` and count the hit.

        Expired rows are treated as absent; they are overwritten on the next store.
        """
        result = await self.session.execute(
            select(CacheEntry.data).where(
                CacheEntry.key == key,
                CacheEntry.expires_at > utcnow(),
            )
        )
        data = result.scalar_one_or_none()
        if data is None:
            return None

        await self.session.execute(
            update(CacheEntry)
            .where(CacheEntry.key == key)
            .values(hit_count=CacheEntry.hit_count + 1)
        )
        return data

    async def store(self, entry: CacheEntry) -> None:
        # merge() replaces an existing row with the same key
        await self.session.merge(entry)
        await self.session.flush()
