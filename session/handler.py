"""
Session storage handler backed by a key-value cache.

SessionHandler implements the storage half of a session lifecycle
(open, read, write, destroy, gc, close) on top of any Cache. Records are
stored under "session/<session_id>" so the cache can be shared with other
subsystems.

Sliding expiration: every write gives the record the full lifetime. A read
extends the record back to the full lifetime only when its remaining TTL
has dropped below the refresh threshold (7 days by default), so active
sessions never expire mid-use while a read does not cost a write every
time.

The refresh is a read-triggered conditional write made of separate cache
round-trips (get, ttl, set); it is not atomic. Two concurrent readers may
both refresh the same record, which is harmless since they write the same
payload. Concurrent writes are last-write-wins.
"""

import logging
from typing import Optional

from cache.base import Cache
from session.config import SessionConfig

logger = logging.getLogger(__name__)

SESSION_KEY_PREFIX = "session/"


class SessionHandler:
    """
    Translates session lifecycle calls into cache operations.

    Cache failures are not caught here; they propagate to the caller as
    whatever the cache raises.
    """

    def __init__(self, cache: Cache, config: Optional[SessionConfig] = None):
        """
        Initialize the handler.

        Args:
            cache: Shared cache instance. The handler does not own it.
            config: Session settings, defaults to SessionConfig().
        """
        self.cache = cache
        self.config = config or SessionConfig()

    @staticmethod
    def _get_key(session_id: str) -> str:
        return f"{SESSION_KEY_PREFIX}{session_id}"

    async def open(self, path: str, name: str) -> bool:
        # Storage is delegated to the cache, nothing to initialize
        return True

    async def close(self) -> bool:
        # Every write() is already durable, nothing to flush
        return True

    async def read(self, session_id: str) -> str:
        """
        Read the serialized payload of a session.

        Returns:
            The stored payload, or "" when there is no live record. A
            missing record is not an error.
        """
        key = self._get_key(session_id)
        payload = await self.cache.get(key)
        if payload is None:
            return ""

        ttl = await self.cache.get_ttl(key)
        if ttl <= 0:
            # Expired between the two round-trips; do not resurrect it
            return ""

        if ttl < self.config.refresh_threshold_seconds:
            await self.cache.set(key, payload, self.config.max_lifetime_seconds)
            logger.debug(
                "Session lifetime extended",
                extra={"extra_data": {
                    "remaining_ttl": ttl,
                    "new_ttl": self.config.max_lifetime_seconds,
                }}
            )

        return payload

    async def write(self, session_id: str, data: str) -> bool:
        await self.cache.set(self._get_key(session_id), data, self.config.max_lifetime_seconds)
        return True

    async def destroy(self, session_id: str) -> bool:
        await self.cache.delete(self._get_key(session_id))
        return True

    async def gc(self, max_lifetime: int) -> int:
        """
        Let the cache purge stale session records.

        max_lifetime is ignored because every record carries its own TTL.

        Returns:
            Always 0; the number of purged records is not tracked.
        """
        await self.cache.gc(SESSION_KEY_PREFIX)
        return 0
