"""
In-process cache implementation.

Suitable for development and tests. Entries live in a dict and are expired
lazily on access or in bulk by gc(). Data is lost on restart and is not
shared between worker processes.
"""

import logging
import math
import time
from typing import Callable, Dict, Optional, Tuple

from cache.base import Cache

logger = logging.getLogger(__name__)


class InMemoryCache(Cache):
    """
    Dict-backed cache with per-entry expiry.

    Attributes:
        clock: Callable returning the current time in seconds. Tests inject
            a controllable clock to move time forward.
    """

    def __init__(self, clock: Callable[[], float] = time.time):
        self.clock = clock
        self._entries: Dict[str, Tuple[str, float]] = {}

    def _live_entry(self, key: str) -> Optional[Tuple[str, float]]:
        entry = self._entries.get(key)
        if entry is None:
            return None
        if entry[1] <= self.clock():
            del self._entries[key]
            return None
        return entry

    async def get(self, key: str) -> Optional[str]:
        entry = self._live_entry(key)
        return entry[0] if entry else None

    async def set(self, key: str, value: str, ttl_seconds: int) -> None:
        if ttl_seconds <= 0:
            raise ValueError("ttl_seconds must be positive")
        self._entries[key] = (value, self.clock() + ttl_seconds)

    async def delete(self, key: str) -> None:
        self._entries.pop(key, None)

    async def get_ttl(self, key: str) -> int:
        entry = self._live_entry(key)
        if entry is None:
            return -2
        # Round up so a live entry never reports 0
        return math.ceil(entry[1] - self.clock())

    async def gc(self, prefix: str) -> None:
        now = self.clock()
        expired = [
            key for key, (_, expires_at) in self._entries.items()
            if key.startswith(prefix) and expires_at <= now
        ]
        for key in expired:
            del self._entries[key]
        if expired:
            logger.debug(
                "Purged expired cache entries",
                extra={"extra_data": {"prefix": prefix, "purged": len(expired)}}
            )

    async def health_check(self) -> bool:
        return True

    def __len__(self) -> int:
        return len(self._entries)
