"""
Cache abstraction consumed by the session handler.

The session handler never talks to a storage system directly: it is given
a Cache and relies only on the operations declared here. Implementations
own storage, expiry and eviction, and any timeout or retry policy.
"""

from abc import ABC, abstractmethod
from typing import Optional


class Cache(ABC):
    """
    Abstract base class for key-value caches with per-entry TTL.

    All methods are async so that network-backed implementations can do
    non-blocking I/O.
    """

    @abstractmethod
    async def get(self, key: str) -> Optional[str]:
        """
        Retrieve the value stored under key.

        Returns:
            The stored value, or None if the key does not exist or has expired.
        """
        pass

    @abstractmethod
    async def set(self, key: str, value: str, ttl_seconds: int) -> None:
        """
        Store value under key, replacing any existing value and TTL.

        Args:
            key: Cache key.
            value: Value to store.
            ttl_seconds: Time-to-live in seconds. Must be positive.
        """
        pass

    @abstractmethod
    async def delete(self, key: str) -> None:
        """
        Delete key. Deleting a missing key is not an error.
        """
        pass

    @abstractmethod
    async def get_ttl(self, key: str) -> int:
        """
        Report the remaining time-to-live of key in seconds.

        Returns:
            A positive number of seconds for a live entry that will expire,
            and a value <= 0 when the key is missing, already expired or has
            no expiry at all.
        """
        pass

    @abstractmethod
    async def gc(self, prefix: str) -> None:
        """
        Purge entries under prefix that are expired or can never expire.
        """
        pass

    @abstractmethod
    async def health_check(self) -> bool:
        """
        Check that the cache is reachable.

        Returns:
            True if the cache is healthy, False otherwise. Never raises.
        """
        pass
