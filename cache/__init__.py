"""
Key-value caches with per-entry TTL.

The session handler stores its records in one of these. InMemoryCache is
meant for development and tests, RedisCache for anything shared.
"""

from cache.base import Cache
from cache.memory import InMemoryCache
from cache.redis_cache import RedisCache
from cache.factory import create_cache

__all__ = ["Cache", "InMemoryCache", "RedisCache", "create_cache"]
