"""Build the configured cache backend from settings."""

import logging

from cache.base import Cache
from cache.memory import InMemoryCache
from cache.redis_cache import RedisCache
from config.settings import Settings
from resilience.retry import RetryConfig

logger = logging.getLogger(__name__)


def create_cache(settings: Settings) -> Cache:
    """
    Create the cache selected by settings.cache_backend.

    A RedisCache is returned unconnected; the application lifespan calls
    connect() on startup. In development the redis backend falls back to
    the in-memory cache when no URL is configured.
    """
    if settings.cache_backend == "redis" and settings.redis_url:
        return RedisCache(
            settings.redis_url,
            retry_config=RetryConfig(
                max_attempts=settings.cache_retry_attempts,
                initial_delay=settings.cache_retry_initial_delay,
            ),
        )

    if settings.cache_backend == "redis":
        logger.warning("redis_url not configured, using in-memory session cache")

    return InMemoryCache()
