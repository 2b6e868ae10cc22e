"""
Redis-based cache implementation.

Sessions stored here survive restarts and are shared between worker
processes. Every round-trip runs through retry_async; once retries are
exhausted the failure surfaces as a SESSION_STORE_UNAVAILABLE AppException.
"""

import logging
from typing import Any, Callable, Optional

import redis.asyncio as redis
from redis.exceptions import ConnectionError as RedisConnectionError
from redis.exceptions import TimeoutError as RedisTimeoutError

from cache.base import Cache
from errors.exceptions import session_store_unavailable
from resilience.retry import RetryConfig, RetryExhaustedException, retry_async

logger = logging.getLogger(__name__)

# Redis TTL replies for a missing key and for a key without expiry
TTL_KEY_MISSING = -2
TTL_NO_EXPIRY = -1

RETRYABLE_REDIS_ERRORS = (
    RedisConnectionError,
    RedisTimeoutError,
    ConnectionError,
    TimeoutError,
)


class RedisCache(Cache):
    """
    Redis-backed cache.

    Values are stored as plain strings with SETEX so that Redis handles
    expiry on its own.

    Attributes:
        redis_url: Redis connection URL (e.g., "redis://localhost:6379/0")
        retry_config: Retry policy applied to every round-trip
        client: Redis async client instance (initialized via connect())
    """

    def __init__(
        self,
        redis_url: str,
        retry_config: Optional[RetryConfig] = None,
        client: Optional[Any] = None
    ):
        """
        Initialize the Redis cache.

        Args:
            redis_url: Redis connection URL.
            retry_config: Retry policy. Only connection and timeout errors
                are retried, whatever the config says.
            client: Pre-built client, mostly for tests. When given,
                connect() is not needed.
        """
        self.redis_url = redis_url
        base = retry_config or RetryConfig()
        self.retry_config = RetryConfig(
            max_attempts=base.max_attempts,
            initial_delay=base.initial_delay,
            exponential_base=base.exponential_base,
            max_delay=base.max_delay,
            retryable_exceptions=RETRYABLE_REDIS_ERRORS,
        )
        self.client = client

    async def connect(self) -> None:
        """
        Create the async Redis client from the configured URL.

        The client connects lazily, so failures surface on first use.
        """
        self.client = redis.from_url(self.redis_url, decode_responses=True)
        logger.info(
            "Redis cache client created",
            extra={"extra_data": {"redis_url": _redact(self.redis_url)}}
        )

    async def disconnect(self) -> None:
        """Close the Redis connection pool."""
        if self.client:
            await self.client.aclose()
            self.client = None

    async def _call(self, operation: str, func: Callable[..., Any], *args: Any) -> Any:
        if not self.client:
            raise RuntimeError("Redis client not connected. Call connect() first.")

        try:
            return await retry_async(
                func,
                *args,
                config=self.retry_config,
                operation_name=f"redis.{operation}"
            )
        except RetryExhaustedException as e:
            raise session_store_unavailable(
                "Session store unavailable",
                details={
                    "operation": operation,
                    "attempts": e.attempts,
                    "error": str(e.last_exception),
                }
            ) from e

    async def get(self, key: str) -> Optional[str]:
        return await self._call("get", self._get, key)

    async def set(self, key: str, value: str, ttl_seconds: int) -> None:
        if ttl_seconds <= 0:
            raise ValueError("ttl_seconds must be positive")
        await self._call("setex", self._setex, key, ttl_seconds, value)

    async def delete(self, key: str) -> None:
        await self._call("delete", self._delete, key)

    async def get_ttl(self, key: str) -> int:
        return int(await self._call("ttl", self._ttl, key))

    async def gc(self, prefix: str) -> None:
        """
        Delete keys under prefix that have no expiry.

        Redis evicts expired keys by itself; only keys written without a TTL
        (for instance by another tool) would otherwise linger forever.
        """
        purged = await self._call("gc", self._purge_persistent, prefix)
        if purged:
            logger.info(
                "Purged cache entries without expiry",
                extra={"extra_data": {"prefix": prefix, "purged": purged}}
            )

    async def health_check(self) -> bool:
        """
        Check connectivity with a PING.

        Returns:
            True if Redis answered, False otherwise.
        """
        if not self.client:
            return False

        try:
            result = await self.client.ping()
            return result is True
        except Exception as e:
            logger.warning(
                "Redis health check failed",
                extra={"extra_data": {"error": str(e)}}
            )
            return False

    async def _get(self, key: str) -> Optional[str]:
        return await self.client.get(key)

    async def _setex(self, key: str, ttl_seconds: int, value: str) -> None:
        await self.client.setex(key, ttl_seconds, value)

    async def _delete(self, key: str) -> None:
        await self.client.delete(key)

    async def _ttl(self, key: str) -> int:
        return await self.client.ttl(key)

    async def _purge_persistent(self, prefix: str) -> int:
        purged = 0
        async for key in self.client.scan_iter(match=f"{prefix}*"):
            if await self.client.ttl(key) == TTL_NO_EXPIRY:
                await self.client.delete(key)
                purged += 1
        return purged


def _redact(url: str) -> str:
    """Hide the password part of a Redis URL for logging."""
    if "@" not in url:
        return url
    scheme, _, rest = url.partition("://")
    return f"{scheme}://***@{rest.split('@', 1)[1]}"
