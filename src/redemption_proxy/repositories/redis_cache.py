"""Redis implementation of CacheStore.

Used when several worker processes should share one read cache. Values are
stored as JSON strings with a native EX expiry. The cache is only a mirror
of the remote store, so Redis failures degrade to cache misses instead of
failing the request.
"""

import json
from typing import Any

import redis

from redemption_proxy.config import get_redis_client, settings
from redemption_proxy.logging_config import get_logger

logger = get_logger(__name__)


class RedisCacheRepository:
    """Redis key/value cache with TTL.

    This class satisfies the CacheStore protocol through structural
    typing - no explicit inheritance needed.
    """

    def __init__(
        self,
        redis_client: redis.Redis | None = None,
        key_prefix: str | None = None,
        ttl: int | None = None,
    ) -> None:
        """Initialize the Redis cache repository.

        Args:
            redis_client: Redis client instance. If None, creates default.
            key_prefix: Namespace prepended to every key.
            ttl: Default time-to-live for entries in seconds.
        """
        self._client = redis_client or get_redis_client()
        self._prefix = key_prefix or settings.cache_key_prefix
        self._ttl = ttl or settings.cache_ttl

    @classmethod
    def create(
        cls,
        key_prefix: str | None = None,
        ttl: int | None = None,
    ) -> "RedisCacheRepository":
        """Factory method to create RedisCacheRepository with defaults.

        Args:
            key_prefix: Key namespace. If None, uses settings.
            ttl: Entry TTL in seconds. If None, uses settings.

        Returns:
            Configured RedisCacheRepository
        """
        return cls(key_prefix=key_prefix, ttl=ttl)

    def _key(self, key: str) -> str:
        return f"{self._prefix}:{key}"

    def get(self, key: str) -> Any | None:
        try:
            raw = self._client.get(self._key(key))
        except redis.RedisError as e:
            logger.warning("cache_read_failed", key=key, error=str(e))
            return None

        if raw is None:
            return None
        if isinstance(raw, bytes):
            raw = raw.decode()

        try:
            return json.loads(raw)
        except json.JSONDecodeError:
            logger.warning("cache_entry_corrupt", key=key)
            return None

    def set(self, key: str, value: Any, ttl: int | None = None) -> None:
        try:
            self._client.set(self._key(key), json.dumps(value), ex=ttl or self._ttl)
        except redis.RedisError as e:
            logger.warning("cache_write_failed", key=key, error=str(e))

    def count(self) -> int:
        count = 0
        try:
            for _ in self._client.scan_iter(match=f"{self._prefix}:*"):
                count += 1
        except redis.RedisError as e:
            logger.warning("cache_count_failed", error=str(e))
            return 0
        return count

    def health_check(self) -> bool:
        """Check if Redis is accessible.

        Returns:
            True if healthy, False otherwise
        """
        try:
            return bool(self._client.ping())
        except redis.RedisError:
            return False

    @property
    def ttl(self) -> int:
        """Get the default TTL in seconds."""
        return self._ttl

    @property
    def client(self) -> redis.Redis:
        """Get the Redis client."""
        return self._client
