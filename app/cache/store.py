"""
Redis-backed side cache.

The primary store is the source of truth; this cache only ever degrades.
Any Redis failure is logged and turned into a miss (reads) or a no-op
(writes and invalidations), so a cache outage never fails a request.
Values are opaque strings; callers serialize at the edge.
"""

from typing import Optional

import redis

from app.core.config import settings
from app.core.logging import get_logger

logger = get_logger(__name__)

# Keys unlinked per pipeline round-trip during pattern deletes
DELETE_CHUNK_SIZE = 500


class CacheStore:
    """
    Key/value cache with per-key TTL.

    Holds a single ``redis.Redis`` client (itself backed by a thread-safe
    connection pool) and is shared by request handlers and the refresher.
    """

    def __init__(self, client: redis.Redis) -> None:
        """
        Args:
            client: Redis client; any object with the same interface works,
                which is how tests inject an in-memory double.
        """
        self.client = client

    @classmethod
    def from_settings(cls) -> "CacheStore":
        """Build a cache store from application settings."""
        client = redis.Redis(
            host=settings.REDIS_HOST,
            port=settings.REDIS_PORT,
            db=settings.REDIS_DB,
            password=settings.REDIS_PASSWORD,
            decode_responses=True,
            socket_connect_timeout=settings.REDIS_SOCKET_TIMEOUT,
            socket_timeout=settings.REDIS_SOCKET_TIMEOUT,
            socket_keepalive=True,
        )
        return cls(client)

    def ping(self) -> bool:
        """Return True if Redis answers."""
        try:
            return bool(self.client.ping())
        except redis.RedisError as e:
            logger.warning(f"Cache ping failed: {e}")
            return False

    def get(self, key: str) -> Optional[str]:
        """
        Return the cached value, or None on miss or cache failure.

        Args:
            key: Cache key (build it with app.cache.keys)
        """
        try:
            value = self.client.get(key)
        except redis.RedisError as e:
            logger.warning(f"Cache get failed for {key}, treating as miss: {e}")
            return None

        if value is None:
            logger.debug(f"Cache MISS: {key}")
            return None
        logger.debug(f"Cache HIT: {key}")
        return value.decode("utf-8") if isinstance(value, bytes) else value

    def set(self, key: str, value: str, ttl: int) -> bool:
        """
        Store a value with a TTL in seconds.

        Returns:
            True if stored, False if the cache was unavailable
        """
        try:
            self.client.setex(key, ttl, value)
        except redis.RedisError as e:
            logger.warning(f"Cache set failed for {key}: {e}")
            return False
        logger.debug(f"Cache SET: {key} (TTL: {ttl}s)")
        return True

    def delete(self, key: str) -> bool:
        """
        Remove a key.

        Returns:
            True if the delete was issued, False if the cache was unavailable
        """
        try:
            self.client.delete(key)
        except redis.RedisError as e:
            logger.warning(f"Cache delete failed for {key}: {e}")
            return False
        logger.debug(f"Cache DELETE: {key}")
        return True

    def delete_pattern(self, pattern: str) -> int:
        """
        Delete every key matching a glob-style pattern.

        Uses SCAN and batched UNLINK so Redis is never blocked by KEYS.

        Returns:
            Number of keys deleted (0 when the cache is unavailable)
        """
        deleted = 0
        try:
            chunk: list[str] = []
            for key in self.client.scan_iter(match=pattern):
                chunk.append(key)
                if len(chunk) >= DELETE_CHUNK_SIZE:
                    deleted += self._unlink(chunk)
                    chunk = []
            if chunk:
                deleted += self._unlink(chunk)
        except redis.RedisError as e:
            logger.warning(f"Cache delete_pattern failed for {pattern}: {e}")
            return deleted

        if deleted:
            logger.info(f"Cache INVALIDATE: {pattern} ({deleted} keys)")
        return deleted

    def _unlink(self, keys: list[str]) -> int:
        pipe = self.client.pipeline(transaction=False)
        pipe.unlink(*keys)
        results = pipe.execute()
        return sum(int(r or 0) for r in results)

    def close(self) -> None:
        try:
            self.client.close()
        except redis.RedisError as e:
            logger.warning(f"Error closing cache connection: {e}")
