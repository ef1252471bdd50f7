"""Key/value storage for photo album bookkeeping.

Album messages arrive as independent updates, so the memo an album is being
collected into has to be remembered between them. Entries expire after a
fixed TTL; a missing entry is a normal state (first message of an album, or
an album older than the TTL).

Two backends are provided:
- RedisAlbumStore: shared storage via redis.asyncio, used when REDIS_URL is set
- InMemoryAlbumStore: per-process dictionary with monotonic-clock expiry
"""

import logging
import time
from collections.abc import Callable
from typing import Protocol

import redis.asyncio as redis
from redis.exceptions import RedisError

from ..config import AlbumStoreConfig

logger = logging.getLogger(__name__)


class AlbumStore(Protocol):
    """Minimal get / put-with-TTL interface used by the album deduplicator."""

    async def get(self, key: str) -> str | None:
        """Return the stored value, or None if absent or expired."""
        ...

    async def put(self, key: str, value: str, ttl: int) -> bool:
        """Store value under key for ttl seconds.

        Returns:
            True if the value was written.
        """
        ...

    async def close(self) -> None:
        """Release backend resources."""
        ...


class RedisAlbumStore:
    """Album store backed by Redis SETEX.

    Backend failures are logged and reported as a miss (get) or an
    unsuccessful write (put), never raised.
    """

    def __init__(self, config: AlbumStoreConfig):
        """Initialize the Redis client without opening a connection.

        Args:
            config: Album store settings with the Redis URL and key prefix.
        """
        self.config = config
        self._redis = redis.from_url(
            config.redis_url,
            decode_responses=True,
            retry_on_timeout=True,
            health_check_interval=30,
            socket_connect_timeout=5,
            socket_timeout=5,
        )

    def _key(self, key: str) -> str:
        return f"{self.config.key_prefix}{key}"

    async def connect(self) -> bool:
        """Check that the Redis server is reachable.

        Returns:
            True if the server answered PING, False otherwise.
        """
        try:
            await self._redis.ping()
            logger.info("Connected to Redis album store")
            return True
        except RedisError as e:
            logger.warning(f"Redis album store unavailable: {e}")
            return False

    async def get(self, key: str) -> str | None:
        try:
            value = await self._redis.get(self._key(key))
        except RedisError as e:
            logger.warning(f"Failed to read album {key}: {e}")
            return None
        if value is None:
            logger.debug(f"Album miss: {key}")
        return value

    async def put(self, key: str, value: str, ttl: int) -> bool:
        try:
            await self._redis.setex(self._key(key), ttl, value)
            return True
        except RedisError as e:
            logger.warning(f"Failed to store album {key}: {e}")
            return False

    async def close(self) -> None:
        try:
            await self._redis.aclose()
            logger.info("Redis album store closed")
        except RedisError as e:
            logger.warning(f"Error closing Redis album store: {e}")


class InMemoryAlbumStore:
    """Album store kept in the current process.

    Suitable for a single webhook worker and for tests. Expired entries are
    dropped when read and swept on every write, so finished albums do not
    accumulate.
    """

    def __init__(self, clock: Callable[[], float] = time.monotonic):
        self._clock = clock
        self._entries: dict[str, tuple[float, str]] = {}

    async def get(self, key: str) -> str | None:
        entry = self._entries.get(key)
        if entry is None:
            return None
        expires_at, value = entry
        if self._clock() >= expires_at:
            del self._entries[key]
            return None
        return value

    def _sweep(self, now: float) -> None:
        expired = [key for key, (expires_at, _) in self._entries.items() if now >= expires_at]
        for key in expired:
            del self._entries[key]

    async def put(self, key: str, value: str, ttl: int) -> bool:
        now = self._clock()
        self._sweep(now)
        self._entries[key] = (now + ttl, value)
        return True

    def __len__(self) -> int:
        return len(self._entries)

    async def close(self) -> None:
        self._entries.clear()


def create_album_store(config: AlbumStoreConfig) -> AlbumStore:
    """Build the album store selected by configuration.

    Returns:
        RedisAlbumStore when a Redis URL is configured, InMemoryAlbumStore otherwise.
    """
    if config.redis_url:
        return RedisAlbumStore(config)
    logger.info("REDIS_URL not set, keeping album state in memory")
    return InMemoryAlbumStore()
