import logging
from typing import Optional

from redis.asyncio import Redis

logger = logging.getLogger(__name__)


class CacheService:
    """Best-effort access to the shared Redis instance.

    With no client configured, or when Redis errors, every call returns
    ``None``/``False`` and logs a warning; callers keep working on their
    in-process fallbacks.
    """

    def __init__(self, redis_client: Optional[Redis] = None) -> None:
        self._redis: Optional[Redis] = redis_client

    async def incr(self, key: str, ttl: Optional[int] = None) -> Optional[int]:
        """Atomically increment *key* and return the new value.

        ``ttl`` (seconds) is refreshed on every increment so an idle
        counter eventually resets.
        """
        if self._redis is None:
            return None
        try:
            value = await self._redis.incr(key)
            if ttl:
                await self._redis.expire(key, ttl)
            return int(value)
        except Exception:
            logger.warning("Redis INCR failed for key %s", key)
            return None

    async def ping(self) -> bool:
        """Return ``True`` if Redis answered a PING."""
        if self._redis is None:
            return False
        try:
            return bool(await self._redis.ping())
        except Exception:
            logger.warning("Redis PING failed")
            return False

    @property
    def is_available(self) -> bool:
        """Return ``True`` if a Redis client is configured."""
        return self._redis is not None
