"""
Cache backends for upstream and merged recipe responses.

Redis when REDIS_URL is configured and reachable, otherwise an in-process
TTL cache. Values must be JSON-serializable; they are stored serialized so a
caller mutating a returned value never changes what the cache holds.
"""

import json
import logging
import time
from typing import Any, Callable, Dict, Optional, Tuple

logger = logging.getLogger(__name__)

# 1 hour for provider passthroughs
DEFAULT_TTL_SECONDS = 3600
# 5 minutes for merged listings
MERGED_TTL_SECONDS = 300
# How often the in-memory cache drops expired entries it was never asked for
SWEEP_INTERVAL_SECONDS = 600

MERGED_KEY_PREFIX = "merged_"


def _get_redis_client(url: str):  # type: ignore
    """Create Redis client from url, or None if not configured or unreachable."""
    if not url or url.lower() in ("", "false", "none", "0"):
        return None
    try:
        import redis

        client = redis.from_url(url, decode_responses=True)
        client.ping()
        return client
    except Exception as e:
        logger.warning("Redis unavailable, falling back to in-memory cache: %s", e)
        return None


class RedisCacheBackend:
    """Redis-backed cache. Redis errors are logged and read as misses."""

    def __init__(self, client: Any, default_ttl: int = DEFAULT_TTL_SECONDS) -> None:
        self._redis = client
        self.default_ttl = default_ttl

    def get(self, key: str) -> Optional[Any]:
        try:
            raw = self._redis.get(key)
            if raw is None:
                return None
            return json.loads(raw)
        except Exception as e:
            logger.debug("Cache get failed for %s: %s", key, e)
            return None

    def set(self, key: str, value: Any, ttl: Optional[int] = None) -> None:
        ttl = self.default_ttl if ttl is None else ttl
        try:
            if ttl <= 0:
                self._redis.delete(key)
                return
            self._redis.set(key, json.dumps(value), ex=ttl)
        except Exception as e:
            logger.debug("Cache set failed for %s: %s", key, e)

    def delete_prefix(self, prefix: str) -> int:
        try:
            keys = list(self._redis.scan_iter(match=f"{prefix}*"))
            if not keys:
                return 0
            return int(self._redis.delete(*keys))
        except Exception as e:
            logger.warning("Cache prefix delete failed for %s: %s", prefix, e)
            return 0


class MemoryCacheBackend:
    """In-process cache with per-entry expiry.

    Expired entries are dropped when read, and swept from the whole table on
    the first write after each sweep interval.
    """

    def __init__(
        self,
        default_ttl: int = DEFAULT_TTL_SECONDS,
        clock: Callable[[], float] = time.monotonic,
        sweep_interval: float = SWEEP_INTERVAL_SECONDS,
    ) -> None:
        self.default_ttl = default_ttl
        self.sweep_interval = sweep_interval
        self._clock = clock
        self._entries: Dict[str, Tuple[float, str]] = {}
        self._next_sweep = clock() + sweep_interval

    def get(self, key: str) -> Optional[Any]:
        entry = self._entries.get(key)
        if entry is None:
            return None
        expires_at, raw = entry
        if expires_at <= self._clock():
            self._entries.pop(key, None)
            return None
        return json.loads(raw)

    def set(self, key: str, value: Any, ttl: Optional[int] = None) -> None:
        now = self._clock()
        if now >= self._next_sweep:
            self._sweep(now)
        ttl = self.default_ttl if ttl is None else ttl
        if ttl <= 0:
            self._entries.pop(key, None)
            return
        self._entries[key] = (now + ttl, json.dumps(value))

    def _sweep(self, now: float) -> None:
        expired = [k for k, (expires_at, _) in self._entries.items() if expires_at <= now]
        for key in expired:
            del self._entries[key]
        self._next_sweep = now + self.sweep_interval
        if expired:
            logger.debug("Swept %d expired cache entries", len(expired))

    def delete_prefix(self, prefix: str) -> int:
        doomed = [key for key in self._entries if key.startswith(prefix)]
        for key in doomed:
            del self._entries[key]
        return len(doomed)


class NoOpCacheBackend:
    """Cache that stores nothing. Useful to exercise uncached paths."""

    def get(self, key: str) -> Optional[Any]:
        return None

    def set(self, key: str, value: Any, ttl: Optional[int] = None) -> None:
        return None

    def delete_prefix(self, prefix: str) -> int:
        return 0


def create_cache_backend(redis_url: str, default_ttl: int = DEFAULT_TTL_SECONDS):
    """Build the process cache: Redis if reachable, otherwise in-memory."""
    client = _get_redis_client(redis_url)
    if client is not None:
        logger.info("Using Redis cache")
        return RedisCacheBackend(client, default_ttl=default_ttl)
    logger.info("Using in-memory cache")
    return MemoryCacheBackend(default_ttl=default_ttl)
