"""Response cache backends for aggregated search results.

Caching is optional. ``NoCache`` turns it off, ``MemoryCache`` keeps entries in
process (handy for the CLI and tests) and ``RedisCache`` shares them between
serverless invocations. Backends are synchronous; the service calls them
through ``asyncio.to_thread``.
"""

import hashlib
import json
import logging
import time
from typing import Any

import redis

from ..papers.models import SearchRequest
from ..settings import CACHE_TTL_SECONDS

logger = logging.getLogger(__name__)

CACHE_KEY_PREFIX = "papers:"


def build_cache_key(request: SearchRequest) -> str:
    """
    Build the cache key for a request.

    Parameters are sorted before hashing so the same request always maps to
    the same key regardless of how it was spelled.
    """
    params = request.cache_params()
    key_str = "&".join(f"{k}={v}" for k, v in sorted(params.items()))
    return CACHE_KEY_PREFIX + hashlib.md5(key_str.encode()).hexdigest()


class CacheBackend:
    """Interface shared by cache backends. Values must be JSON-serializable."""

    def get(self, key: str) -> Any | None:
        raise NotImplementedError

    def set(self, key: str, value: Any, ttl: int = CACHE_TTL_SECONDS) -> None:
        raise NotImplementedError

    def delete(self, key: str) -> None:
        raise NotImplementedError


class NoCache(CacheBackend):
    """Cache that never stores anything."""

    def get(self, key: str) -> Any | None:
        return None

    def set(self, key: str, value: Any, ttl: int = CACHE_TTL_SECONDS) -> None:
        pass

    def delete(self, key: str) -> None:
        pass


class MemoryCache(CacheBackend):
    """
    In-process cache with per-entry expiry.

    Values are stored JSON-encoded, like RedisCache, so callers never share
    mutable state with the cache. Expired entries are dropped lazily on read.
    When the size cap is exceeded the entry that expires first is evicted.
    """

    def __init__(self, max_entries: int = 500):
        self.max_entries = max_entries
        self._entries: dict[str, tuple[str, float]] = {}

    def get(self, key: str) -> Any | None:
        entry = self._entries.get(key)
        if entry is None:
            return None
        value, expires_at = entry
        if time.monotonic() >= expires_at:
            del self._entries[key]
            return None
        return json.loads(value)

    def set(self, key: str, value: Any, ttl: int = CACHE_TTL_SECONDS) -> None:
        self._entries[key] = (json.dumps(value), time.monotonic() + ttl)
        if len(self._entries) > self.max_entries:
            oldest = min(self._entries, key=lambda k: self._entries[k][1])
            del self._entries[oldest]

    def delete(self, key: str) -> None:
        self._entries.pop(key, None)

    def __len__(self) -> int:
        return len(self._entries)


class RedisCache(CacheBackend):
    """
    Redis-backed cache storing JSON strings with a TTL.

    Redis errors are logged and treated as cache misses so a cache outage
    never fails a request.
    """

    def __init__(self, url: str, client: redis.Redis | None = None):
        self.client = client or redis.Redis.from_url(url, decode_responses=True)
        logger.info(f"Redis cache initialized: {url}")

    def get(self, key: str) -> Any | None:
        try:
            value = self.client.get(key)
        except redis.RedisError as e:
            logger.warning(f"Redis get error for key {key}: {e}")
            return None
        if not value:
            return None
        try:
            return json.loads(value)
        except json.JSONDecodeError as e:
            logger.warning(f"Discarding undecodable cache entry {key}: {e}")
            return None

    def set(self, key: str, value: Any, ttl: int = CACHE_TTL_SECONDS) -> None:
        try:
            self.client.setex(key, ttl, json.dumps(value))
        except redis.RedisError as e:
            logger.warning(f"Redis set error for key {key}: {e}")

    def delete(self, key: str) -> None:
        try:
            self.client.delete(key)
        except redis.RedisError as e:
            logger.warning(f"Redis delete error for key {key}: {e}")
