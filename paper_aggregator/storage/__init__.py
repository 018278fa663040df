"""Optional response cache."""

from .cache import (
    CACHE_KEY_PREFIX,
    CacheBackend,
    MemoryCache,
    NoCache,
    RedisCache,
    build_cache_key,
)

__all__ = [
    "CACHE_KEY_PREFIX",
    "CacheBackend",
    "MemoryCache",
    "NoCache",
    "RedisCache",
    "build_cache_key",
]
