"""Player statistics cache."""

from .backends import CacheBackend, CacheKey, DocumentCacheBackend, MemoryCacheBackend
from .manager import CacheEntry, CachePolicy, PlayerStatsCache, PlayerStatsResult

__all__ = [
    "CacheBackend",
    "CacheEntry",
    "CacheKey",
    "CachePolicy",
    "DocumentCacheBackend",
    "MemoryCacheBackend",
    "PlayerStatsCache",
    "PlayerStatsResult",
]
