"""Key/value backends for computed player statistics."""

from __future__ import annotations

import threading
import time
from dataclasses import dataclass
from typing import Any, Callable, Dict, Mapping, Optional, Protocol, Tuple

from clubstats import seasons
from clubstats.store import DocumentStore, paths


@dataclass(frozen=True)
class CacheKey:
    owner_scope: str
    player_id: str
    season: Optional[str] = None

    @property
    def doc_id(self) -> str:
        if not self.season:
            return self.player_id
        return f"{self.player_id}@{seasons.to_dash_form(self.season)}"


class CacheBackend(Protocol):
    def get(self, key: CacheKey) -> Tuple[Optional[Dict[str, Any]], bool]:
        ...

    def put(self, key: CacheKey, value: Mapping[str, Any], ttl_seconds: float) -> None:
        ...

    def delete(self, key: CacheKey) -> None:
        ...


class MemoryCacheBackend:
    """Process-local backend; entries expire on read once their TTL passes."""

    def __init__(self, *, clock: Callable[[], float] = time.time):
        self._clock = clock
        self._entries: Dict[CacheKey, Tuple[float, Dict[str, Any]]] = {}
        self._lock = threading.Lock()

    def get(self, key: CacheKey) -> Tuple[Optional[Dict[str, Any]], bool]:
        with self._lock:
            item = self._entries.get(key)
            if item is None:
                return None, False
            expires_at, value = item
            if self._clock() > expires_at:
                del self._entries[key]
                return None, False
            return dict(value), True

    def put(self, key: CacheKey, value: Mapping[str, Any], ttl_seconds: float) -> None:
        with self._lock:
            self._entries[key] = (self._clock() + ttl_seconds, dict(value))

    def delete(self, key: CacheKey) -> None:
        with self._lock:
            self._entries.pop(key, None)


class DocumentCacheBackend:
    """Stores entries as sibling documents under ``owner/{scope}/playerStatsCache``.

    The store has no native expiry; freshness is judged by the cache policy
    from the entry's own timestamp.
    """

    def __init__(self, store: DocumentStore):
        self._store = store

    def _path(self, key: CacheKey) -> str:
        return paths.stats_cache_entry(key.owner_scope, key.doc_id)

    def get(self, key: CacheKey) -> Tuple[Optional[Dict[str, Any]], bool]:
        data = self._store.get(self._path(key))
        return data, data is not None

    def put(self, key: CacheKey, value: Mapping[str, Any], ttl_seconds: float) -> None:
        self._store.set(self._path(key), value, merge=True)

    def delete(self, key: CacheKey) -> None:
        self._store.delete(self._path(key))
