"""Season roster lookups for a single player."""

from __future__ import annotations

import logging
import threading
import time
from concurrent.futures import ThreadPoolExecutor
from typing import Callable, Dict, Iterable, List, Optional, Set, Tuple

from clubstats import seasons
from clubstats.exceptions import DocumentStoreError
from clubstats.models import PlayerRecord, RosterEntry
from clubstats.store import DocumentStore, paths


logger = logging.getLogger(__name__)


class RosterResolver:
    """Finds which seasons (and teams) a player was registered for.

    Roster hits are memoized per ``(owner_scope, player_id)`` for
    ``memo_ttl_seconds``; roster documents change rarely and every request
    for a player needs them more than once.
    """

    def __init__(
        self,
        store: DocumentStore,
        *,
        workers: int = 8,
        memo_ttl_seconds: float = 300.0,
        clock: Callable[[], float] = time.monotonic,
    ):
        self._store = store
        self._workers = max(1, workers)
        self._memo_ttl = memo_ttl_seconds
        self._clock = clock
        self._memo: Dict[Tuple[str, str], Tuple[float, List[RosterEntry]]] = {}
        self._lock = threading.Lock()

    def clear(self) -> None:
        with self._lock:
            self._memo.clear()

    def get_season_registry(self, owner_scope: str) -> Set[str]:
        """Canonical ids of the season documents that currently exist."""

        registry = {seasons.normalize(doc.doc_id) for doc in self._store.list(paths.seasons_collection(owner_scope))}
        registry.discard("")
        return registry

    def get_roster_hits(self, owner_scope: str, player_id: str) -> List[RosterEntry]:
        key = (owner_scope, player_id)
        now = self._clock()
        with self._lock:
            cached = self._memo.get(key)
            if cached is not None and now - cached[0] <= self._memo_ttl:
                return list(cached[1])

        season_ids = [doc.doc_id for doc in self._store.list(paths.seasons_collection(owner_scope))]
        hits = self._read_roster_entries(owner_scope, player_id, season_ids)
        logger.debug("Roster hits for %s/%s: %d of %d seasons", owner_scope, player_id, len(hits), len(season_ids))

        with self._lock:
            self._prune(now)
            self._memo[key] = (now, hits)
        return list(hits)

    def _prune(self, now: float) -> None:
        expired = [key for key, (stamp, _) in self._memo.items() if now - stamp > self._memo_ttl]
        for key in expired:
            del self._memo[key]

    def _read_roster_entries(self, owner_scope: str, player_id: str, season_ids: List[str]) -> List[RosterEntry]:
        if not season_ids:
            return []

        def _read(season_id: str) -> Optional[RosterEntry]:
            try:
                data = self._store.get(paths.roster_entry(owner_scope, season_id, player_id))
            except DocumentStoreError as exc:
                logger.warning("Skipping roster for season %s of %s: %s", season_id, owner_scope, exc)
                return None
            if data is None:
                return None
            return RosterEntry.from_document(season_id, player_id, data)

        with ThreadPoolExecutor(max_workers=min(self._workers, len(season_ids))) as executor:
            results = list(executor.map(_read, season_ids))
        return [entry for entry in results if entry is not None]

    def get_latest_roster_entry(self, owner_scope: str, player_id: str) -> Optional[RosterEntry]:
        hits = self.get_roster_hits(owner_scope, player_id)
        if not hits:
            return None
        # max() keeps the first of equal keys, so duplicates resolve to store order.
        return max(hits, key=lambda entry: entry.season_id)

    def get_roster_team_ids(self, owner_scope: str, player_id: str) -> List[str]:
        team_ids: List[str] = []
        for entry in self.get_roster_hits(owner_scope, player_id):
            if entry.team_id and entry.team_id not in team_ids:
                team_ids.append(entry.team_id)
        return team_ids

    def get_roster_season_ids(self, owner_scope: str, player_id: str) -> List[str]:
        return seasons.sort_descending(entry.season_id for entry in self.get_roster_hits(owner_scope, player_id))

    def get_registered_season_ids(
        self,
        owner_scope: str,
        player_id: str,
        record: Optional[PlayerRecord] = None,
    ) -> List[str]:
        """Seasons from roster and profile, newest first, limited to the season registry."""

        candidates: List[str] = [entry.season_id for entry in self.get_roster_hits(owner_scope, player_id)]
        if record is not None:
            candidates.extend(record.seasons)
            candidates.extend(record.season_data.keys())
        return filter_to_registry(seasons.sort_descending(candidates), self.get_season_registry(owner_scope))


def filter_to_registry(season_ids: Iterable[str], registry: Set[str]) -> List[str]:
    return [season for season in season_ids if season in registry]
