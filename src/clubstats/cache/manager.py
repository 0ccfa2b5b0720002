"""Versioned, TTL-bounded cache of per-player statistics."""

from __future__ import annotations

import logging
import threading
import time
from dataclasses import dataclass, field
from typing import Callable, List, Optional

from pydantic import BaseModel, Field, ValidationError
from pydantic.alias_generators import to_camel
from pydantic.config import ConfigDict

from clubstats import seasons
from clubstats.aggregate import SeasonSummaryBuilder, StatsAggregator
from clubstats.cache.backends import CacheBackend, CacheKey
from clubstats.config.settings import CACHE_TTL_SECONDS_DEFAULT, CACHE_VERSION_DEFAULT
from clubstats.models import AggregatedStats, SeasonSummary
from clubstats.resolver import PlayerRecordResolver, RosterResolver


logger = logging.getLogger(__name__)


class CacheEntry(BaseModel):
    player_id: str
    owner_scope: str = Field(alias="ownerUid")
    stats_season: Optional[str] = None
    season_stats: AggregatedStats
    career_stats: AggregatedStats
    season_summaries: Optional[List[SeasonSummary]] = None
    summaries_included: bool = False
    cached_at_ms: int
    cache_version: int

    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)


class PlayerStatsResult(BaseModel):
    owner_scope: str
    player_id: str
    stats_season: Optional[str] = None
    season_stats: AggregatedStats
    career_stats: AggregatedStats
    season_summaries: Optional[List[SeasonSummary]] = None
    from_cache: bool = False

    model_config = ConfigDict(frozen=True)


@dataclass(frozen=True)
class CachePolicy:
    ttl_seconds: float = CACHE_TTL_SECONDS_DEFAULT
    version: int = CACHE_VERSION_DEFAULT
    clock: Callable[[], float] = field(default=time.time, compare=False)

    def now_ms(self) -> int:
        return int(self.clock() * 1000)

    def is_fresh(self, entry: CacheEntry) -> bool:
        if entry.cache_version != self.version:
            return False
        return self.now_ms() - entry.cached_at_ms <= self.ttl_seconds * 1000

    def can_serve(self, entry: CacheEntry, include_summaries: bool) -> bool:
        if not self.is_fresh(entry):
            return False
        if not include_summaries:
            return True
        return entry.summaries_included and entry.season_summaries is not None


class PlayerStatsCache:
    """Serves cached statistics when allowed, recomputes and stores otherwise."""

    def __init__(
        self,
        backend: CacheBackend,
        *,
        roster: RosterResolver,
        records: PlayerRecordResolver,
        aggregator: StatsAggregator,
        summaries: SeasonSummaryBuilder,
        policy: Optional[CachePolicy] = None,
    ):
        self._backend = backend
        self._roster = roster
        self._records = records
        self._aggregator = aggregator
        self._summaries = summaries
        self.policy = policy or CachePolicy()

    def _load(self, key: CacheKey) -> Optional[CacheEntry]:
        value, found = self._backend.get(key)
        if not found or value is None:
            return None
        try:
            return CacheEntry.model_validate(value)
        except ValidationError as exc:
            logger.warning("Ignoring malformed cache entry %s/%s: %s", key.owner_scope, key.doc_id, exc.error_count())
            return None

    def get(
        self,
        owner_scope: str,
        player_id: str,
        include_summaries: bool = False,
        force_refresh: bool = False,
        season: Optional[str] = None,
        cancel_event: Optional[threading.Event] = None,
    ) -> PlayerStatsResult:
        requested_season = seasons.normalize(season) or None
        key = CacheKey(owner_scope, player_id, requested_season)

        if not force_refresh:
            entry = self._load(key)
            if entry is not None and self.policy.can_serve(entry, include_summaries):
                logger.info("Serving cached stats for %s/%s", owner_scope, key.doc_id)
                return PlayerStatsResult(
                    owner_scope=owner_scope,
                    player_id=player_id,
                    stats_season=entry.stats_season,
                    season_stats=entry.season_stats,
                    career_stats=entry.career_stats,
                    season_summaries=entry.season_summaries if include_summaries else None,
                    from_cache=True,
                )

        started = time.perf_counter()
        entry = self._compute(owner_scope, player_id, requested_season, include_summaries, cancel_event)
        self._backend.put(key, entry.model_dump(mode="json", by_alias=True), self.policy.ttl_seconds)
        logger.info(
            "Recomputed stats for %s/%s in %.3fs (summaries=%s)",
            owner_scope,
            key.doc_id,
            time.perf_counter() - started,
            include_summaries,
        )
        return PlayerStatsResult(
            owner_scope=owner_scope,
            player_id=player_id,
            stats_season=entry.stats_season,
            season_stats=entry.season_stats,
            career_stats=entry.career_stats,
            season_summaries=entry.season_summaries,
            from_cache=False,
        )

    def _compute(
        self,
        owner_scope: str,
        player_id: str,
        requested_season: Optional[str],
        include_summaries: bool,
        cancel_event: Optional[threading.Event],
    ) -> CacheEntry:
        record = self._records.resolve(owner_scope, player_id)
        registered = self._roster.get_registered_season_ids(owner_scope, player_id, record)
        stats_season = requested_season or (registered[0] if registered else None)

        career_stats = self._aggregator.aggregate(owner_scope, player_id, record, None, cancel_event=cancel_event)
        if stats_season:
            season_stats = self._aggregator.aggregate(
                owner_scope, player_id, record, stats_season, cancel_event=cancel_event
            )
        else:
            season_stats = career_stats

        season_summaries = None
        if include_summaries:
            season_summaries = self._summaries.build(
                owner_scope, player_id, record, registered, cancel_event=cancel_event
            )

        return CacheEntry(
            player_id=player_id,
            owner_scope=owner_scope,
            stats_season=stats_season,
            season_stats=season_stats,
            career_stats=career_stats,
            season_summaries=season_summaries,
            summaries_included=include_summaries,
            cached_at_ms=self.policy.now_ms(),
            cache_version=self.policy.version,
        )

    def invalidate(self, owner_scope: str, player_id: str, season: Optional[str] = None) -> None:
        key = CacheKey(owner_scope, player_id, seasons.normalize(season) or None)
        self._backend.delete(key)
        logger.info("Invalidated cached stats for %s/%s", owner_scope, key.doc_id)
