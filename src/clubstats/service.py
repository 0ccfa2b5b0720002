"""Request-level entry point shared by every presentation surface."""

from __future__ import annotations

import logging
import threading
from typing import List, NamedTuple, Optional

from clubstats.aggregate import SeasonSummaryBuilder, StatsAggregator
from clubstats.cache import (
    CacheBackend,
    CachePolicy,
    DocumentCacheBackend,
    PlayerStatsCache,
    PlayerStatsResult,
)
from clubstats.config import DEFAULT_WEIGHTS, EngineSettings, ScoringWeights
from clubstats.resolver import ClubProfile, PlayerRecordResolver, RosterResolver, resolve_club
from clubstats.store import DocumentStore


logger = logging.getLogger(__name__)


class RegisteredSeasons(NamedTuple):
    owner_uid: str
    seasons: List[str]


class PlayerStatsService:
    """Wires the resolvers, aggregator and cache over one document store."""

    def __init__(
        self,
        store: DocumentStore,
        *,
        settings: Optional[EngineSettings] = None,
        backend: Optional[CacheBackend] = None,
        weights: ScoringWeights = DEFAULT_WEIGHTS,
    ):
        self.store = store
        self.settings = settings or EngineSettings()
        self.roster = RosterResolver(
            store,
            workers=self.settings.workers,
            memo_ttl_seconds=self.settings.roster_memo_seconds,
        )
        self.records = PlayerRecordResolver(store, self.roster, workers=self.settings.workers, weights=weights)
        self.aggregator = StatsAggregator(store, workers=self.settings.workers)
        self.summaries = SeasonSummaryBuilder(self.aggregator)
        self.cache = PlayerStatsCache(
            backend or DocumentCacheBackend(store),
            roster=self.roster,
            records=self.records,
            aggregator=self.aggregator,
            summaries=self.summaries,
            policy=CachePolicy(
                ttl_seconds=self.settings.cache_ttl_seconds,
                version=self.settings.cache_version,
            ),
        )

    def resolve_club(self, club_id: str) -> ClubProfile:
        return resolve_club(self.store, club_id)

    def get_player_stats(
        self,
        club_id: str,
        player_id: str,
        *,
        season: Optional[str] = None,
        include_summaries: bool = False,
        force: bool = False,
        cancel_event: Optional[threading.Event] = None,
    ) -> PlayerStatsResult:
        club = self.resolve_club(club_id)
        return self.cache.get(
            club.owner_uid,
            player_id,
            include_summaries=include_summaries,
            force_refresh=force,
            season=season,
            cancel_event=cancel_event,
        )

    def get_registered_seasons(self, club_id: str, player_id: str) -> RegisteredSeasons:
        club = self.resolve_club(club_id)
        record = self.records.resolve(club.owner_uid, player_id)
        seasons = self.roster.get_registered_season_ids(club.owner_uid, player_id, record)
        return RegisteredSeasons(club.owner_uid, seasons)

    def invalidate_player_stats(self, club_id: str, player_id: str) -> None:
        club = self.resolve_club(club_id)
        self.cache.invalidate(club.owner_uid, player_id)
        self.roster.clear()
