"""Aggregate a player's match statistics across competitions, rounds and matches."""

from __future__ import annotations

import logging
import threading
import time
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass
from typing import Collection, Dict, List, Optional, Sequence, Set, Tuple

from clubstats.exceptions import AggregationCancelled, DocumentStoreError
from clubstats.models import (
    AggregatedStats,
    CompetitionRecord,
    ManualOverrideRow,
    PlayerRecord,
    find_player_stat,
)
from clubstats.store import DocumentStore, StoredDocument, paths


logger = logging.getLogger(__name__)

LEAGUE_FORMATS = frozenset({"league", "league_cup"})


@dataclass(frozen=True)
class CompetitionStats:
    competition: CompetitionRecord
    stats: AggregatedStats
    from_override: bool = False


def build_override_index(record: PlayerRecord, season_filter: Optional[str] = None) -> Dict[str, ManualOverrideRow]:
    """Manual rows keyed by competition id.

    Season rows come first (only the targeted season when filtering, every
    season otherwise); a later row for the same competition replaces an
    earlier one. Legacy root rows only fill competitions still missing.
    """

    if season_filter:
        block = record.season_profile(season_filter)
        season_rows = list(block.manual_competition_stats) if block is not None else []
    else:
        season_rows = [row for block in record.season_data.values() for row in block.manual_competition_stats]

    index: Dict[str, ManualOverrideRow] = {}
    for row in season_rows:
        index[row.competition_id] = row
    for row in record.manual_competition_stats:
        index.setdefault(row.competition_id, row)
    return index


class StatsAggregator:
    """Walks ``competitions -> rounds -> matches`` for one player.

    Reads fan out on a bounded thread pool in two phases (all rounds, then all
    matches). A failed read zeroes that competition only; the rest of the
    aggregation continues.
    """

    def __init__(self, store: DocumentStore, *, workers: int = 8):
        self._store = store
        self._workers = max(1, workers)

    def list_competitions(self, owner_scope: str) -> List[CompetitionRecord]:
        return [
            CompetitionRecord.from_document(doc.doc_id, doc.data)
            for doc in self._store.list(paths.competitions_collection(owner_scope))
        ]

    def build_override_index(self, record: PlayerRecord, season_filter: Optional[str] = None) -> Dict[str, ManualOverrideRow]:
        return build_override_index(record, season_filter)

    def aggregate(
        self,
        owner_scope: str,
        player_id: str,
        record: PlayerRecord,
        season_filter: Optional[str] = None,
        *,
        cancel_event: Optional[threading.Event] = None,
        filter_formats: Optional[Collection[str]] = None,
    ) -> AggregatedStats:
        per_competition = self.competition_stats(
            owner_scope,
            player_id,
            record,
            season_filter,
            cancel_event=cancel_event,
            filter_formats=filter_formats,
            include_unseasoned=True,
        )
        return AggregatedStats.total(item.stats for item in per_competition.values())

    def competition_stats(
        self,
        owner_scope: str,
        player_id: str,
        record: PlayerRecord,
        season_filter: Optional[str] = None,
        *,
        cancel_event: Optional[threading.Event] = None,
        filter_formats: Optional[Collection[str]] = None,
        competitions: Optional[Sequence[CompetitionRecord]] = None,
        include_unseasoned: bool = False,
    ) -> Dict[str, CompetitionStats]:
        """Per-competition figures in store order, overrides applied.

        Competitions without a season only count under a season filter when
        ``include_unseasoned`` is set.
        """

        started = time.perf_counter()
        _check_cancel(cancel_event)
        if competitions is None:
            competitions = self.list_competitions(owner_scope)
        selected = [
            competition
            for competition in competitions
            if (competition.matches_season(season_filter) or (include_unseasoned and not competition.season))
            and (filter_formats is None or competition.format in filter_formats)
        ]
        overrides = self.build_override_index(record, season_filter)

        results: Dict[str, CompetitionStats] = {}
        walk: List[CompetitionRecord] = []
        for competition in selected:
            row = overrides.get(competition.id)
            if row is not None:
                results[competition.id] = CompetitionStats(competition, AggregatedStats.from_override(row), True)
            else:
                walk.append(competition)

        walked = self._walk(owner_scope, player_id, walk, cancel_event)
        ordered: Dict[str, CompetitionStats] = {}
        for competition in selected:
            if competition.id in results:
                ordered[competition.id] = results[competition.id]
            else:
                ordered[competition.id] = CompetitionStats(competition, walked.get(competition.id, AggregatedStats()))
        logger.debug(
            "Aggregated %s for %s (season=%s) over %d competitions in %.3fs",
            player_id,
            owner_scope,
            season_filter or "*",
            len(ordered),
            time.perf_counter() - started,
        )
        return ordered

    def _walk(
        self,
        owner_scope: str,
        player_id: str,
        competitions: List[CompetitionRecord],
        cancel_event: Optional[threading.Event],
    ) -> Dict[str, AggregatedStats]:
        if not competitions:
            return {}

        failed: Set[str] = set()
        totals: Dict[str, AggregatedStats] = {competition.id: AggregatedStats() for competition in competitions}

        def _list(collection: str) -> List[StoredDocument]:
            _check_cancel(cancel_event)
            return self._store.list(collection)

        with ThreadPoolExecutor(max_workers=self._workers) as executor:
            round_futures: List[Tuple[str, Future]] = [
                (competition.id, executor.submit(_list, paths.rounds_collection(owner_scope, competition.id)))
                for competition in competitions
            ]
            round_ids: List[Tuple[str, str]] = []
            for competition_id, future in round_futures:
                for doc in self._collect(future, competition_id, failed):
                    round_ids.append((competition_id, doc.doc_id))

            _check_cancel(cancel_event)
            match_futures: List[Tuple[str, Future]] = [
                (competition_id, executor.submit(_list, paths.matches_collection(owner_scope, competition_id, round_id)))
                for competition_id, round_id in round_ids
                if competition_id not in failed
            ]
            for competition_id, future in match_futures:
                for match in self._collect(future, competition_id, failed):
                    stat = find_player_stat(match.data, player_id)
                    if stat is not None:
                        totals[competition_id] = totals[competition_id] + AggregatedStats.from_match(stat)

        for competition_id in failed:
            totals[competition_id] = AggregatedStats()
        return totals

    @staticmethod
    def _collect(future: Future, competition_id: str, failed: Set[str]) -> List[StoredDocument]:
        try:
            return future.result()
        except DocumentStoreError as exc:
            if competition_id not in failed:
                logger.warning("Competition %s degraded to zero after read failure: %s", competition_id, exc)
            failed.add(competition_id)
            return []


def _check_cancel(cancel_event: Optional[threading.Event]) -> None:
    if cancel_event is not None and cancel_event.is_set():
        raise AggregationCancelled("Aggregation cancelled by caller")


__all__ = ["CompetitionStats", "LEAGUE_FORMATS", "StatsAggregator", "build_override_index"]
