"""Per-season summary rows with a competition breakdown."""

from __future__ import annotations

import logging
import threading
import unicodedata
from typing import Iterable, List, Optional, Tuple

from clubstats import seasons
from clubstats.aggregate.service import StatsAggregator
from clubstats.models import (
    AbilityParams,
    AggregatedStats,
    CompetitionBreakdown,
    PlayerRecord,
    SeasonSummary,
)


logger = logging.getLogger(__name__)


def compute_overall(params: Optional[AbilityParams]) -> Optional[int]:
    """Stored overall clamped to 0..99, else the rounded mean of the first six values."""

    if params is None:
        return None
    return params.compute_overall()


def _name_key(breakdown: CompetitionBreakdown) -> Tuple[str, str]:
    name = breakdown.competition_name
    folded = unicodedata.normalize("NFKD", name.strip())
    base = "".join(ch for ch in folded if not unicodedata.combining(ch))
    return base.casefold(), name


class SeasonSummaryBuilder:
    def __init__(self, aggregator: StatsAggregator):
        self._aggregator = aggregator

    def build(
        self,
        owner_scope: str,
        player_id: str,
        record: PlayerRecord,
        registered_seasons: Iterable[str],
        *,
        cancel_event: Optional[threading.Event] = None,
    ) -> List[SeasonSummary]:
        """One row per registered season, newest first, zero rows included."""

        ordered = seasons.sort_descending(registered_seasons)
        if not ordered:
            return []
        competitions = self._aggregator.list_competitions(owner_scope)

        summaries: List[SeasonSummary] = []
        for season in ordered:
            per_competition = self._aggregator.competition_stats(
                owner_scope,
                player_id,
                record,
                season,
                cancel_event=cancel_event,
                competitions=competitions,
            )
            breakdown = [
                CompetitionBreakdown(
                    competition_id=item.competition.id,
                    competition_name=item.competition.name,
                    competition_logo_url=item.competition.logo_url,
                    format=item.competition.format,
                    stats=item.stats,
                )
                for item in per_competition.values()
                if item.stats.has_stats
            ]
            breakdown.sort(key=_name_key)
            block = record.season_profile(season)
            summaries.append(
                SeasonSummary(
                    season=season,
                    total=AggregatedStats.total(item.stats for item in per_competition.values()),
                    overall=compute_overall(block.params if block is not None else None),
                    competitions=breakdown,
                )
            )
        logger.debug("Built %d season summaries for %s/%s", len(summaries), owner_scope, player_id)
        return summaries
