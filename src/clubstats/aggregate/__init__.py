"""Statistics aggregation and season summaries."""

from .service import LEAGUE_FORMATS, CompetitionStats, StatsAggregator, build_override_index
from .summaries import SeasonSummaryBuilder, compute_overall

__all__ = [
    "CompetitionStats",
    "LEAGUE_FORMATS",
    "SeasonSummaryBuilder",
    "StatsAggregator",
    "build_override_index",
    "compute_overall",
]
