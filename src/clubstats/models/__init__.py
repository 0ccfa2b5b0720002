"""Typed models shared across the engine."""

from .documents import (
    CompetitionRecord,
    ManualOverrideRow,
    MatchPlayerStat,
    RosterEntry,
    find_player_stat,
    parse_override_rows,
)
from .player import AbilityItem, AbilityParams, PhysicalProfile, PlayerRecord, SeasonProfile
from .stats import ZERO_STATS, AggregatedStats, CompetitionBreakdown, SeasonSummary

__all__ = [
    "AbilityItem",
    "AbilityParams",
    "AggregatedStats",
    "CompetitionBreakdown",
    "CompetitionRecord",
    "ManualOverrideRow",
    "MatchPlayerStat",
    "PhysicalProfile",
    "PlayerRecord",
    "RosterEntry",
    "SeasonProfile",
    "SeasonSummary",
    "ZERO_STATS",
    "find_player_stat",
    "parse_override_rows",
]
