from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel
from pydantic.alias_generators import to_camel
from pydantic.config import ConfigDict

from clubstats.cache import PlayerStatsResult
from clubstats.models import AggregatedStats, SeasonSummary


_CAMEL = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class PlayerStatsResponse(BaseModel):
    owner_uid: str
    player_id: str
    stats_season: Optional[str] = None
    season_stats: AggregatedStats
    career_stats: AggregatedStats
    season_summaries: Optional[List[SeasonSummary]] = None

    model_config = _CAMEL

    @classmethod
    def from_result(cls, result: PlayerStatsResult) -> "PlayerStatsResponse":
        return cls(
            owner_uid=result.owner_scope,
            player_id=result.player_id,
            stats_season=result.stats_season,
            season_stats=result.season_stats,
            career_stats=result.career_stats,
            season_summaries=result.season_summaries,
        )


class RegisteredSeasonsResponse(BaseModel):
    owner_uid: str
    player_id: str
    seasons: List[str]

    model_config = _CAMEL
