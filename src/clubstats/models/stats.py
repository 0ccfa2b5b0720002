"""Aggregated statistics and season summary payloads."""

from __future__ import annotations

from typing import Iterable, List, Optional

from pydantic import BaseModel, Field, computed_field
from pydantic.alias_generators import to_camel
from pydantic.config import ConfigDict

from clubstats.models.documents import ManualOverrideRow, MatchPlayerStat


_CAMEL = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)


class AggregatedStats(BaseModel):
    """Additive counters; a monoid under ``+`` with ``AggregatedStats()`` as zero."""

    appearances: int = Field(default=0, ge=0)
    minutes: float = Field(default=0.0, ge=0.0)
    goals: float = Field(default=0.0, ge=0.0)
    assists: float = Field(default=0.0, ge=0.0)
    yellow_cards: float = Field(default=0.0, ge=0.0)
    red_cards: float = Field(default=0.0, ge=0.0)
    rating_sum: float = Field(default=0.0, ge=0.0)
    rating_count: int = Field(default=0, ge=0)

    model_config = _CAMEL

    def __add__(self, other: "AggregatedStats") -> "AggregatedStats":
        if not isinstance(other, AggregatedStats):
            return NotImplemented
        return AggregatedStats(
            appearances=self.appearances + other.appearances,
            minutes=self.minutes + other.minutes,
            goals=self.goals + other.goals,
            assists=self.assists + other.assists,
            yellow_cards=self.yellow_cards + other.yellow_cards,
            red_cards=self.red_cards + other.red_cards,
            rating_sum=self.rating_sum + other.rating_sum,
            rating_count=self.rating_count + other.rating_count,
        )

    @computed_field(alias="avgRating")
    @property
    def avg_rating(self) -> Optional[float]:
        if self.rating_count <= 0:
            return None
        return self.rating_sum / self.rating_count

    @property
    def has_stats(self) -> bool:
        return (
            self.appearances > 0
            or self.minutes > 0
            or self.goals > 0
            or self.assists > 0
            or self.yellow_cards > 0
            or self.red_cards > 0
            or self.rating_count > 0
        )

    @classmethod
    def total(cls, items: Iterable["AggregatedStats"]) -> "AggregatedStats":
        result = cls()
        for item in items:
            result = result + item
        return result

    @classmethod
    def from_match(cls, stat: MatchPlayerStat) -> "AggregatedStats":
        rated = stat.rating is not None and stat.rating > 0
        return cls(
            appearances=1 if stat.minutes_played > 0 else 0,
            minutes=stat.minutes_played,
            goals=stat.goals,
            assists=stat.assists,
            yellow_cards=stat.yellow_cards,
            red_cards=stat.red_cards,
            rating_sum=stat.rating if rated else 0.0,
            rating_count=1 if rated else 0,
        )

    @classmethod
    def from_override(cls, row: ManualOverrideRow) -> "AggregatedStats":
        """Take override totals as given; rebuild a rating sum from the average."""

        def _count(value: Optional[float]) -> float:
            return value if value is not None and value > 0 else 0.0

        matches = int(_count(row.matches))
        rating = row.avg_rating
        rated = matches > 0 and rating is not None and rating > 0
        return cls(
            appearances=matches,
            minutes=_count(row.minutes),
            goals=_count(row.goals),
            assists=_count(row.assists),
            yellow_cards=_count(row.yellow_cards),
            red_cards=_count(row.red_cards),
            rating_sum=rating * matches if rated else 0.0,
            rating_count=matches if rated else 0,
        )


ZERO_STATS = AggregatedStats()


class CompetitionBreakdown(BaseModel):
    competition_id: str
    competition_name: str
    competition_logo_url: Optional[str] = None
    format: str = "other"
    stats: AggregatedStats = Field(default_factory=AggregatedStats)

    model_config = _CAMEL


class SeasonSummary(BaseModel):
    season: str
    total: AggregatedStats = Field(default_factory=AggregatedStats)
    overall: Optional[int] = None
    competitions: List[CompetitionBreakdown] = Field(default_factory=list)

    model_config = _CAMEL
