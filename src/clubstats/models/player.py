"""Canonical player record shared by the resolver and aggregation layers."""

from __future__ import annotations

import math
from typing import Any, Dict, List, Mapping, Optional

from pydantic import BaseModel, Field
from pydantic.config import ConfigDict

from clubstats import seasons
from clubstats.models.documents import (
    ManualOverrideRow,
    as_list,
    as_mapping,
    finite_number,
    parse_override_rows,
    strict_number,
    text,
)


OVERALL_MIN = 0
OVERALL_MAX = 99
OVERALL_ITEM_LIMIT = 6

_KNOWN_FIELDS = {
    "name",
    "teamId",
    "seasons",
    "seasonData",
    "params",
    "height",
    "weight",
    "age",
    "preferredFoot",
    "manualCompetitionStats",
}


def _clamp_overall(value: float) -> float:
    return max(OVERALL_MIN, min(OVERALL_MAX, value))


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


class AbilityItem(BaseModel):
    label: Optional[str] = None
    value: Optional[float] = None

    model_config = ConfigDict(frozen=True)


class AbilityParams(BaseModel):
    overall: Optional[float] = None
    items: List[AbilityItem] = Field(default_factory=list)

    model_config = ConfigDict(frozen=True)

    @classmethod
    def from_document(cls, data: Any) -> Optional["AbilityParams"]:
        payload = as_mapping(data)
        if not payload:
            return None
        items = [
            AbilityItem(label=text(item.get("label")), value=finite_number(item.get("value")))
            for item in as_list(payload.get("items"))
            if isinstance(item, Mapping)
        ]
        return cls(
            overall=strict_number(payload.get("overall")),
            items=items,
        )

    def is_usable(self) -> bool:
        return (
            self.overall is not None
            or any(item.label for item in self.items)
            or any(item.value is not None for item in self.items)
        )

    def compute_overall(self) -> Optional[int]:
        """Stored overall if present, else the mean of the first six ability values."""

        if self.overall is not None:
            return _round_half_up(_clamp_overall(self.overall))
        values = [_clamp_overall(item.value) for item in self.items if item.value is not None]
        values = values[:OVERALL_ITEM_LIMIT]
        if not values:
            return None
        return _round_half_up(sum(values) / len(values))


class PhysicalProfile(BaseModel):
    height: Optional[float] = None
    weight: Optional[float] = None
    age: Optional[float] = None
    preferred_foot: Optional[str] = None

    model_config = ConfigDict(frozen=True)

    @classmethod
    def from_document(cls, data: Mapping[str, Any]) -> "PhysicalProfile":
        return cls(
            height=strict_number(data.get("height")),
            weight=strict_number(data.get("weight")),
            age=strict_number(data.get("age")),
            preferred_foot=text(data.get("preferredFoot")),
        )

    def has_any(self) -> bool:
        return any(value is not None for value in (self.height, self.weight, self.age, self.preferred_foot))


class SeasonProfile(BaseModel):
    """One ``seasonData`` block of a player document."""

    params: Optional[AbilityParams] = None
    physical: PhysicalProfile = Field(default_factory=PhysicalProfile)
    manual_competition_stats: List[ManualOverrideRow] = Field(default_factory=list)

    model_config = ConfigDict(frozen=True)

    @classmethod
    def from_document(cls, data: Any) -> "SeasonProfile":
        payload = as_mapping(data)
        return cls(
            params=AbilityParams.from_document(payload.get("params")),
            physical=PhysicalProfile.from_document(payload),
            manual_competition_stats=parse_override_rows(payload.get("manualCompetitionStats")),
        )

    def has_params(self) -> bool:
        return self.params is not None and self.params.is_usable()


class PlayerRecord(BaseModel):
    """Validated player profile used by every aggregation path."""

    player_id: str = Field(..., min_length=1)
    team_id: Optional[str] = None
    name: Optional[str] = None
    seasons: List[str] = Field(default_factory=list)
    season_data: Dict[str, SeasonProfile] = Field(default_factory=dict)
    params: Optional[AbilityParams] = None
    physical: PhysicalProfile = Field(default_factory=PhysicalProfile)
    manual_competition_stats: List[ManualOverrideRow] = Field(default_factory=list)
    extra: Dict[str, Any] = Field(default_factory=dict)

    model_config = ConfigDict(frozen=True)

    @classmethod
    def from_document(
        cls,
        player_id: str,
        data: Mapping[str, Any] | None,
        *,
        team_id: Optional[str] = None,
    ) -> "PlayerRecord":
        payload = as_mapping(data)
        season_data = {
            str(key): SeasonProfile.from_document(block)
            for key, block in as_mapping(payload.get("seasonData")).items()
            if str(key).strip()
        }
        season_list = [value.strip() for value in as_list(payload.get("seasons")) if text(value)]
        return cls(
            player_id=player_id,
            team_id=text(payload.get("teamId")) or team_id,
            name=text(payload.get("name")),
            seasons=season_list,
            season_data=season_data,
            params=AbilityParams.from_document(payload.get("params")),
            physical=PhysicalProfile.from_document(payload),
            manual_competition_stats=parse_override_rows(payload.get("manualCompetitionStats")),
            extra={key: value for key, value in payload.items() if key not in _KNOWN_FIELDS},
        )

    def season_profile(self, season: str) -> Optional[SeasonProfile]:
        return seasons.season_data_entry(self.season_data, season)

    def known_seasons(self) -> list[str]:
        """Canonical seasons from both the ``seasons`` list and ``seasonData`` keys."""

        return seasons.sort_descending([*self.seasons, *self.season_data.keys()])

    def latest_listed_season(self) -> Optional[str]:
        ordered = seasons.sort_descending(self.seasons)
        return ordered[0] if ordered else None

    def has_season_params(self) -> bool:
        return any(block.has_params() for block in self.season_data.values())

    def has_season_profile(self) -> bool:
        return any(block.physical.has_any() for block in self.season_data.values())

    def has_root_params(self) -> bool:
        return self.params is not None and self.params.is_usable()

    def has_root_profile(self) -> bool:
        return self.physical.has_any()

    def season_overall(self, season: str) -> Optional[int]:
        block = self.season_profile(season)
        if block is None or block.params is None:
            return None
        return block.params.compute_overall()
