"""Typed views over raw store documents.

Every document coming out of the store is an untyped mapping of unknown
shape. These models are built through ``from_document`` constructors that
parse and default each field once, so downstream code never type-checks raw
values.
"""

from __future__ import annotations

import math
from typing import Any, Dict, Literal, Mapping, Optional

from pydantic import BaseModel, Field
from pydantic.config import ConfigDict

from clubstats import seasons


CompetitionFormat = Literal["league", "league_cup", "cup", "other"]
_FORMATS = {"league", "league_cup", "cup", "other"}


def finite_number(value: Any) -> Optional[float]:
    """Return ``value`` as a finite float, or ``None`` for anything else."""

    if isinstance(value, bool) or value is None:
        return None
    if isinstance(value, (int, float)):
        number = float(value)
    elif isinstance(value, str) and value.strip():
        try:
            number = float(value.strip())
        except ValueError:
            return None
    else:
        return None
    return number if math.isfinite(number) else None


def strict_number(value: Any) -> Optional[float]:
    """Like :func:`finite_number` but rejects numeric strings."""

    if isinstance(value, str):
        return None
    return finite_number(value)


def non_negative(value: Any) -> float:
    number = finite_number(value)
    if number is None or number < 0:
        return 0.0
    return number


def text(value: Any) -> Optional[str]:
    if not isinstance(value, str):
        return None
    stripped = value.strip()
    return stripped or None


def as_mapping(value: Any) -> Mapping[str, Any]:
    return value if isinstance(value, Mapping) else {}


def as_list(value: Any) -> list:
    return list(value) if isinstance(value, (list, tuple)) else []


class RosterEntry(BaseModel):
    """A player's membership in one season's roster."""

    season_id: str
    raw_season_id: str
    player_id: str
    team_id: Optional[str] = None
    profile_fields: Dict[str, Any] = Field(default_factory=dict)

    model_config = ConfigDict(frozen=True)

    @classmethod
    def from_document(cls, season_id: str, player_id: str, data: Mapping[str, Any] | None) -> "RosterEntry":
        payload = dict(as_mapping(data))
        return cls(
            season_id=seasons.normalize(season_id),
            raw_season_id=season_id,
            player_id=player_id,
            team_id=text(payload.get("teamId")),
            profile_fields=payload,
        )


class CompetitionRecord(BaseModel):
    id: str
    name: str
    season: str = ""
    format: CompetitionFormat = "other"
    logo_url: Optional[str] = None

    model_config = ConfigDict(frozen=True)

    @classmethod
    def from_document(cls, competition_id: str, data: Mapping[str, Any] | None) -> "CompetitionRecord":
        payload = as_mapping(data)
        raw_format = text(payload.get("format"))
        return cls(
            id=competition_id,
            name=text(payload.get("name")) or competition_id,
            season=text(payload.get("season")) or "",
            format=raw_format if raw_format in _FORMATS else "other",
            logo_url=text(payload.get("logoUrl")),
        )

    def matches_season(self, season_filter: Optional[str]) -> bool:
        if not season_filter:
            return True
        return seasons.variants_overlap(self.season, season_filter)


class MatchPlayerStat(BaseModel):
    player_id: str
    team_id: Optional[str] = None
    minutes_played: float = 0.0
    goals: float = 0.0
    assists: float = 0.0
    yellow_cards: float = 0.0
    red_cards: float = 0.0
    rating: Optional[float] = None
    role: Optional[str] = None

    model_config = ConfigDict(frozen=True)

    @classmethod
    def from_document(cls, data: Mapping[str, Any]) -> "MatchPlayerStat":
        rating = finite_number(data.get("rating"))
        return cls(
            player_id=str(data.get("playerId", "")),
            team_id=text(data.get("teamId")),
            minutes_played=non_negative(data.get("minutesPlayed")),
            goals=non_negative(data.get("goals")),
            assists=non_negative(data.get("assists")),
            yellow_cards=non_negative(data.get("yellowCards")),
            red_cards=non_negative(data.get("redCards")),
            rating=rating if rating is not None and rating > 0 else None,
            role=text(data.get("role")),
        )


def find_player_stat(match: Mapping[str, Any] | None, player_id: str) -> Optional[MatchPlayerStat]:
    """Return this player's stat line from a match document, if any."""

    for item in as_list(as_mapping(match).get("playerStats")):
        if isinstance(item, Mapping) and item.get("playerId") == player_id:
            return MatchPlayerStat.from_document(item)
    return None


class ManualOverrideRow(BaseModel):
    """Club-entered competition totals that replace match-derived figures."""

    competition_id: str
    matches: Optional[float] = None
    minutes: Optional[float] = None
    goals: Optional[float] = None
    assists: Optional[float] = None
    yellow_cards: Optional[float] = None
    red_cards: Optional[float] = None
    avg_rating: Optional[float] = None

    model_config = ConfigDict(frozen=True)

    @classmethod
    def from_document(cls, data: Any) -> Optional["ManualOverrideRow"]:
        payload = as_mapping(data)
        competition_id = text(payload.get("competitionId"))
        if competition_id is None:
            return None
        return cls(
            competition_id=competition_id,
            matches=strict_number(payload.get("matches")),
            minutes=strict_number(payload.get("minutes")),
            goals=strict_number(payload.get("goals")),
            assists=strict_number(payload.get("assists")),
            yellow_cards=strict_number(payload.get("yellowCards")),
            red_cards=strict_number(payload.get("redCards")),
            avg_rating=strict_number(payload.get("avgRating")),
        )


def parse_override_rows(value: Any) -> list[ManualOverrideRow]:
    rows = (ManualOverrideRow.from_document(item) for item in as_list(value))
    return [row for row in rows if row is not None]
