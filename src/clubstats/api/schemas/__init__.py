"""Pydantic models for API I/O."""

from .club import MenuSettingsResponse
from .stats import PlayerStatsResponse, RegisteredSeasonsResponse

__all__ = [
    "MenuSettingsResponse",
    "PlayerStatsResponse",
    "RegisteredSeasonsResponse",
]
