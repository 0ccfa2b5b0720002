"""Club player statistics engine."""

from clubstats.exceptions import ClubNotFoundError, ClubStatsError, NotFoundError, PlayerNotFoundError
from clubstats.service import PlayerStatsService

__version__ = "0.1.0"

__all__ = [
    "ClubNotFoundError",
    "ClubStatsError",
    "NotFoundError",
    "PlayerNotFoundError",
    "PlayerStatsService",
    "__version__",
]
