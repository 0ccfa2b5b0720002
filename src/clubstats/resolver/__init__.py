"""Identity resolution: clubs, rosters and player records."""

from .clubs import ClubProfile, LegalPage, resolve_club
from .records import PlayerRecordResolver, merge_roster_fields, score_candidate
from .roster import RosterResolver

__all__ = [
    "ClubProfile",
    "LegalPage",
    "PlayerRecordResolver",
    "RosterResolver",
    "merge_roster_fields",
    "resolve_club",
    "score_candidate",
]
