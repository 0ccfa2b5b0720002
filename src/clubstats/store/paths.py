"""Document paths for the club data hierarchy.

Collections and documents alternate: ``owner/{scope}/seasons`` is a
collection, ``owner/{scope}/seasons/2024-25`` a document inside it.
"""

from __future__ import annotations


CLUB_PROFILES = "clubProfiles"
PLAYER_STATS_CACHE = "playerStatsCache"


def join(*segments: str) -> str:
    return "/".join(str(segment).strip("/") for segment in segments)


def split_document_path(path: str) -> tuple[str, str]:
    """Return ``(collection_path, doc_id)`` for a document path."""

    collection, sep, doc_id = path.strip("/").rpartition("/")
    if not sep or not collection or not doc_id:
        raise ValueError(f"Not a document path: {path!r}")
    return collection, doc_id


def owner_root(owner_scope: str) -> str:
    return join("owner", owner_scope)


def club_profile(club_id: str) -> str:
    return join(CLUB_PROFILES, club_id)


def seasons_collection(owner_scope: str) -> str:
    return join(owner_root(owner_scope), "seasons")


def roster_entry(owner_scope: str, season_id: str, player_id: str) -> str:
    return join(seasons_collection(owner_scope), season_id, "roster", player_id)


def teams_collection(owner_scope: str) -> str:
    return join(owner_root(owner_scope), "teams")


def team_player(owner_scope: str, team_id: str, player_id: str) -> str:
    return join(teams_collection(owner_scope), team_id, "players", player_id)


def competitions_collection(owner_scope: str) -> str:
    return join(owner_root(owner_scope), "competitions")


def rounds_collection(owner_scope: str, competition_id: str) -> str:
    return join(competitions_collection(owner_scope), competition_id, "rounds")


def matches_collection(owner_scope: str, competition_id: str, round_id: str) -> str:
    return join(rounds_collection(owner_scope, competition_id), round_id, "matches")


def stats_cache_collection(owner_scope: str) -> str:
    return join(owner_root(owner_scope), PLAYER_STATS_CACHE)


def stats_cache_entry(owner_scope: str, doc_id: str) -> str:
    return join(stats_cache_collection(owner_scope), doc_id)
