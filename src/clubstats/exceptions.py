"""Error hierarchy shared by the resolver, aggregation and API layers."""

from __future__ import annotations


class ClubStatsError(RuntimeError):
    """Base error for the statistics engine."""

    status_code: int = 500

    def __init__(self, message: str, *, status_code: int | None = None):
        super().__init__(message)
        if status_code is not None:
            self.status_code = status_code


class NotFoundError(ClubStatsError, LookupError):
    """A club or player could not be resolved; terminal for the request."""

    status_code = 404


class ClubNotFoundError(NotFoundError):
    def __init__(self, club_id: str):
        super().__init__(f"Club not found: {club_id!r}")
        self.club_id = club_id


class PlayerNotFoundError(NotFoundError):
    def __init__(self, owner_scope: str, player_id: str):
        super().__init__(f"Player not found: {player_id!r}")
        self.owner_scope = owner_scope
        self.player_id = player_id


class DocumentStoreError(ClubStatsError):
    """Raised by document store implementations when a read or write fails."""


class AggregationCancelled(ClubStatsError):
    """Raised when the caller abandoned the request mid-aggregation."""

    status_code = 499
