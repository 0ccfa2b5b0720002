"""Document builders shared by the test modules."""

from __future__ import annotations

from typing import Any

from clubstats.store import InMemoryDocumentStore

OWNER = "owner-1"
CLUB = "club-a"
PLAYER = "p1"


def league_documents(*, manual_rows: list[dict[str, Any]] | None = None) -> dict[str, dict[str, Any]]:
    """One club, two seasons, one league with two matches for ``p1``."""

    season_block: dict[str, Any] = {"params": {"overall": 74}}
    if manual_rows is not None:
        season_block["manualCompetitionStats"] = manual_rows
    return {
        f"clubProfiles/{CLUB}": {"clubId": CLUB, "ownerUid": OWNER, "clubName": "FC Alpha"},
        f"owner/{OWNER}/seasons/2023-24": {"label": "2023/24"},
        f"owner/{OWNER}/seasons/2024-25": {"label": "2024/25"},
        f"owner/{OWNER}/seasons/2023-24/roster/{PLAYER}": {"teamId": "t1"},
        f"owner/{OWNER}/seasons/2024-25/roster/{PLAYER}": {"teamId": "t1"},
        f"owner/{OWNER}/teams/t1": {"name": "First Team"},
        f"owner/{OWNER}/teams/t1/players/{PLAYER}": {
            "name": "Player One",
            "seasons": ["2023/24", "2024/25"],
            "seasonData": {"2024/25": season_block},
        },
        f"owner/{OWNER}/competitions/league-a": {"name": "League A", "season": "2024-25", "format": "league"},
        f"owner/{OWNER}/competitions/league-a/rounds/r1": {"name": "Round 1"},
        f"owner/{OWNER}/competitions/league-a/rounds/r1/matches/m1": {
            "playerStats": [
                {"playerId": PLAYER, "teamId": "t1", "minutesPlayed": 90, "goals": 1},
                {"playerId": "p2", "teamId": "t1", "minutesPlayed": 90, "goals": 2},
            ]
        },
        f"owner/{OWNER}/competitions/league-a/rounds/r1/matches/m2": {
            "playerStats": [{"playerId": "p2", "teamId": "t1", "minutesPlayed": 90}],
        },
    }


def league_store(**kwargs: Any) -> InMemoryDocumentStore:
    return InMemoryDocumentStore(league_documents(**kwargs))


class CountingStore(InMemoryDocumentStore):
    """Counts reads so tests can tell a cache hit from a recomputation."""

    def __init__(self, *args: Any, **kwargs: Any):
        self.list_calls: list[str] = []
        self.get_calls: list[str] = []
        super().__init__(*args, **kwargs)

    def list(self, collection: str):
        self.list_calls.append(collection)
        return super().list(collection)

    def get(self, path: str):
        self.get_calls.append(path)
        return super().get(path)

    def match_reads(self) -> int:
        return sum(1 for path in self.list_calls if path.endswith("/matches"))
