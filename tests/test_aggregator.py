import itertools
import math
import threading

import pytest

from clubstats.aggregate import LEAGUE_FORMATS, StatsAggregator, build_override_index
from clubstats.exceptions import AggregationCancelled, DocumentStoreError
from clubstats.models import AggregatedStats, PlayerRecord
from clubstats.store import InMemoryDocumentStore

from tests.factories import OWNER, PLAYER, CountingStore, league_documents, league_store


def _record(store) -> PlayerRecord:
    return PlayerRecord.from_document(PLAYER, store.get(f"owner/{OWNER}/teams/t1/players/{PLAYER}"))


def _add_cup(docs: dict, *, minutes: float = 30, goals: float = 0) -> None:
    docs[f"owner/{OWNER}/competitions/cup-b"] = {"name": "Cup B", "season": "2024/2025", "format": "cup"}
    docs[f"owner/{OWNER}/competitions/cup-b/rounds/final"] = {}
    docs[f"owner/{OWNER}/competitions/cup-b/rounds/final/matches/f1"] = {
        "playerStats": [{"playerId": PLAYER, "minutesPlayed": minutes, "goals": goals, "rating": 6.5}]
    }


def test_season_totals_from_matches():
    store = league_store()
    stats = StatsAggregator(store).aggregate(OWNER, PLAYER, _record(store), "2024/25")

    assert stats.appearances == 1
    assert stats.goals == 1
    assert stats.minutes == 90
    assert stats.avg_rating is None


def test_override_replaces_match_documents():
    store = league_store(manual_rows=[{"competitionId": "league-a", "matches": 10, "goals": 4, "avgRating": 7.2}])
    stats = StatsAggregator(store).aggregate(OWNER, PLAYER, _record(store), "2024/25")

    assert stats.appearances == 10
    assert stats.goals == 4
    assert stats.minutes == 0
    assert math.isclose(stats.rating_sum, 72.0)
    assert stats.rating_count == 10
    assert math.isclose(stats.avg_rating, 7.2)


def test_override_for_one_competition_leaves_others_match_derived():
    docs = league_documents(manual_rows=[{"competitionId": "league-a", "matches": 2, "goals": 0}])
    _add_cup(docs, goals=2)
    store = InMemoryDocumentStore(docs)

    per_competition = StatsAggregator(store).competition_stats(OWNER, PLAYER, _record(store), "2024/25")

    assert per_competition["league-a"].from_override
    assert per_competition["league-a"].stats.goals == 0
    assert not per_competition["cup-b"].from_override
    assert per_competition["cup-b"].stats.goals == 2
    assert per_competition["cup-b"].stats.rating_count == 1


def test_legacy_root_rows_only_fill_missing_competitions():
    docs = league_documents(manual_rows=[{"competitionId": "league-a", "matches": 5}])
    _add_cup(docs)
    docs[f"owner/{OWNER}/teams/t1/players/{PLAYER}"]["manualCompetitionStats"] = [
        {"competitionId": "league-a", "matches": 99},
        {"competitionId": "cup-b", "matches": 3},
    ]
    store = InMemoryDocumentStore(docs)
    record = _record(store)

    index = build_override_index(record, "2024/25")
    assert index["league-a"].matches == 5
    assert index["cup-b"].matches == 3

    stats = StatsAggregator(store).aggregate(OWNER, PLAYER, record, "2024-25")
    assert stats.appearances == 8


def test_season_filter_matches_any_spelling_and_excludes_other_seasons():
    docs = league_documents()
    docs[f"owner/{OWNER}/competitions/old-league"] = {"name": "Old League", "season": "2023-2024"}
    docs[f"owner/{OWNER}/competitions/old-league/rounds/r1"] = {}
    docs[f"owner/{OWNER}/competitions/old-league/rounds/r1/matches/m1"] = {
        "playerStats": [{"playerId": PLAYER, "minutesPlayed": 60, "goals": 3}]
    }
    store = InMemoryDocumentStore(docs)
    aggregator = StatsAggregator(store)
    record = _record(store)

    assert aggregator.aggregate(OWNER, PLAYER, record, "2024/2025").goals == 1
    assert aggregator.aggregate(OWNER, PLAYER, record, "2023/24").goals == 3
    career = aggregator.aggregate(OWNER, PLAYER, record)
    assert career.goals == 4
    assert career.appearances == 2


def test_competition_without_season_counts_under_every_filter():
    docs = league_documents()
    docs[f"owner/{OWNER}/competitions/friendly"] = {"name": "Friendly"}
    docs[f"owner/{OWNER}/competitions/friendly/rounds/r1"] = {}
    docs[f"owner/{OWNER}/competitions/friendly/rounds/r1/matches/m1"] = {
        "playerStats": [{"playerId": PLAYER, "minutesPlayed": 90, "goals": 2}]
    }
    store = InMemoryDocumentStore(docs)
    aggregator = StatsAggregator(store)
    record = _record(store)

    assert aggregator.aggregate(OWNER, PLAYER, record, "2024/25").goals == 3
    assert aggregator.aggregate(OWNER, PLAYER, record, "2023/24").goals == 2
    assert aggregator.aggregate(OWNER, PLAYER, record).goals == 3
    assert "friendly" not in aggregator.competition_stats(OWNER, PLAYER, record, "2024/25")


def test_career_index_keeps_last_row_per_competition():
    record = PlayerRecord.from_document(
        PLAYER,
        {
            "seasonData": {
                "2023/24": {"manualCompetitionStats": [{"competitionId": "league-a", "matches": 4}]},
                "2024/25": {"manualCompetitionStats": [{"competitionId": "league-a", "matches": 9}]},
            }
        },
    )

    assert build_override_index(record)["league-a"].matches == 9
    assert build_override_index(record, "2023/24")["league-a"].matches == 4


def test_filter_formats_restricts_competitions():
    docs = league_documents()
    _add_cup(docs, goals=5)
    store = InMemoryDocumentStore(docs)

    stats = StatsAggregator(store).aggregate(OWNER, PLAYER, _record(store), filter_formats=LEAGUE_FORMATS)

    assert stats.goals == 1


def test_accumulation_is_order_independent():
    lines = [
        {"playerId": PLAYER, "minutesPlayed": 90, "goals": 2, "rating": 8.0, "yellowCards": 1},
        {"playerId": PLAYER, "minutesPlayed": 12, "assists": 1, "rating": 6.0},
        {"playerId": PLAYER, "minutesPlayed": 0, "goals": 0},
        {"playerId": PLAYER, "minutesPlayed": 45, "redCards": 1},
    ]
    results = []
    for order in itertools.permutations(range(len(lines))):
        docs = {
            f"owner/{OWNER}/competitions/c1": {"name": "C1", "season": "2024/25"},
            f"owner/{OWNER}/competitions/c1/rounds/r0": {},
            f"owner/{OWNER}/competitions/c1/rounds/r1": {},
        }
        for position, index in enumerate(order):
            round_id = f"r{position % 2}"
            docs[f"owner/{OWNER}/competitions/c1/rounds/{round_id}/matches/m{index}"] = {"playerStats": [lines[index]]}
        store = InMemoryDocumentStore(docs)
        results.append(StatsAggregator(store, workers=3).aggregate(OWNER, PLAYER, PlayerRecord(player_id=PLAYER)))

    assert all(result == results[0] for result in results)
    assert results[0].appearances == 3
    assert results[0].minutes == 147
    assert results[0].rating_count == 2
    assert results[0].avg_rating == 7.0


class _FailingStore(InMemoryDocumentStore):
    def __init__(self, documents, *, failing: str):
        super().__init__(documents)
        self.failing = failing

    def list(self, collection):
        if collection.startswith(self.failing):
            raise DocumentStoreError(f"timeout listing {collection}")
        return super().list(collection)


@pytest.mark.parametrize(
    "failing",
    [
        f"owner/{OWNER}/competitions/cup-b/rounds",
        f"owner/{OWNER}/competitions/cup-b/rounds/final/matches",
    ],
)
def test_failed_branch_degrades_to_zero(failing, caplog):
    docs = league_documents()
    _add_cup(docs, goals=3)
    store = _FailingStore(docs, failing=failing)

    with caplog.at_level("WARNING", logger="clubstats.aggregate.service"):
        per_competition = StatsAggregator(store).competition_stats(OWNER, PLAYER, _record(store), "2024/25")

    assert per_competition["cup-b"].stats == AggregatedStats()
    assert per_competition["league-a"].stats.goals == 1
    assert "cup-b" in caplog.text


def test_missing_rounds_and_matches_are_zero_contribution():
    store = InMemoryDocumentStore({f"owner/{OWNER}/competitions/empty": {"name": "Empty", "season": "2024/25"}})
    stats = StatsAggregator(store).aggregate(OWNER, PLAYER, PlayerRecord(player_id=PLAYER), "2024/25")
    assert stats == AggregatedStats()


def test_cancelled_before_start_issues_no_reads():
    store = CountingStore(league_documents())
    event = threading.Event()
    event.set()

    with pytest.raises(AggregationCancelled):
        StatsAggregator(store).aggregate(OWNER, PLAYER, PlayerRecord(player_id=PLAYER), cancel_event=event)

    assert store.list_calls == []


class _CancellingStore(CountingStore):
    def __init__(self, documents, event):
        super().__init__(documents)
        self.event = event

    def list(self, collection):
        result = super().list(collection)
        if collection.endswith("/rounds"):
            self.event.set()
        return result


def test_cancel_mid_traversal_stops_before_match_reads():
    event = threading.Event()
    store = _CancellingStore(league_documents(), event)

    with pytest.raises(AggregationCancelled):
        StatsAggregator(store).aggregate(OWNER, PLAYER, PlayerRecord(player_id=PLAYER), cancel_event=event)

    assert store.match_reads() == 0
