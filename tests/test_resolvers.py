import pytest

from clubstats.config import DEFAULT_WEIGHTS
from clubstats.exceptions import ClubNotFoundError, DocumentStoreError, PlayerNotFoundError
from clubstats.models import PlayerRecord
from clubstats.resolver import PlayerRecordResolver, RosterResolver, resolve_club, score_candidate
from clubstats.store import InMemoryDocumentStore

from tests.factories import OWNER, PLAYER, CountingStore, league_documents, league_store


def _resolvers(store):
    roster = RosterResolver(store, workers=4)
    return roster, PlayerRecordResolver(store, roster, workers=4)


def test_roster_hits_and_latest_entry():
    roster, _ = _resolvers(league_store())

    hits = roster.get_roster_hits(OWNER, PLAYER)
    assert sorted(hit.season_id for hit in hits) == ["2023/24", "2024/25"]
    latest = roster.get_latest_roster_entry(OWNER, PLAYER)
    assert latest.season_id == "2024/25"
    assert latest.raw_season_id == "2024-25"
    assert roster.get_roster_team_ids(OWNER, PLAYER) == ["t1"]


def test_roster_hits_are_memoized_until_cleared():
    store = CountingStore(league_documents())
    roster, _ = _resolvers(store)

    roster.get_roster_hits(OWNER, PLAYER)
    first = len(store.get_calls)
    roster.get_roster_hits(OWNER, PLAYER)
    assert len(store.get_calls) == first

    roster.clear()
    roster.get_roster_hits(OWNER, PLAYER)
    assert len(store.get_calls) > first


def test_roster_memo_expires():
    now = [0.0]
    store = CountingStore(league_documents())
    roster = RosterResolver(store, memo_ttl_seconds=300, clock=lambda: now[0])

    roster.get_roster_hits(OWNER, PLAYER)
    first = len(store.get_calls)
    now[0] = 301.0
    roster.get_roster_hits(OWNER, PLAYER)
    assert len(store.get_calls) > first


def test_expired_memo_entries_are_pruned_on_write():
    now = [0.0]
    roster = RosterResolver(league_store(), memo_ttl_seconds=300, clock=lambda: now[0])

    roster.get_roster_hits(OWNER, PLAYER)
    roster.get_roster_hits(OWNER, "p2")
    now[0] = 400.0
    roster.get_roster_hits(OWNER, "p3")

    assert set(roster._memo) == {(OWNER, "p3")}


def test_registered_seasons_are_filtered_to_registry():
    docs = league_documents()
    docs[f"owner/{OWNER}/seasons/2022-23/roster/{PLAYER}"] = {"teamId": "t1"}
    docs[f"owner/{OWNER}/teams/t1/players/{PLAYER}"]["seasons"].append("2022-23")
    roster, records = _resolvers(InMemoryDocumentStore(docs))
    record = records.resolve(OWNER, PLAYER)

    # 2022/23 is still listed on the profile but its season document is gone.
    assert roster.get_season_registry(OWNER) == {"2023/24", "2024/25"}
    assert roster.get_registered_season_ids(OWNER, PLAYER, record) == ["2024/25", "2023/24"]


def test_registered_seasons_include_profile_seasons():
    docs = league_documents()
    docs[f"owner/{OWNER}/seasons/2021-22"] = {}
    docs[f"owner/{OWNER}/teams/t1/players/{PLAYER}"]["seasonData"]["2021-2022"] = {}
    roster, records = _resolvers(InMemoryDocumentStore(docs))
    record = records.resolve(OWNER, PLAYER)

    assert roster.get_registered_season_ids(OWNER, PLAYER, record) == ["2024/25", "2023/24", "2021/22"]


class _FlakyRosterStore(InMemoryDocumentStore):
    def get(self, path):
        if "/seasons/2023-24/roster/" in path:
            raise DocumentStoreError("roster read timed out")
        return super().get(path)


def test_roster_read_failure_skips_that_season():
    roster, _ = _resolvers(_FlakyRosterStore(league_documents()))
    assert [hit.season_id for hit in roster.get_roster_hits(OWNER, PLAYER)] == ["2024/25"]


def _two_candidate_docs(*, insertion_order: tuple[str, str]) -> dict:
    docs = {
        f"owner/{OWNER}/seasons/2024-25": {},
        f"owner/{OWNER}/seasons/2024-25/roster/{PLAYER}": {"teamId": "tY"},
    }
    candidates = {
        "tX": {"name": "Only A Name"},
        "tY": {"seasons": ["2024/25"], "seasonData": {"2024/25": {"params": {"overall": 80}}}},
    }
    for team_id in insertion_order:
        docs[f"owner/{OWNER}/teams/{team_id}"] = {}
    for team_id in insertion_order:
        docs[f"owner/{OWNER}/teams/{team_id}/players/{PLAYER}"] = candidates[team_id]
    return docs


@pytest.mark.parametrize("order", [("tX", "tY"), ("tY", "tX")])
def test_resolver_prefers_roster_team_document(order):
    _, records = _resolvers(InMemoryDocumentStore(_two_candidate_docs(insertion_order=order)))

    record = records.resolve(OWNER, PLAYER)

    assert record.team_id == "tY"
    assert record.season_overall("2024/25") == 80


@pytest.mark.parametrize("order", [("tX", "tY"), ("tY", "tX")])
def test_scan_picks_richest_candidate_when_roster_team_missing(order):
    docs = _two_candidate_docs(insertion_order=order)
    # Roster names a team without a player document, forcing the scan.
    docs[f"owner/{OWNER}/seasons/2024-25/roster/{PLAYER}"] = {"teamId": "gone"}
    _, records = _resolvers(InMemoryDocumentStore(docs))

    best = records.find_best_candidate(OWNER, PLAYER)

    assert best.team_id == "tY"


def test_score_precedence_team_over_season_over_richness_over_recency():
    rich = PlayerRecord.from_document(
        "p",
        {
            "seasons": ["2030/31"],
            "seasonData": {"2030/31": {"params": {"overall": 90}, "height": 180}},
            "params": {"overall": 90},
            "height": 180,
        },
    )
    seasonal = PlayerRecord.from_document("p", {"seasons": ["2019/20", "2020/21"]})
    bare = PlayerRecord.from_document("p", {"name": "bare"})
    roster_seasons = ["2019/20", "2020/21"]

    team_score = score_candidate(bare, team_id="home", roster_team_ids=["home"])
    season_score = score_candidate(seasonal, roster_seasons=roster_seasons)
    rich_score = score_candidate(rich, roster_seasons=roster_seasons)

    assert team_score > season_score > rich_score
    assert rich_score > score_candidate(PlayerRecord.from_document("p", {"seasons": ["2099/00"]}))
    assert DEFAULT_WEIGHTS.season_affinity > DEFAULT_WEIGHTS.richness_ceiling()


def test_roster_fields_fill_profile():
    docs = league_documents()
    docs[f"owner/{OWNER}/seasons/2024-25/roster/{PLAYER}"] = {"teamId": "t1", "name": "Roster Name", "height": None}
    docs[f"owner/{OWNER}/teams/t1/players/{PLAYER}"]["height"] = 177
    _, records = _resolvers(InMemoryDocumentStore(docs))

    record = records.resolve(OWNER, PLAYER)

    assert record.name == "Roster Name"
    assert record.physical.height == 177


def test_roster_entry_without_team_document_is_not_found():
    docs = league_documents()
    del docs[f"owner/{OWNER}/teams/t1/players/{PLAYER}"]
    _, records = _resolvers(InMemoryDocumentStore(docs))

    with pytest.raises(PlayerNotFoundError):
        records.resolve(OWNER, PLAYER)


def test_unknown_player_raises_not_found():
    _, records = _resolvers(league_store())
    with pytest.raises(PlayerNotFoundError):
        records.resolve(OWNER, "ghost")


def test_resolve_club_lookup_order():
    store = InMemoryDocumentStore(
        {
            "clubProfiles/doc-1": {
                "clubId": "alpha",
                "ownerUid": "owner-x",
                "clubName": "Alpha",
                "legalPages": [{"title": "Terms", "slug": "terms"}, {"title": "Blank", "slug": "  "}],
                "displaySettings": {"menuShowTv": False, "menuShowNews": "no"},
            },
            "clubProfiles/owner-y": {"clubName": "Beta"},
        }
    )

    by_field = resolve_club(store, "alpha")
    assert by_field.owner_uid == "owner-x"
    assert by_field.profile_doc_id == "doc-1"
    assert [page.slug for page in by_field.legal_pages] == ["terms"]
    assert by_field.display_settings["menuShowTv"] is False
    assert by_field.display_settings["menuShowNews"] is True

    assert resolve_club(store, "owner-x").profile_doc_id == "doc-1"
    assert resolve_club(store, "owner-y").owner_uid == "owner-y"

    with pytest.raises(ClubNotFoundError):
        resolve_club(store, "nobody")
    with pytest.raises(ClubNotFoundError):
        resolve_club(store, "  ")
