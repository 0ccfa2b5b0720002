"""Pick the authoritative profile when a player has several team documents."""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import Any, Collection, Dict, List, Mapping, Optional

from clubstats import seasons
from clubstats.config import DEFAULT_WEIGHTS, ScoringWeights
from clubstats.exceptions import DocumentStoreError, PlayerNotFoundError
from clubstats.models import PlayerRecord, RosterEntry
from clubstats.resolver.roster import RosterResolver
from clubstats.store import DocumentStore, paths


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Candidate:
    team_id: str
    data: Dict[str, Any]
    record: PlayerRecord


def score_candidate(
    record: PlayerRecord,
    *,
    team_id: Optional[str] = None,
    roster_seasons: Collection[str] = (),
    roster_team_ids: Collection[str] = (),
    weights: ScoringWeights = DEFAULT_WEIGHTS,
) -> int:
    """Score one team-scoped profile; higher wins.

    Team affinity outranks season affinity, which outranks data richness,
    which outranks the recency of the latest listed season.
    """

    score = 0
    if record.has_season_params():
        score += weights.season_params
    if record.has_season_profile():
        score += weights.season_profile
    if record.has_root_params():
        score += weights.root_params
    if record.has_root_profile():
        score += weights.root_profile

    latest = record.latest_listed_season()
    if latest:
        score += seasons.start_year(latest) or 0

    if roster_seasons:
        own = set(seasons.sort_descending([*record.seasons, *record.season_data.keys()]))
        hits = sum(1 for season in {seasons.normalize(s) for s in roster_seasons} if season in own)
        score += hits * weights.season_affinity

    if team_id and team_id in roster_team_ids:
        score += weights.team_affinity
    return score


def merge_roster_fields(profile: Mapping[str, Any] | None, roster: Optional[RosterEntry]) -> Dict[str, Any]:
    """Roster fields that are present and not ``None`` overwrite the profile's."""

    merged = dict(profile or {})
    if roster is not None:
        merged.update({key: value for key, value in roster.profile_fields.items() if value is not None})
    return merged


class PlayerRecordResolver:
    def __init__(
        self,
        store: DocumentStore,
        roster: RosterResolver,
        *,
        workers: int = 8,
        weights: ScoringWeights = DEFAULT_WEIGHTS,
    ):
        self._store = store
        self._roster = roster
        self._workers = max(1, workers)
        self._weights = weights

    def resolve(self, owner_scope: str, player_id: str) -> PlayerRecord:
        latest = self._roster.get_latest_roster_entry(owner_scope, player_id)

        profile: Optional[Dict[str, Any]] = None
        team_id: Optional[str] = None
        if latest is not None and latest.team_id:
            profile = self._store.get(paths.team_player(owner_scope, latest.team_id, player_id))
            if profile is not None:
                team_id = latest.team_id
                logger.debug("Using roster team %s for player %s", team_id, player_id)

        if profile is None:
            best = self.find_best_candidate(owner_scope, player_id)
            if best is not None:
                profile, team_id = best.data, best.team_id

        if profile is None:
            raise PlayerNotFoundError(owner_scope, player_id)

        merged = merge_roster_fields(profile, latest)
        return PlayerRecord.from_document(player_id, merged, team_id=team_id)

    def find_best_candidate(self, owner_scope: str, player_id: str) -> Optional[Candidate]:
        candidates = self._load_candidates(owner_scope, player_id)
        if not candidates:
            return None
        roster_seasons = self._roster.get_roster_season_ids(owner_scope, player_id)
        roster_team_ids = self._roster.get_roster_team_ids(owner_scope, player_id)

        best: Optional[Candidate] = None
        best_score = -1
        for candidate in candidates:
            score = score_candidate(
                candidate.record,
                team_id=candidate.team_id,
                roster_seasons=roster_seasons,
                roster_team_ids=roster_team_ids,
                weights=self._weights,
            )
            logger.debug("Candidate %s/%s scored %d", candidate.team_id, player_id, score)
            if score > best_score:
                best, best_score = candidate, score
        return best

    def _load_candidates(self, owner_scope: str, player_id: str) -> List[Candidate]:
        team_ids = [doc.doc_id for doc in self._store.list(paths.teams_collection(owner_scope))]
        if not team_ids:
            return []

        def _read(team_id: str) -> Optional[Candidate]:
            try:
                data = self._store.get(paths.team_player(owner_scope, team_id, player_id))
            except DocumentStoreError as exc:
                logger.warning("Skipping team %s while resolving %s: %s", team_id, player_id, exc)
                return None
            if data is None:
                return None
            return Candidate(team_id, data, PlayerRecord.from_document(player_id, data, team_id=team_id))

        with ThreadPoolExecutor(max_workers=min(self._workers, len(team_ids))) as executor:
            results = list(executor.map(_read, team_ids))
        return [candidate for candidate in results if candidate is not None]
