"""Map a public club id to the owner scope that holds its data."""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Mapping, Optional

from pydantic import BaseModel, Field
from pydantic.alias_generators import to_camel
from pydantic.config import ConfigDict

from clubstats.exceptions import ClubNotFoundError
from clubstats.models.documents import as_list, as_mapping, text
from clubstats.store import DocumentStore, StoredDocument, paths


logger = logging.getLogger(__name__)

MENU_FLAGS = (
    "menuShowNews",
    "menuShowTv",
    "menuShowClub",
    "menuShowTransfers",
    "menuShowMatches",
    "menuShowTable",
    "menuShowStats",
    "menuShowSquad",
    "menuShowPartner",
)


class LegalPage(BaseModel):
    title: str = ""
    slug: str

    model_config = ConfigDict(frozen=True)


class ClubProfile(BaseModel):
    owner_uid: str
    club_id: str
    profile_doc_id: str
    club_name: str
    legal_pages: List[LegalPage] = Field(default_factory=list)
    display_settings: Dict[str, bool] = Field(default_factory=dict)

    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)


def parse_display_settings(raw: Any) -> Dict[str, bool]:
    """Every menu entry is visible unless explicitly set to ``False``."""

    settings = as_mapping(raw)
    return {flag: settings.get(flag) is not False for flag in MENU_FLAGS}


def parse_legal_pages(raw: Any) -> List[LegalPage]:
    pages = []
    for item in as_list(raw):
        page = as_mapping(item)
        slug = text(page.get("slug"))
        if slug is None:
            continue
        title = page.get("title")
        pages.append(LegalPage(title=title if isinstance(title, str) else "", slug=slug))
    return pages


def _find_profile(store: DocumentStore, club_id: str) -> Optional[StoredDocument]:
    direct = store.get(paths.club_profile(club_id))
    if direct is not None:
        return StoredDocument(club_id, direct)
    for field in ("clubId", "ownerUid"):
        matches = store.query(paths.CLUB_PROFILES, field, club_id)
        if matches:
            return matches[0]
    return None


def resolve_club(store: DocumentStore, club_id: str) -> ClubProfile:
    """Resolve by document id, then ``clubId`` field, then ``ownerUid`` field."""

    key = (club_id or "").strip()
    if not key:
        raise ClubNotFoundError(club_id)
    found = _find_profile(store, key)
    if found is None:
        raise ClubNotFoundError(club_id)

    data: Mapping[str, Any] = found.data
    owner_uid = text(data.get("ownerUid")) or found.doc_id
    logger.debug("Resolved club %s to owner %s via %s", key, owner_uid, found.doc_id)
    return ClubProfile(
        owner_uid=owner_uid,
        club_id=text(data.get("clubId")) or key,
        profile_doc_id=found.doc_id,
        club_name=text(data.get("clubName")) or key,
        legal_pages=parse_legal_pages(data.get("legalPages")),
        display_settings=parse_display_settings(data.get("displaySettings")),
    )
