"""Season identifier normalization.

Season ids are written as ``2024/25``, ``2024-25``, ``2024/2025`` or
``2024-2025`` depending on who entered them. Everything in the engine compares
seasons through :func:`normalize`, whose canonical ``YYYY/YY`` form sorts
chronologically under plain string comparison.

Strings that do not look like a year pair are opaque labels: every helper
returns them unchanged and they only ever match themselves.
"""

from __future__ import annotations

import re
from typing import Any, Iterable, Mapping, Optional

_YEAR_PAIR = re.compile(r"^(\d{4})([-/])(\d{2}|\d{4})$")


def _split(raw: str) -> Optional[tuple[str, str]]:
    match = _YEAR_PAIR.match(raw)
    if match is None:
        return None
    start, end = match.group(1), match.group(3)
    return start, end[-2:]


def _clean(raw: Any) -> str:
    return raw.strip() if isinstance(raw, str) else ""


def normalize(raw: Any) -> str:
    """Return the canonical ``YYYY/YY`` form, or the stripped input unchanged."""

    text = _clean(raw)
    parts = _split(text)
    if parts is None:
        return text
    return f"{parts[0]}/{parts[1]}"


def to_dash_form(raw: Any) -> str:
    """Return ``YYYY-YY`` for a year pair; used for exact-match store lookups."""

    text = _clean(raw)
    parts = _split(text)
    if parts is None:
        return text
    return f"{parts[0]}-{parts[1]}"


def equals(a: Any, b: Any) -> bool:
    return normalize(a) == normalize(b)


def expand_variants(raw: Any) -> list[str]:
    """Every spelling a writer may have used for the same season.

    The store only supports literal equality filters, so lookups OR across
    these variants instead of normalizing server-side.
    """

    text = _clean(raw)
    if not text:
        return []
    match = _YEAR_PAIR.match(text)
    if match is None:
        return [text]
    start, end = match.group(1), match.group(3)
    end2 = end[-2:]
    end4 = end if len(end) == 4 else f"{start[:2]}{end}"
    return [f"{start}/{end2}", f"{start}-{end2}", f"{start}/{end4}", f"{start}-{end4}"]


def variants_overlap(a: Any, b: Any) -> bool:
    return bool(set(expand_variants(a)).intersection(expand_variants(b)))


def start_year(raw: Any) -> Optional[int]:
    parts = _split(_clean(raw))
    if parts is None:
        return None
    return int(parts[0])


def sort_descending(seasons: Iterable[Any]) -> list[str]:
    """Normalize, drop blanks, de-duplicate and sort newest first."""

    unique = {normalize(season) for season in seasons}
    unique.discard("")
    return sorted(unique, reverse=True)


def season_data_entry(season_data: Mapping[str, Any] | None, season: Any) -> Any:
    """Look up a ``seasonData`` block under the raw key, then slash, then dash form."""

    if not season_data or not isinstance(season_data, Mapping):
        return None
    text = _clean(season)
    if not text:
        return None
    for key in (text, normalize(text), to_dash_form(text)):
        if key in season_data:
            return season_data[key]
    for key, value in season_data.items():
        if equals(key, text):
            return value
    return None
