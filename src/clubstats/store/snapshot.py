"""Seed a document store from a JSON export."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Mapping

from clubstats.store.base import DocumentStore


logger = logging.getLogger(__name__)


def load_snapshot(store: DocumentStore, documents: Mapping[str, Any]) -> int:
    """Write every ``{path: data}`` pair into ``store``; returns the count written.

    Entries whose value is not an object are skipped.
    """

    written = 0
    for path, data in documents.items():
        if not isinstance(data, Mapping):
            logger.warning("Skipping snapshot entry %s: expected an object", path)
            continue
        store.set(path, data)
        written += 1
    return written


def load_snapshot_file(store: DocumentStore, path: Path) -> int:
    payload = json.loads(Path(path).read_text(encoding="utf-8"))
    if not isinstance(payload, Mapping):
        raise ValueError(f"Snapshot {path} must contain a JSON object")
    documents = payload.get("documents", payload)
    count = load_snapshot(store, documents)
    logger.info("Loaded %d documents from %s", count, path)
    return count
