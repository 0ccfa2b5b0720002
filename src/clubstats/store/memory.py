"""In-process document store used by tests and snapshot-backed deployments."""

from __future__ import annotations

import copy
import threading
from typing import Any, Dict, List, Mapping, Optional

from clubstats.store.base import StoredDocument
from clubstats.store.paths import split_document_path


class InMemoryDocumentStore:
    """Dict-backed store; documents are deep-copied in and out."""

    def __init__(self, documents: Mapping[str, Mapping[str, Any]] | None = None):
        self._docs: Dict[str, Dict[str, Any]] = {}
        self._lock = threading.Lock()
        for path, data in (documents or {}).items():
            self.set(path, data)

    def get(self, path: str) -> Optional[Dict[str, Any]]:
        key = path.strip("/")
        with self._lock:
            data = self._docs.get(key)
            return copy.deepcopy(data) if data is not None else None

    def list(self, collection: str) -> List[StoredDocument]:
        prefix = collection.strip("/") + "/"
        with self._lock:
            items = [
                StoredDocument(path[len(prefix):], copy.deepcopy(data))
                for path, data in self._docs.items()
                if path.startswith(prefix) and "/" not in path[len(prefix):]
            ]
        return items

    def query(self, collection: str, field: str, value: Any) -> List[StoredDocument]:
        return [doc for doc in self.list(collection) if doc.data.get(field) == value]

    def set(self, path: str, data: Mapping[str, Any], *, merge: bool = False) -> None:
        split_document_path(path)
        key = path.strip("/")
        payload = copy.deepcopy(dict(data))
        with self._lock:
            if merge and key in self._docs:
                self._docs[key].update(payload)
            else:
                self._docs[key] = payload

    def delete(self, path: str) -> None:
        with self._lock:
            self._docs.pop(path.strip("/"), None)

    def paths(self) -> List[str]:
        with self._lock:
            return list(self._docs)
