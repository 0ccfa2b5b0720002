"""Document store interface consumed by the engine."""

from __future__ import annotations

from typing import Any, Dict, List, Mapping, NamedTuple, Optional, Protocol, runtime_checkable


class StoredDocument(NamedTuple):
    doc_id: str
    data: Dict[str, Any]


@runtime_checkable
class DocumentStore(Protocol):
    """Hierarchical key/document store with literal-equality queries only.

    Implementations raise :class:`clubstats.exceptions.DocumentStoreError`
    when a read or write fails; a missing document is not an error.
    """

    def get(self, path: str) -> Optional[Dict[str, Any]]:
        ...

    def list(self, collection: str) -> List[StoredDocument]:
        """Direct children of ``collection`` in store order."""
        ...

    def query(self, collection: str, field: str, value: Any) -> List[StoredDocument]:
        ...

    def set(self, path: str, data: Mapping[str, Any], *, merge: bool = False) -> None:
        ...

    def delete(self, path: str) -> None:
        ...
