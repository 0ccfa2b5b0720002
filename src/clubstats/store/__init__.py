"""Document store abstractions."""

from . import paths
from .base import DocumentStore, StoredDocument
from .memory import InMemoryDocumentStore
from .snapshot import load_snapshot, load_snapshot_file

__all__ = [
    "DocumentStore",
    "InMemoryDocumentStore",
    "StoredDocument",
    "load_snapshot",
    "load_snapshot_file",
    "paths",
]
