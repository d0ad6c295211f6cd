"""SQLite-backed JSON document collections."""

from __future__ import annotations

import json
import re
import sqlite3
import threading
import uuid
from pathlib import Path
from typing import Any

import sqlite_utils
from sqlite_utils.db import NotFoundError

from .errors import StorageError

_NAME_RE = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")


class DocumentStore:
    """Store schemaless documents as ``(id, data)`` rows, one table per collection."""

    def __init__(self, db_path: Path) -> None:
        self.db_path = db_path
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        # Handlers run on a worker thread pool; the lock serializes access.
        conn = sqlite3.connect(str(db_path), check_same_thread=False)
        self.db = sqlite_utils.Database(conn)
        self._lock = threading.RLock()

    def merge(self, collection: str, doc_id: str, fields: dict[str, Any]) -> None:
        """Create ``doc_id`` or overwrite only the given fields of the stored document."""
        with self._lock:
            try:
                table = self._table(collection)
                document = self._load(table, doc_id) or {}
                document.update(fields)
                table.upsert({"id": doc_id, "data": json.dumps(document)}, pk="id")
            except sqlite3.Error as exc:
                raise StorageError(f"Failed to write {collection}/{doc_id}: {exc}") from exc

    def add(self, collection: str, fields: dict[str, Any]) -> str:
        """Insert a new document under a generated id and return the id."""
        doc_id = uuid.uuid4().hex
        with self._lock:
            try:
                self._table(collection).insert({"id": doc_id, "data": json.dumps(fields)}, pk="id")
            except sqlite3.Error as exc:
                raise StorageError(f"Failed to add document to {collection}: {exc}") from exc
        return doc_id

    def get(self, collection: str, doc_id: str) -> dict[str, Any] | None:
        with self._lock:
            try:
                if not self.db[self._checked(collection)].exists():
                    return None
                return self._load(self.db[collection], doc_id)
            except sqlite3.Error as exc:
                raise StorageError(f"Failed to read {collection}/{doc_id}: {exc}") from exc

    def count(self, collection: str) -> int:
        with self._lock:
            table = self.db[self._checked(collection)]
            try:
                return table.count if table.exists() else 0
            except sqlite3.Error as exc:
                raise StorageError(f"Failed to count {collection}: {exc}") from exc

    def delete_older_than(self, collection: str, field: str, cutoff: str) -> int:
        """Delete every document whose ``field`` sorts strictly before ``cutoff``.

        Runs as one DELETE statement in one transaction, so either every
        matching document goes or none does. Documents lacking the field are
        never matched.
        """
        with self._lock:
            try:
                if not self.db[self._checked(collection)].exists():
                    return 0
                with self.db.conn:
                    cursor = self.db.execute(
                        f"DELETE FROM [{collection}] WHERE json_extract(data, ?) < ?",
                        [f"$.{self._checked(field)}", cutoff],
                    )
            except sqlite3.Error as exc:
                raise StorageError(f"Failed to delete from {collection}: {exc}") from exc
            return cursor.rowcount

    def close(self) -> None:
        self.db.conn.close()

    def _table(self, collection: str) -> sqlite_utils.db.Table:
        table = self.db[self._checked(collection)]
        table.create({"id": str, "data": str}, pk="id", if_not_exists=True)
        return table

    @staticmethod
    def _load(table, doc_id: str) -> dict[str, Any] | None:
        try:
            row = table.get(doc_id)
        except NotFoundError:
            return None
        try:
            return json.loads(row["data"])
        except ValueError as exc:
            raise StorageError(f"Corrupt document {table.name}/{doc_id}: {exc}") from exc

    @staticmethod
    def _checked(name: str) -> str:
        if not _NAME_RE.match(name):
            raise ValueError(f"Invalid collection or field name: {name!r}")
        return name
