"""Merge-upsert of normalized records into document collections."""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, Callable, Iterable

from .document_store import DocumentStore
from .errors import StorageError
from .models import ArticleRecord, MailRecord, SyncReport
from .utils import isoformat_utc, utcnow

logger = logging.getLogger(__name__)

Record = MailRecord | ArticleRecord


class UpsertSink:
    """Write records keyed by their document id, stamping a server timestamp."""

    def __init__(self, store: DocumentStore, clock: Callable[[], datetime] = utcnow) -> None:
        self.store = store
        self._clock = clock

    def upsert(self, record: Record) -> None:
        """Merge the record into its collection; the timestamp advances on every write."""
        fields = record.to_document()
        fields[record.TIMESTAMP_FIELD] = isoformat_utc(self._clock())
        self.store.merge(record.COLLECTION, record.document_id, fields)

    def upsert_all(self, collection: str, records: Iterable[Record]) -> SyncReport:
        """Write records one by one; the first failure stops the rest.

        The raised StorageError carries the report of what landed before it.
        """
        records = list(records)
        report = SyncReport(collection=collection, attempted=len(records))
        for record in records:
            try:
                self.upsert(record)
            except StorageError as exc:
                logger.error(
                    "Upsert into %s failed after %s of %s records: %s",
                    collection,
                    report.written,
                    report.attempted,
                    exc,
                )
                exc.report = report
                raise
            report.written += 1
        return report

    def insert(self, collection: str, fields: dict[str, Any], timestamp_field: str) -> str:
        """Create a document under a store-generated id and return the id."""
        document = dict(fields)
        document[timestamp_field] = isoformat_utc(self._clock())
        return self.store.add(collection, document)
