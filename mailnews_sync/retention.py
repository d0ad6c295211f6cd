"""Age-based deletion of synced documents."""

from __future__ import annotations

import logging
from datetime import datetime, timedelta
from typing import Callable

from .document_store import DocumentStore
from .utils import isoformat_utc, utcnow

logger = logging.getLogger(__name__)


class RetentionSweeper:
    """Delete documents whose timestamp is older than the retention window."""

    def __init__(
        self,
        store: DocumentStore,
        retention: timedelta = timedelta(days=60),
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        self.store = store
        self.retention = retention
        self._clock = clock

    def cutoff(self) -> datetime:
        return self._clock() - self.retention

    def sweep(
        self,
        collection: str,
        cutoff: datetime | None = None,
        field: str = "created_at",
    ) -> int:
        """Atomically delete documents stamped strictly before ``cutoff``; return the count."""
        cutoff = cutoff or self.cutoff()
        deleted = self.store.delete_older_than(collection, field, isoformat_utc(cutoff))
        logger.info("Deleted %s documents from %s older than %s", deleted, collection, cutoff)
        return deleted
