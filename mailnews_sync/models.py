"""Typed containers shared across the sync pipeline."""

from __future__ import annotations

from dataclasses import asdict, dataclass
from datetime import datetime, timedelta
from typing import Any, ClassVar, Optional


@dataclass(frozen=True)
class CachedToken:
    """Bearer token plus its absolute expiry."""

    value: str
    expires_at: datetime

    def is_usable(self, now: datetime, margin: timedelta) -> bool:
        return now < self.expires_at - margin


@dataclass
class MailRecord:
    """Normalized Outlook message, keyed by the Graph message id."""

    COLLECTION: ClassVar[str] = "emails"
    TIMESTAMP_FIELD: ClassVar[str] = "synced_at"

    id: str
    subject: Optional[str] = None
    sender_address: Optional[str] = None
    received_at: Optional[str] = None
    preview: Optional[str] = None

    @property
    def document_id(self) -> str:
        return self.id

    def to_document(self) -> dict[str, Any]:
        """Content fields only; missing values stay as explicit None."""
        doc = asdict(self)
        doc.pop("id")
        return doc


@dataclass
class ArticleRecord:
    """Normalized news article, keyed by an id derived from its URL."""

    COLLECTION: ClassVar[str] = "articles"
    TIMESTAMP_FIELD: ClassVar[str] = "created_at"

    id: str
    url: str
    source: str = "Unknown"
    title: Optional[str] = None
    description: Optional[str] = None
    published_at: Optional[str] = None
    language: Optional[str] = None
    query_tag: Optional[str] = None

    @property
    def document_id(self) -> str:
        return self.id

    def to_document(self) -> dict[str, Any]:
        doc = asdict(self)
        doc.pop("id")
        return doc


@dataclass
class SyncReport:
    """Outcome of one sync call: how many writes were tried and how many landed."""

    collection: str
    attempted: int = 0
    written: int = 0

    def as_dict(self) -> dict[str, Any]:
        return {
            "collection": self.collection,
            "attempted": self.attempted,
            "written": self.written,
        }
