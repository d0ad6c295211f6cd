"""Utility helpers shared across modules."""

from __future__ import annotations

import base64
from datetime import UTC, datetime
from hashlib import sha256


def utcnow() -> datetime:
    return datetime.now(tz=UTC)


def ensure_utc(dt: datetime) -> datetime:
    """Force a datetime into UTC without altering instant."""
    if dt.tzinfo is None:
        return dt.replace(tzinfo=UTC)
    return dt.astimezone(UTC)


def isoformat_utc(dt: datetime) -> str:
    """Fixed-width UTC ISO string, so string order matches time order."""
    return ensure_utc(dt).isoformat(timespec="microseconds").replace("+00:00", "Z")


def article_id_from_url(url: str) -> str:
    """Stable document id for an article URL.

    The SHA-256 digest is base64url-encoded with the padding stripped, which
    keeps the id one-way, fixed-length (43 chars) and safe in paths and keys.
    """
    digest = sha256(url.encode("utf-8")).digest()
    return base64.urlsafe_b64encode(digest).rstrip(b"=").decode("ascii")
