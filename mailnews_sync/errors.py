"""Error taxonomy surfaced by the sync backend."""

from __future__ import annotations

from typing import Any


class SyncError(Exception):
    """Base class for every failure the request handlers translate."""


class ConfigError(SyncError):
    """A required setting is absent."""


class AuthError(SyncError):
    """The client-credentials token exchange failed."""

    def __init__(self, message: str, response: Any = None) -> None:
        super().__init__(message)
        self.response = response


class RemoteAPIError(SyncError):
    """An upstream API call failed at the HTTP level or in its payload."""

    def __init__(self, message: str, status_code: int | None = None, body: Any = None) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.body = body


class StorageError(SyncError):
    """A document store read or write failed."""

    def __init__(self, message: str, report=None) -> None:
        super().__init__(message)
        # SyncReport of the writes that landed before the failure, if any
        self.report = report


class InvalidRequestError(SyncError):
    """Caller input that no upstream call could satisfy, such as an empty search query."""
