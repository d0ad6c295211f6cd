"""Shared fixtures: isolated settings, a temp document store, fake clock and HTTP."""

from __future__ import annotations

from datetime import UTC, datetime, timedelta
from pathlib import Path
from unittest.mock import MagicMock

import pytest

from mailnews_sync.config import Settings
from mailnews_sync.document_store import DocumentStore

ENV_VARS = (
    "CLIENT_ID",
    "CLIENT_SECRET",
    "TENANT_ID",
    "TARGET_USER_EMAIL",
    "NEWS_API_KEY",
    "NEWS_API_BASE_URL",
    "DEFAULT_LANGUAGE",
    "RETENTION_DAYS",
    "DATABASE_PATH",
    "GRAPH_PAGE_SIZE",
    "HTTP_TIMEOUT",
    "HOST",
    "PORT",
)

FULL_CONFIG = {
    "CLIENT_ID": "client-id",
    "CLIENT_SECRET": "client-secret",
    "TENANT_ID": "tenant-id",
    "TARGET_USER_EMAIL": "reports@example.com",
    "NEWS_API_KEY": "news-key",
}


class FakeClock:
    """Manually advanced UTC clock."""

    def __init__(self, now: datetime | None = None) -> None:
        self.now = now or datetime(2026, 3, 1, 12, 0, tzinfo=UTC)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now += timedelta(**kwargs)


@pytest.fixture(autouse=True)
def _isolated_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def make_settings(tmp_path: Path):
    def _make(**overrides) -> Settings:
        values = {**FULL_CONFIG, "DATABASE_PATH": str(tmp_path / "documents.db")}
        values.update(overrides)
        values = {key: value for key, value in values.items() if value is not None}
        return Settings(_env_file=None, **values)

    return _make


@pytest.fixture
def settings(make_settings) -> Settings:
    return make_settings()


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def store(tmp_path: Path):
    document_store = DocumentStore(tmp_path / "store" / "documents.db")
    yield document_store
    document_store.close()


def make_response(status_code: int = 200, payload=None, text: str = "") -> MagicMock:
    response = MagicMock(status_code=status_code, text=text)
    if payload is None:
        response.json.side_effect = ValueError("no json")
    else:
        response.json.return_value = payload
    return response


@pytest.fixture
def session() -> MagicMock:
    return MagicMock()


@pytest.fixture
def respond():
    return make_response
