"""Sync orchestration: fetch from upstream, upsert into storage, sweep old documents."""

from __future__ import annotations

import logging
from datetime import timedelta
from typing import Any

import requests

from .config import GRAPH_CREDENTIALS, Settings
from .document_store import DocumentStore
from .fetcher import RecordFetcher
from .graph_client import GraphMailFetcher
from .models import ArticleRecord, MailRecord, SyncReport
from .news_client import NewsApiFetcher
from .retention import RetentionSweeper
from .token_cache import TokenCache
from .upsert_sink import UpsertSink

logger = logging.getLogger(__name__)


class SyncService:
    """Operations exposed to the request handlers and the CLI."""

    def __init__(
        self,
        settings: Settings,
        store: DocumentStore,
        mail_fetcher: RecordFetcher,
        news_fetcher: RecordFetcher,
        sink: UpsertSink,
        sweeper: RetentionSweeper,
    ) -> None:
        self.settings = settings
        self.store = store
        self.mail_fetcher = mail_fetcher
        self.news_fetcher = news_fetcher
        self.sink = sink
        self.sweeper = sweeper

    def sync_emails(self) -> SyncReport:
        # Checked here too so a missing mailbox is rejected before the token exchange.
        self.settings.require(*GRAPH_CREDENTIALS, "target_user_email")
        messages = self.mail_fetcher.fetch()
        report = self.sink.upsert_all(MailRecord.COLLECTION, messages)
        logger.info("Mail sync complete: attempted=%s written=%s", report.attempted, report.written)
        return report

    def sync_articles(self, query: str, language: str | None = None) -> SyncReport:
        language = language or self.settings.default_language
        articles = self.news_fetcher.fetch(query, language)
        report = self.sink.upsert_all(ArticleRecord.COLLECTION, articles)
        logger.info(
            "Article sync for %r (%s) complete: attempted=%s written=%s",
            query,
            language,
            report.attempted,
            report.written,
        )
        return report

    def create_article(self, title: str, content: str) -> str:
        doc_id = self.sink.insert(
            ArticleRecord.COLLECTION,
            {"title": title, "content": content},
            timestamp_field=ArticleRecord.TIMESTAMP_FIELD,
        )
        logger.info("Created article %s", doc_id)
        return doc_id

    def get_article(self, doc_id: str) -> dict[str, Any] | None:
        return self.store.get(ArticleRecord.COLLECTION, doc_id)

    def cleanup_articles(self) -> int:
        return self.sweeper.sweep(ArticleRecord.COLLECTION, field=ArticleRecord.TIMESTAMP_FIELD)


def build_service(settings: Settings, session: requests.Session | None = None) -> SyncService:
    """Composition root: one store, one token cache, shared by every request."""
    session = session or requests.Session()
    store = DocumentStore(settings.database_path)
    token_cache = TokenCache(settings)
    return SyncService(
        settings=settings,
        store=store,
        mail_fetcher=GraphMailFetcher(settings, token_cache, session=session),
        news_fetcher=NewsApiFetcher(settings, session=session),
        sink=UpsertSink(store),
        sweeper=RetentionSweeper(store, retention=timedelta(days=settings.retention_days)),
    )
