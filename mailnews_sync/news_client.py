"""News search client (NewsAPI ``/everything`` endpoint)."""

from __future__ import annotations

import logging

from .errors import InvalidRequestError, RemoteAPIError
from .fetcher import RecordFetcher
from .models import ArticleRecord
from .utils import article_id_from_url

logger = logging.getLogger(__name__)


class NewsApiFetcher(RecordFetcher):
    """Search recent articles and normalize them into ArticleRecords."""

    PROVIDER = "NewsAPI"
    SORT_ORDER = "publishedAt"
    UNKNOWN_SOURCE = "Unknown"

    def fetch(self, query: str | None = None, language: str | None = None) -> list[ArticleRecord]:
        self.settings.require("news_api_key")
        if not query:
            raise InvalidRequestError("A search query is required to fetch articles.")

        language = language or self.settings.default_language
        url = f"{self.settings.news_api_base_url}/everything"
        params = {"q": query, "language": language, "sortBy": self.SORT_ORDER}
        headers = {"X-Api-Key": self.settings.news_api_key}

        logger.debug("Searching %s for %r (language=%s)", self.PROVIDER, query, language)
        http_status, payload = self._get_json(url, headers=headers, params=params)

        # NewsAPI reports some failures in the body rather than the HTTP status.
        status = payload.get("status")
        if status is not None and status != "ok":
            logger.error("%s reported status %r: %s", self.PROVIDER, status, payload)
            raise RemoteAPIError(
                f"{self.PROVIDER} error {payload.get('code') or status}: {payload.get('message')}",
                status_code=http_status,
                body=payload,
            )

        records: list[ArticleRecord] = []
        for raw in payload.get("articles") or []:
            if not raw.get("url"):
                logger.warning("Skipping article without url: %s", raw.get("title"))
                continue
            records.append(self._to_record(raw, query=query, language=language))
        return records

    @classmethod
    def _to_record(cls, raw: dict, *, query: str, language: str) -> ArticleRecord:
        source = (raw.get("source") or {}).get("name")
        return ArticleRecord(
            id=article_id_from_url(raw["url"]),
            url=raw["url"],
            source=source or cls.UNKNOWN_SOURCE,
            title=raw.get("title") or None,
            description=raw.get("description") or None,
            published_at=raw.get("publishedAt") or None,
            language=language,
            query_tag=query,
        )
