from __future__ import annotations

import pytest

from mailnews_sync.errors import ConfigError, InvalidRequestError, RemoteAPIError
from mailnews_sync.news_client import NewsApiFetcher
from mailnews_sync.utils import article_id_from_url

ARTICLE = {
    "source": {"id": None, "name": "Ziarul Financiar"},
    "author": "Redactia",
    "title": "Dobanda de referinta ramane neschimbata",
    "description": "BNR a mentinut dobanda.",
    "url": "https://www.zf.ro/banci/dobanda-123",
    "publishedAt": "2026-02-28T10:00:00Z",
    "content": "...",
}


def test_fetch_searches_most_recent_first_with_language(settings, session, respond) -> None:
    session.get.return_value = respond(200, {"status": "ok", "articles": []})

    NewsApiFetcher(settings, session=session).fetch("dobanda", "en")

    session.get.assert_called_once_with(
        "https://newsapi.org/v2/everything",
        headers={"X-Api-Key": "news-key"},
        params={"q": "dobanda", "language": "en", "sortBy": "publishedAt"},
        timeout=30.0,
    )


def test_language_defaults_to_configured_language(settings, session, respond) -> None:
    session.get.return_value = respond(200, {"status": "ok", "articles": []})

    NewsApiFetcher(settings, session=session).fetch("dobanda")

    assert session.get.call_args.kwargs["params"]["language"] == "ro"


def test_fetch_maps_articles(settings, session, respond) -> None:
    session.get.return_value = respond(200, {"status": "ok", "totalResults": 1, "articles": [ARTICLE]})

    [record] = NewsApiFetcher(settings, session=session).fetch("dobanda", "ro")

    assert record.id == article_id_from_url(ARTICLE["url"])
    assert record.to_document() == {
        "url": "https://www.zf.ro/banci/dobanda-123",
        "source": "Ziarul Financiar",
        "title": "Dobanda de referinta ramane neschimbata",
        "description": "BNR a mentinut dobanda.",
        "published_at": "2026-02-28T10:00:00Z",
        "language": "ro",
        "query_tag": "dobanda",
    }


def test_missing_source_defaults_to_unknown(settings, session, respond) -> None:
    raw = {"url": "https://example.com/a", "source": None}
    session.get.return_value = respond(200, {"status": "ok", "articles": [raw]})

    [record] = NewsApiFetcher(settings, session=session).fetch("x")

    assert record.source == "Unknown"
    assert record.title is None
    assert record.description is None


def test_articles_without_url_are_skipped(settings, session, respond) -> None:
    articles = [{"title": "no link"}, {"url": "https://example.com/b"}]
    session.get.return_value = respond(200, {"status": "ok", "articles": articles})

    records = NewsApiFetcher(settings, session=session).fetch("x")

    assert [record.url for record in records] == ["https://example.com/b"]


@pytest.mark.parametrize("payload", [{"status": "ok"}, {"status": "ok", "articles": []}])
def test_absent_or_empty_articles_yield_no_records(settings, session, respond, payload) -> None:
    session.get.return_value = respond(200, payload)

    assert NewsApiFetcher(settings, session=session).fetch("x") == []


def test_in_body_error_status_raises(settings, session, respond) -> None:
    body = {"status": "error", "code": "rateLimited", "message": "Too many requests."}
    session.get.return_value = respond(200, body)

    with pytest.raises(RemoteAPIError, match="rateLimited") as excinfo:
        NewsApiFetcher(settings, session=session).fetch("x")

    assert excinfo.value.status_code == 200
    assert excinfo.value.body == body


def test_http_error_status_raises(settings, session, respond) -> None:
    body = {"status": "error", "code": "apiKeyInvalid", "message": "Your API key is invalid."}
    session.get.return_value = respond(401, body)

    with pytest.raises(RemoteAPIError) as excinfo:
        NewsApiFetcher(settings, session=session).fetch("x")

    assert excinfo.value.status_code == 401


def test_missing_api_key_fails_before_any_network_call(make_settings, session) -> None:
    with pytest.raises(ConfigError, match="NEWS_API_KEY"):
        NewsApiFetcher(make_settings(NEWS_API_KEY=None), session=session).fetch("x")

    session.get.assert_not_called()


@pytest.mark.parametrize("query", ["", None])
def test_empty_query_is_rejected_before_any_network_call(settings, session, query) -> None:
    with pytest.raises(InvalidRequestError):
        NewsApiFetcher(settings, session=session).fetch(query)

    session.get.assert_not_called()
