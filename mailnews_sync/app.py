"""HTTP surface of the sync backend."""

from __future__ import annotations

import logging
from typing import Any, Optional

from fastapi import FastAPI, Query, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse, PlainTextResponse
from pydantic import BaseModel

from .config import Settings
from .errors import (
    AuthError,
    ConfigError,
    InvalidRequestError,
    RemoteAPIError,
    StorageError,
    SyncError,
)
from .sync_service import SyncService, build_service

logger = logging.getLogger(__name__)

LIVENESS_MESSAGE = "Mail/news sync backend is running"


class ArticleIn(BaseModel):
    title: Optional[str] = None
    content: Optional[str] = None


def _error(http_status: int, kind: str, detail: str, **extra: Any) -> JSONResponse:
    return JSONResponse(status_code=http_status, content={"error": kind, "detail": detail, **extra})


def create_app(settings: Settings | None = None, service: SyncService | None = None) -> FastAPI:
    """Build the FastAPI app around one shared SyncService."""
    settings = settings or Settings()
    service = service or build_service(settings)

    app = FastAPI(title="mailnews-sync")
    app.state.service = service

    @app.exception_handler(ConfigError)
    async def _config_error(request: Request, exc: ConfigError) -> JSONResponse:
        logger.warning("%s %s rejected: %s", request.method, request.url.path, exc)
        return _error(400, "config", str(exc))

    @app.exception_handler(InvalidRequestError)
    async def _invalid_request(request: Request, exc: InvalidRequestError) -> JSONResponse:
        logger.warning("%s %s rejected: %s", request.method, request.url.path, exc)
        return _error(400, "validation", str(exc))

    @app.exception_handler(AuthError)
    async def _auth_error(request: Request, exc: AuthError) -> JSONResponse:
        logger.error("%s %s failed during token exchange: %s", request.method, request.url.path, exc)
        return _error(500, "auth", str(exc), response=exc.response)

    @app.exception_handler(RemoteAPIError)
    async def _remote_error(request: Request, exc: RemoteAPIError) -> JSONResponse:
        logger.error("%s %s failed upstream: %s", request.method, request.url.path, exc)
        return _error(500, "remote_api", str(exc), upstream_status=exc.status_code, body=exc.body)

    @app.exception_handler(StorageError)
    async def _storage_error(request: Request, exc: StorageError) -> JSONResponse:
        logger.error("%s %s failed in storage: %s", request.method, request.url.path, exc)
        extra = {}
        if exc.report is not None:
            extra = {"attempted": exc.report.attempted, "written": exc.report.written}
        return _error(500, "storage", str(exc), **extra)

    @app.exception_handler(SyncError)
    async def _sync_error(request: Request, exc: SyncError) -> JSONResponse:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc)
        return _error(500, "internal", str(exc))

    @app.exception_handler(RequestValidationError)
    async def _validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
        return _error(400, "validation", "Invalid request", errors=jsonable_errors(exc))

    @app.get("/", response_class=PlainTextResponse)
    def liveness() -> str:
        return LIVENESS_MESSAGE

    @app.get("/sync-emails")
    def sync_emails() -> dict:
        return service.sync_emails().as_dict()

    @app.get("/sync-articles")
    def sync_articles(
        q: Optional[str] = Query(None, description="Free-text news search query"),
        lang: Optional[str] = Query(None, description="Language filter, defaults to DEFAULT_LANGUAGE"),
    ):
        if not q or not q.strip():
            return _error(400, "validation", "Query parameter 'q' is required.")
        return service.sync_articles(q.strip(), lang or settings.default_language).as_dict()

    @app.post("/articles", status_code=201)
    def create_article(article: ArticleIn):
        if not (article.title and article.title.strip()) or not (
            article.content and article.content.strip()
        ):
            return _error(400, "validation", "Both 'title' and 'content' are required.")
        return {"id": service.create_article(article.title, article.content)}

    @app.get("/articles/{doc_id}")
    def get_article(doc_id: str):
        document = service.get_article(doc_id)
        if document is None:
            return _error(404, "not_found", f"Article {doc_id} does not exist.")
        return {"id": doc_id, **document}

    @app.post("/cleanup-articles")
    def cleanup_articles() -> dict:
        return {"deleted": service.cleanup_articles()}

    return app


def jsonable_errors(exc: RequestValidationError) -> list[dict]:
    """Validation errors reduced to their JSON-safe location and message."""
    return [{"loc": list(err.get("loc", ())), "msg": err.get("msg")} for err in exc.errors()]
