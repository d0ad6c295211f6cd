"""Entry point: run the HTTP server or a single sync/cleanup from the shell."""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path

# Ensure project root is on sys.path when running as a script
PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

import uvicorn

from mailnews_sync.app import create_app
from mailnews_sync.config import Settings
from mailnews_sync.errors import SyncError
from mailnews_sync.sync_service import build_service

logger = logging.getLogger("mailnews_sync.cli")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Sync Outlook mail and news articles into the document store.")
    sub = parser.add_subparsers(dest="command")

    serve = sub.add_parser("serve", help="Run the HTTP API (default)")
    serve.add_argument("--host", help="Bind address (defaults to HOST)")
    serve.add_argument("--port", type=int, help="Listen port (defaults to PORT)")

    sub.add_parser("sync-emails", help="Store the latest messages of TARGET_USER_EMAIL")

    articles = sub.add_parser("sync-articles", help="Search the news API and store the results")
    articles.add_argument("query", help="Free-text search query")
    articles.add_argument("--lang", help="Language filter (defaults to DEFAULT_LANGUAGE)")

    sub.add_parser("cleanup-articles", help="Delete articles older than RETENTION_DAYS")
    return parser


def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
    )


def serve(settings: Settings, host: str | None, port: int | None) -> None:
    host = host or settings.host
    port = port or settings.port
    logger.info("Server listening on %s:%s", host, port)
    uvicorn.run(create_app(settings), host=host, port=port, log_level=settings.log_level.lower())


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    settings = Settings()
    configure_logging(settings.log_level)

    if args.command in (None, "serve"):
        serve(settings, getattr(args, "host", None), getattr(args, "port", None))
        return 0

    service = build_service(settings)
    try:
        if args.command == "sync-emails":
            result = service.sync_emails().as_dict()
        elif args.command == "sync-articles":
            result = service.sync_articles(args.query, args.lang).as_dict()
        else:
            result = {"deleted": service.cleanup_articles()}
    except SyncError as exc:
        logger.error("%s failed: %s", args.command, exc)
        return 1
    finally:
        service.store.close()

    print(json.dumps(result))
    return 0


if __name__ == "__main__":
    sys.exit(main())
