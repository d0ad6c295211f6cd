"""Microsoft Graph helper that lists the target mailbox's messages."""

from __future__ import annotations

import logging
from urllib.parse import quote

import requests

from .config import GRAPH_CREDENTIALS, Settings
from .fetcher import RecordFetcher
from .models import MailRecord
from .token_cache import TokenCache

logger = logging.getLogger(__name__)


class GraphMailFetcher(RecordFetcher):
    """Fetch one page of messages for the configured mailbox."""

    PROVIDER = "Graph"
    GRAPH_BASE = "https://graph.microsoft.com/v1.0"
    SELECT_FIELDS = "id,subject,from,receivedDateTime,bodyPreview"

    def __init__(
        self,
        settings: Settings,
        token_cache: TokenCache,
        session: requests.Session | None = None,
    ) -> None:
        super().__init__(settings, session)
        self.token_cache = token_cache

    def fetch(self, query: str | None = None, language: str | None = None) -> list[MailRecord]:
        """Return normalized messages; query and language do not apply to mail."""
        self.settings.require(*GRAPH_CREDENTIALS, "target_user_email")

        token = self.token_cache.get_access_token()
        url = f"{self.GRAPH_BASE}{self._messages_root()}/messages"
        params = {
            "$top": self.settings.graph_page_size,
            "$select": self.SELECT_FIELDS,
        }
        logger.debug("Fetching Graph messages page %s", url)
        _, payload = self._get_json(
            url, headers={"Authorization": f"Bearer {token}"}, params=params
        )

        records: list[MailRecord] = []
        for raw in payload.get("value") or []:
            if not raw.get("id"):
                logger.warning("Skipping Graph message without id: %s", raw)
                continue
            records.append(self._to_record(raw))
        return records

    def _messages_root(self) -> str:
        mailbox = quote(self.settings.target_user_email, safe="")
        return f"/users/{mailbox}"

    @staticmethod
    def _to_record(raw: dict) -> MailRecord:
        sender = (raw.get("from") or {}).get("emailAddress") or {}
        return MailRecord(
            id=raw["id"],
            subject=raw.get("subject") or None,
            sender_address=sender.get("address") or None,
            received_at=raw.get("receivedDateTime") or None,
            preview=raw.get("bodyPreview") or None,
        )
