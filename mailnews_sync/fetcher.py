"""Read-only upstream fetcher contract."""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Any, Sequence

import requests
from requests import Response

from .config import Settings
from .errors import RemoteAPIError

logger = logging.getLogger(__name__)


class RecordFetcher(ABC):
    """Turn a remote query into normalized records.

    Calls are single-attempt with a bounded timeout; any failure surfaces as
    :class:`RemoteAPIError` and nothing is retried.
    """

    PROVIDER = "upstream"

    def __init__(self, settings: Settings, session: requests.Session | None = None) -> None:
        self.settings = settings
        self.session = session or requests.Session()
        self.timeout = settings.http_timeout

    @abstractmethod
    def fetch(self, query: str | None = None, language: str | None = None) -> Sequence[Any]:
        """Return the records matching ``query``; empty when upstream has none."""

    def _get_json(
        self, url: str, *, headers: dict, params: dict | None = None
    ) -> tuple[int, dict]:
        """GET ``url`` and return the HTTP status with the decoded JSON object."""
        try:
            resp = self.session.get(url, headers=headers, params=params, timeout=self.timeout)
        except requests.RequestException as exc:
            logger.error("%s request to %s failed: %s", self.PROVIDER, url, exc)
            raise RemoteAPIError(f"{self.PROVIDER} request failed: {exc}") from exc

        body = self._parse_response_body(resp)
        if resp.status_code >= 400:
            logger.error("%s request failed (%s): %s", self.PROVIDER, resp.status_code, body)
            raise RemoteAPIError(
                f"{self.PROVIDER} API returned HTTP {resp.status_code}",
                status_code=resp.status_code,
                body=body,
            )
        if not isinstance(body, dict):
            raise RemoteAPIError(
                f"{self.PROVIDER} API returned an unexpected payload",
                status_code=resp.status_code,
                body=body,
            )
        return resp.status_code, body

    @staticmethod
    def _parse_response_body(response: Response) -> dict | str:
        try:
            return response.json()
        except ValueError:
            return response.text
