"""Process-wide bearer token cache for the Microsoft Graph client-credentials flow."""

from __future__ import annotations

import json
import logging
import threading
from datetime import datetime, timedelta
from typing import Any, Callable

import msal
import requests

from .config import GRAPH_CREDENTIALS, Settings
from .errors import AuthError
from .models import CachedToken
from .utils import utcnow

logger = logging.getLogger(__name__)


class TokenCache:
    """Hold one cached Graph token and refresh it lazily.

    A cache hit does no I/O. On a miss the client-credentials exchange runs
    through ``msal``; a failed exchange raises :class:`AuthError` and keeps
    whatever token was cached before.
    """

    GRAPH_SCOPE = ["https://graph.microsoft.com/.default"]
    SAFETY_MARGIN = timedelta(seconds=60)
    DEFAULT_LIFETIME = 3600

    def __init__(
        self,
        settings: Settings,
        app: Any = None,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        self.settings = settings
        self._app = app
        self._clock = clock
        self._token: CachedToken | None = None
        self._refresh_lock = threading.Lock()

    @property
    def cached(self) -> CachedToken | None:
        return self._token

    def get_access_token(self) -> str:
        """Return a usable bearer token, exchanging credentials if needed."""
        token = self._token
        if token and token.is_usable(self._clock(), self.SAFETY_MARGIN):
            return token.value

        # Single-flight: callers that raced past the check reuse the winner's token.
        with self._refresh_lock:
            token = self._token
            if token and token.is_usable(self._clock(), self.SAFETY_MARGIN):
                return token.value
            return self._refresh().value

    def _refresh(self) -> CachedToken:
        self.settings.require(*GRAPH_CREDENTIALS)
        requested_at = self._clock()
        try:
            result = self._client().acquire_token_for_client(scopes=self.GRAPH_SCOPE)
        except (requests.RequestException, ValueError) as exc:
            logger.error("Graph token exchange failed: %s", exc)
            raise AuthError(f"Unable to obtain Graph token: {exc}") from exc

        if not result or "access_token" not in result:
            logger.error("Graph token exchange returned no token: %s", result)
            raise AuthError(
                f"Unable to obtain Graph token: {json.dumps(result, default=str)}",
                response=result,
            )

        lifetime = int(result.get("expires_in") or self.DEFAULT_LIFETIME)
        token = CachedToken(
            value=result["access_token"],
            expires_at=requested_at + timedelta(seconds=lifetime),
        )
        self._token = token
        logger.debug("Cached Graph token valid until %s", token.expires_at)
        return token

    def _client(self):
        if self._app is None:
            self._app = msal.ConfidentialClientApplication(
                client_id=self.settings.client_id,
                client_credential=self.settings.client_secret,
                authority=self.settings.authority_url,
            )
        return self._app
