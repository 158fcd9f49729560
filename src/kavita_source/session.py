"""Session manager for coordinating Kavita authentication."""

import logging
import threading
import time
from typing import Any, Callable, Mapping

import httpx

from kavita_source.exceptions import AuthenticationError, ConfigurationError
from kavita_source.models import Session
from kavita_source.storage import API_KEY_KEY, URL_KEY, USER_KEY, Storage
from kavita_source.tokens import decode_expiry

logger = logging.getLogger(__name__)

LOGIN_PATH = "api/Account/login"
REFRESH_PATH = "api/Account/refresh-token"


class SessionManager:
    """Coordinates authentication and provides bearer headers for Kavita requests."""

    def __init__(
        self,
        storage: Storage | None = None,
        transport: httpx.Client | None = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._storage = storage or Storage()
        self._transport = transport or httpx.Client(timeout=30.0)
        self._clock = clock
        self._lock = threading.Lock()
        self._site: str | None = None
        self._api_key: str | None = None
        self._session: Session | None = None

    @property
    def base_url(self) -> str:
        """The configured server URL, always ending with a single '/'."""
        if not self._site:
            self._site = self._storage.get(URL_KEY)
        if not self._site:
            raise ConfigurationError("Must configure a valid URL")
        return self._site.rstrip("/") + "/"

    @property
    def api_key(self) -> str:
        if not self._api_key:
            self._api_key = self._storage.get(API_KEY_KEY)
        if not self._api_key:
            raise ConfigurationError("Must enter a valid api key")
        return self._api_key

    @property
    def session(self) -> Session | None:
        return self._session

    def get_authorized_headers(self, extra_headers: Mapping[str, str] | None = None) -> dict[str, str]:
        """Return extra_headers plus a valid ``Authorization: Bearer`` entry."""
        with self._lock:
            api_key = self.api_key
            base_url = self.base_url

            if self._session is None:
                self._session = Session.from_dict(self._storage.get(USER_KEY))
                if self._session is not None:
                    logger.debug("Loaded cached session from storage")

            if self._session is None:
                self._session = self._login(base_url, api_key)
                self._storage.set(USER_KEY, self._session.to_dict())

            if decode_expiry(self._session.token) <= self._clock():
                self._refresh(base_url, self._session)
                self._storage.set(USER_KEY, self._session.to_dict())

            token = self._session.token

        headers = dict(extra_headers or {})
        headers["Authorization"] = f"Bearer {token}"
        return headers

    def _post_json(self, url: str, payload: dict[str, Any], failure: str) -> Any:
        try:
            response = self._transport.post(
                url,
                json=payload,
                headers={"Content-Type": "application/json"},
            )
        except httpx.HTTPError as e:
            raise AuthenticationError(f"{failure}: {e}") from e

        if not response.is_success:
            raise AuthenticationError(f"{failure}: HTTP {response.status_code}")

        try:
            return response.json()
        except ValueError as e:
            raise AuthenticationError(f"{failure}: malformed response") from e

    def _login(self, base_url: str, api_key: str) -> Session:
        logger.debug("Logging into %s with API key", base_url)
        data = self._post_json(
            f"{base_url}{LOGIN_PATH}",
            {"username": "", "password": "", "apiKey": api_key},
            "Unable to log into kavita",
        )

        session = Session.from_dict(data)
        if session is None:
            raise AuthenticationError("Unable to log into kavita: no token returned")
        return session

    def _refresh(self, base_url: str, session: Session) -> None:
        logger.debug("Session token expired, refreshing")
        data = self._post_json(
            f"{base_url}{REFRESH_PATH}",
            {"token": session.token, "refreshToken": session.refresh_token},
            "Unable to refresh kavita session",
        )

        refreshed = Session.from_dict(data)
        if refreshed is None:
            raise AuthenticationError("Unable to refresh kavita session: no token returned")
        session.token = refreshed.token
        session.refresh_token = refreshed.refresh_token
