"""High-level Reddit REST client."""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping
from datetime import datetime, timedelta, timezone
from typing import Any, TypeVar

import requests

from .config import DEFAULT_USER_AGENT, OAUTH_BASE_URL, TOKEN_URL, ClientConfig, Request
from .http import perform
from .metrics import MetricsSink
from .models import MeResponse, MessageListingResponse, RefreshTokenResponse, load_object
from .tracing import ConnectionTrace, TracingAdapter

logger = logging.getLogger(__name__)

T = TypeVar("T")


class RedditClient:
    """Hold application credentials and the shared transport.

    Authenticated sessions are created with `authenticated` and share this
    client's session and metrics sink.
    """

    def __init__(
        self,
        *,
        client_id: str,
        client_secret: str,
        metrics: MetricsSink,
        session: requests.Session | None = None,
        user_agent: str = DEFAULT_USER_AGENT,
        timeout: float | None = None,
        verify_ssl: bool | str = True,
        token_url: str = TOKEN_URL,
        oauth_base_url: str = OAUTH_BASE_URL,
    ) -> None:
        self.config = ClientConfig(
            client_id=client_id,
            client_secret=client_secret,
            token_url=token_url,
            oauth_base_url=oauth_base_url,
            user_agent=user_agent,
            timeout=timeout,
            verify_ssl=verify_ssl,
        )
        self.metrics = metrics
        self._owns_session = session is None
        self._session = session or self._build_session(metrics)

    # Context manager helpers -------------------------------------------------
    def __enter__(self) -> RedditClient:
        return self

    def __exit__(self, exc_type, exc, tb) -> None:  # pragma: no cover - passthrough
        self.close()

    # Public API --------------------------------------------------------------
    def authenticated(self, refresh_token: str, access_token: str) -> AuthenticatedClient:
        return AuthenticatedClient(self, refresh_token=refresh_token, access_token=access_token)

    def request(self, request: Request) -> bytes:
        """Execute a request description and return the 200 response body."""

        logger.info("Reddit request %s %s (tags=%s)", request.method, request.url, request.tags)
        return perform(self._session, request, config=self.config, metrics=self.metrics)

    def close(self) -> None:
        if self._owns_session:
            self._session.close()

    # Internal helpers -------------------------------------------------------
    @staticmethod
    def _build_session(metrics: MetricsSink) -> requests.Session:
        session = requests.Session()
        adapter = TracingAdapter(ConnectionTrace(metrics))
        session.mount("https://", adapter)
        session.mount("http://", adapter)
        return session


class AuthenticatedClient:
    """A user session: the application client plus OAuth tokens.

    The access token is replaced only through `update_tokens`; nothing
    synchronises that with calls already in flight on other threads.
    """

    def __init__(
        self,
        client: RedditClient,
        *,
        refresh_token: str,
        access_token: str,
        expiry: datetime | None = None,
    ) -> None:
        self.client = client
        self.refresh_token = refresh_token
        self.access_token = access_token
        self.expiry = expiry

    def refresh_tokens(self) -> RefreshTokenResponse:
        """Exchange the refresh token for a new access token."""

        config = self.client.config
        request = Request(
            method="POST",
            url=config.token_url,
            body=[
                ("grant_type", "refresh_token"),
                ("refresh_token", self.refresh_token),
            ],
            basic_auth=(config.client_id, config.client_secret),
            tags=["url:/api/v1/access_token"],
        )
        return self._fetch(request, RefreshTokenResponse.from_dict)

    def message_inbox(self, before: str) -> MessageListingResponse:
        """List inbox messages newer than the ``before`` cursor (a fullname)."""

        request = Request(
            method="GET",
            url=self.client.config.oauth_url("/message/inbox.json"),
            query=[("before", before)],
            token=self.access_token,
            tags=["url:/api/v1/message/inbox"],
        )
        return self._fetch(request, MessageListingResponse.from_dict)

    def me(self) -> MeResponse:
        request = Request(
            method="GET",
            url=self.client.config.oauth_url("/api/v1/me"),
            token=self.access_token,
            tags=["url:/api/v1/me"],
        )
        return self._fetch(request, MeResponse.from_dict)

    def update_tokens(self, response: RefreshTokenResponse, *, now: datetime | None = None) -> None:
        """Store the credentials returned by `refresh_tokens`.

        Reddit omits the refresh token from refresh responses unless it
        rotated, so an empty one keeps the current token.
        """

        self.access_token = response.access_token
        if response.refresh_token:
            self.refresh_token = response.refresh_token
        if response.expires_in:
            issued = now or datetime.now(timezone.utc)
            self.expiry = issued + timedelta(seconds=response.expires_in)
        else:
            self.expiry = None

    def _fetch(self, request: Request, decode: Callable[[Mapping[str, Any]], T]) -> T:
        body = self.client.request(request)
        return decode(load_object(body))
