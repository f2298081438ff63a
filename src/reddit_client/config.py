"""Configuration helpers for the Reddit client."""

from __future__ import annotations

from collections.abc import MutableMapping
from dataclasses import dataclass, field

from .auth import AuthStrategy, BasicAuth, BearerAuth
from .exceptions import RequestBuildError

TOKEN_URL = "https://www.reddit.com/api/v1/access_token"
OAUTH_BASE_URL = "https://oauth.reddit.com"
DEFAULT_USER_AGENT = "python:reddit-client:0.1.0"


@dataclass(frozen=True, slots=True)
class ClientConfig:
    """Application credentials and endpoints shared by every request."""

    client_id: str
    client_secret: str
    token_url: str = TOKEN_URL
    oauth_base_url: str = OAUTH_BASE_URL
    user_agent: str = DEFAULT_USER_AGENT
    timeout: float | None = None
    verify_ssl: bool | str = True

    def oauth_url(self, path: str) -> str:
        return f"{self.oauth_base_url.rstrip('/')}/{path.lstrip('/')}"

    def resolved_headers(self) -> dict[str, str]:
        return {
            "Accept": "application/json",
            "User-Agent": self.user_agent,
        }


@dataclass(slots=True)
class Request:
    """Describe a single API call before it is executed.

    ``query`` and ``body`` are ordered key/value pairs so repeated keys and
    their order survive encoding. ``body`` is sent form-encoded. When both
    ``token`` and ``basic_auth`` are set, basic auth is applied last and
    wins the ``Authorization`` header.
    """

    method: str = ""
    url: str = ""
    query: list[tuple[str, str]] = field(default_factory=list)
    body: list[tuple[str, str]] = field(default_factory=list)
    token: str | None = None
    basic_auth: tuple[str, str] | None = None
    tags: list[str] = field(default_factory=list)

    def validate(self) -> None:
        if not self.method:
            raise RequestBuildError("Request method must not be empty")
        if not self.url:
            raise RequestBuildError("Request URL must not be empty")

    def auth_strategies(self) -> list[AuthStrategy]:
        strategies: list[AuthStrategy] = []
        if self.token:
            strategies.append(BearerAuth(self.token))
        if self.basic_auth:
            strategies.append(BasicAuth(*self.basic_auth))
        return strategies

    def prepare_headers(self, headers: MutableMapping[str, str]) -> MutableMapping[str, str]:
        for strategy in self.auth_strategies():
            strategy.apply(headers)
        return headers
