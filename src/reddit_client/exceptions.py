"""Custom exception hierarchy for the Reddit client."""
from __future__ import annotations

from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:  # pragma: no cover - import-time guard
    from .models import ErrorResponse


class RedditError(RuntimeError):
    """Base error for Reddit API failures."""

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        details: Any | None = None,
    ) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.details = details


class RequestBuildError(RedditError):
    """Raised when a request description is missing its method or URL."""


class TransportError(RedditError):
    """Raised when the HTTP round trip itself fails (DNS, TLS, connection)."""

    def __init__(self, message: str, *, cause: BaseException) -> None:
        super().__init__(message, details=str(cause))
        self.cause = cause


class ApiError(RedditError):
    """Raised for non-200 responses carrying a structured error body."""

    def __init__(self, response: ErrorResponse, *, status_code: int) -> None:
        if response.error and response.message:
            text = f"reddit error {response.error}: {response.message}"
        else:
            text = f"reddit error: {response.error or response.message}"
        super().__init__(
            text,
            status_code=status_code,
            details=response,
        )
        self.response = response
        self.error = response.error
        self.error_message = response.message


class StatusError(RedditError):
    """Raised for non-200 responses whose body could not be understood."""


class DecodeError(RedditError):
    """Raised when a successful response body does not match its expected shape."""
