"""HTTP execution primitive shared by every Reddit API call."""

from __future__ import annotations

import logging
import time

import requests
from requests import Response, Session

from .config import ClientConfig, Request
from .exceptions import ApiError, StatusError, TransportError
from .metrics import API_CALLS, API_ERRORS, API_LATENCY, SAMPLE_RATE, MetricsSink
from .models import ErrorResponse

logger = logging.getLogger(__name__)


def ensure_success(response: Response) -> None:
    """Raise `ApiError` or `StatusError` unless the response is a plain 200."""

    if response.status_code == 200:
        return
    error = ErrorResponse.parse(response.content)
    if error is None:
        raise StatusError(
            f"error from reddit: {response.status_code}",
            status_code=response.status_code,
            details=response.text[:200],
        )
    raise ApiError(error, status_code=response.status_code)


def perform(
    session: Session,
    request: Request,
    *,
    config: ClientConfig,
    metrics: MetricsSink,
) -> bytes:
    """Execute ``request`` and return the raw body of a 200 response.

    Every call that reaches the server is counted and timed under the
    request's tags; transport failures and non-200 answers are also counted
    as errors. Nothing is retried.
    """

    request.validate()
    headers = request.prepare_headers(config.resolved_headers())

    start = time.perf_counter()
    try:
        response = session.request(
            method=request.method,
            url=request.url,
            params=request.query or None,
            data=request.body or None,
            headers=headers,
            timeout=config.timeout,
            verify=config.verify_ssl,
        )
    except requests.RequestException as exc:
        metrics.incr(API_ERRORS, request.tags, SAMPLE_RATE)
        reason = str(exc).strip() or exc.__class__.__name__
        logger.warning("Reddit request %s %s failed: %s", request.method, request.url, reason)
        raise TransportError(f"Failed to communicate with Reddit: {reason}", cause=exc) from exc

    elapsed_ms = int((time.perf_counter() - start) * 1000)
    metrics.incr(API_CALLS, request.tags, SAMPLE_RATE)
    metrics.histogram(API_LATENCY, float(elapsed_ms), request.tags, SAMPLE_RATE)

    if response.status_code != 200:
        metrics.incr(API_ERRORS, request.tags, SAMPLE_RATE)
        logger.warning(
            "Reddit request %s %s returned status %s",
            request.method,
            request.url,
            response.status_code,
        )
    ensure_success(response)
    return response.content
