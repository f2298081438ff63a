"""High-level Reddit client entrypoints."""
from .client import AuthenticatedClient, RedditClient
from .config import ClientConfig, Request
from .exceptions import ApiError, DecodeError, RedditError, StatusError, TransportError
from .ids import post_id_from_context, split_id
from .metrics import MetricsSink, NullMetrics, PrometheusMetrics

__all__ = [
    "RedditClient",
    "AuthenticatedClient",
    "ClientConfig",
    "Request",
    "RedditError",
    "ApiError",
    "StatusError",
    "TransportError",
    "DecodeError",
    "MetricsSink",
    "NullMetrics",
    "PrometheusMetrics",
    "split_id",
    "post_id_from_context",
]
