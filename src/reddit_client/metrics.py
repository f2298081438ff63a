"""Telemetry sink abstraction and the metric names the client emits."""

from __future__ import annotations

from collections.abc import Sequence
from threading import Lock
from typing import Protocol
from weakref import WeakKeyDictionary

from prometheus_client import REGISTRY, CollectorRegistry, Counter, Histogram

API_CALLS = "reddit.api.calls"
API_LATENCY = "reddit.api.latency"
API_ERRORS = "reddit.api.errors"
CONNECTIONS_REUSED = "reddit.api.connections.reused"
CONNECTIONS_CREATED = "reddit.api.connections.created"
CONNECTIONS_IDLE_TIME = "reddit.api.connections.idle_time"

SAMPLE_RATE = 0.1


class MetricsSink(Protocol):
    """Statsd-style sink: counters and histograms with tags and a sample rate."""

    def incr(self, name: str, tags: Sequence[str], rate: float) -> None:
        ...

    def histogram(self, name: str, value: float, tags: Sequence[str], rate: float) -> None:
        ...


class NullMetrics:
    """Discard every metric."""

    def incr(self, name: str, tags: Sequence[str], rate: float) -> None:
        return None

    def histogram(self, name: str, value: float, tags: Sequence[str], rate: float) -> None:
        return None


# Milliseconds, covering fast keep-alive hits through slow token refreshes.
LATENCY_BUCKETS_MS = (5, 10, 25, 50, 100, 250, 500, 1000, 2500, 5000, 10000)


def endpoint_label(tags: Sequence[str]) -> str:
    for tag in tags:
        if tag.startswith("url:"):
            return tag[len("url:"):]
    return ""


class PrometheusMetrics:
    """Expose client metrics through ``prometheus_client``.

    Dotted names become underscored metric names, and the ``url:`` tag
    becomes the ``endpoint`` label. Prometheus aggregates in-process, so the
    sample rate is ignored. Collectors are registered once per registry, so
    any number of sinks may share one registry.
    """

    def __init__(self, registry: CollectorRegistry = REGISTRY) -> None:
        self._counters, self._histograms = _collectors_for(registry)

    def incr(self, name: str, tags: Sequence[str], rate: float) -> None:
        self._counters[name].labels(endpoint=endpoint_label(tags)).inc()

    def histogram(self, name: str, value: float, tags: Sequence[str], rate: float) -> None:
        self._histograms[name].labels(endpoint=endpoint_label(tags)).observe(value)


_Collectors = tuple[dict[str, Counter], dict[str, Histogram]]

_registered: WeakKeyDictionary[CollectorRegistry, _Collectors] = WeakKeyDictionary()
_registered_lock = Lock()


def _collectors_for(registry: CollectorRegistry) -> _Collectors:
    with _registered_lock:
        collectors = _registered.get(registry)
        if collectors is None:
            collectors = _build_collectors(registry)
            _registered[registry] = collectors
        return collectors


def _build_collectors(registry: CollectorRegistry) -> _Collectors:
    counters = {
        name: Counter(
            _metric_name(name),
            f"Reddit client counter {name}",
            ["endpoint"],
            registry=registry,
        )
        for name in (API_CALLS, API_ERRORS, CONNECTIONS_REUSED, CONNECTIONS_CREATED)
    }
    histograms = {
        name: Histogram(
            f"{_metric_name(name)}_ms",
            f"Reddit client histogram {name} in milliseconds",
            ["endpoint"],
            buckets=LATENCY_BUCKETS_MS,
            registry=registry,
        )
        for name in (API_LATENCY, CONNECTIONS_IDLE_TIME)
    }
    return counters, histograms


def _metric_name(name: str) -> str:
    return name.replace(".", "_")
