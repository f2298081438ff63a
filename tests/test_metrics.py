import threading

from prometheus_client import CollectorRegistry

from reddit_client.metrics import (
    API_CALLS,
    API_LATENCY,
    SAMPLE_RATE,
    NullMetrics,
    PrometheusMetrics,
    endpoint_label,
)


def test_prometheus_metrics_counts_by_endpoint():
    registry = CollectorRegistry()
    sink = PrometheusMetrics(registry)

    sink.incr(API_CALLS, ["url:/api/v1/me"], SAMPLE_RATE)
    sink.incr(API_CALLS, ["url:/api/v1/me"], SAMPLE_RATE)
    sink.incr(API_CALLS, [], SAMPLE_RATE)

    assert registry.get_sample_value("reddit_api_calls_total", {"endpoint": "/api/v1/me"}) == 2.0
    assert registry.get_sample_value("reddit_api_calls_total", {"endpoint": ""}) == 1.0


def test_prometheus_metrics_observes_histograms():
    registry = CollectorRegistry()
    sink = PrometheusMetrics(registry)

    sink.histogram(API_LATENCY, 42.0, ["url:/api/v1/me"], SAMPLE_RATE)

    labels = {"endpoint": "/api/v1/me"}
    assert registry.get_sample_value("reddit_api_latency_ms_count", labels) == 1.0
    assert registry.get_sample_value("reddit_api_latency_ms_sum", labels) == 42.0


def test_endpoint_label_uses_url_tag():
    assert endpoint_label(["env:prod", "url:/message/inbox"]) == "/message/inbox"
    assert endpoint_label(["env:prod"]) == ""


def test_null_metrics_accepts_everything():
    sink = NullMetrics()

    sink.incr(API_CALLS, ["url:/x"], SAMPLE_RATE)
    sink.histogram(API_LATENCY, 1.0, [], SAMPLE_RATE)


def test_sinks_share_collectors_per_registry():
    registry = CollectorRegistry()
    first = PrometheusMetrics(registry)
    second = PrometheusMetrics(registry)

    first.incr(API_CALLS, ["url:/api/v1/me"], SAMPLE_RATE)
    second.incr(API_CALLS, ["url:/api/v1/me"], SAMPLE_RATE)

    assert registry.get_sample_value("reddit_api_calls_total", {"endpoint": "/api/v1/me"}) == 2.0


def test_default_registry_sinks_can_coexist():
    PrometheusMetrics().incr(API_CALLS, ["url:/api/v1/me"], SAMPLE_RATE)
    PrometheusMetrics().incr(API_CALLS, ["url:/api/v1/me"], SAMPLE_RATE)


def test_concurrent_first_use_registers_once():
    registry = CollectorRegistry()
    barrier = threading.Barrier(8)
    errors = []

    def worker():
        barrier.wait()
        try:
            PrometheusMetrics(registry).incr(API_CALLS, ["url:/api/v1/me"], SAMPLE_RATE)
        except Exception as exc:  # pragma: no cover - surfaced by the assertion
            errors.append(exc)

    threads = [threading.Thread(target=worker) for _ in range(8)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert errors == []
    assert registry.get_sample_value("reddit_api_calls_total", {"endpoint": "/api/v1/me"}) == 8.0


def test_collectors_are_registered_up_front():
    registry = CollectorRegistry()

    PrometheusMetrics(registry)

    assert registry.get_sample_value("reddit_api_latency_ms_count", {"endpoint": ""}) is None
    names = {metric.name for metric in registry.collect()}
    assert {"reddit_api_calls", "reddit_api_connections_idle_time_ms"} <= names
