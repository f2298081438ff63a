"""Connection tracing for the shared HTTP transport.

urllib3 owns connection pooling beneath ``requests``. The pool classes here
observe (never alter) checkout and release so the client can report whether a
request got a fresh connection or reused an idle keep-alive one.
"""

from __future__ import annotations

import time
from typing import Any

from requests.adapters import HTTPAdapter
from urllib3 import HTTPConnectionPool, HTTPSConnectionPool, PoolManager, ProxyManager

from .metrics import (
    CONNECTIONS_CREATED,
    CONNECTIONS_IDLE_TIME,
    CONNECTIONS_REUSED,
    SAMPLE_RATE,
    MetricsSink,
)

_RELEASED_AT = "_reddit_released_at"


class ConnectionTrace:
    """Translate connection checkouts into metrics."""

    def __init__(self, metrics: MetricsSink) -> None:
        self._metrics = metrics

    def got_conn(self, *, reused: bool, idle_time: float | None = None) -> None:
        if not reused:
            self._metrics.incr(CONNECTIONS_CREATED, [], SAMPLE_RATE)
            return
        self._metrics.incr(CONNECTIONS_REUSED, [], SAMPLE_RATE)
        if idle_time is not None:
            self._metrics.histogram(
                CONNECTIONS_IDLE_TIME, float(int(idle_time * 1000)), [], SAMPLE_RATE
            )


class _TracedPoolMixin:
    trace: ConnectionTrace | None = None

    def _get_conn(self, timeout: float | None = None) -> Any:
        conn = super()._get_conn(timeout=timeout)  # type: ignore[misc]
        released_at = getattr(conn, _RELEASED_AT, None)
        # A dropped keep-alive connection is closed by urllib3 and reconnects
        # on first use, so it counts as created.
        if released_at is not None and conn.is_connected:
            self._report(reused=True, idle_time=time.monotonic() - released_at)
        else:
            self._report(reused=False)
        return conn

    def _put_conn(self, conn: Any) -> None:
        if conn is not None:
            setattr(conn, _RELEASED_AT, time.monotonic())
        super()._put_conn(conn)  # type: ignore[misc]

    def _report(self, *, reused: bool, idle_time: float | None = None) -> None:
        if self.trace is None:
            return
        self.trace.got_conn(reused=reused, idle_time=idle_time)


class TracedHTTPConnectionPool(_TracedPoolMixin, HTTPConnectionPool):
    pass


class TracedHTTPSConnectionPool(_TracedPoolMixin, HTTPSConnectionPool):
    pass


class _TracingManagerMixin:
    trace: ConnectionTrace

    def _install_trace(self, trace: ConnectionTrace) -> None:
        self.trace = trace
        self.pool_classes_by_scheme = {
            "http": TracedHTTPConnectionPool,
            "https": TracedHTTPSConnectionPool,
        }

    def _new_pool(self, scheme: str, host: str, port: int, request_context: Any = None) -> Any:
        pool = super()._new_pool(scheme, host, port, request_context=request_context)  # type: ignore[misc]
        pool.trace = self.trace
        return pool


class TracingPoolManager(_TracingManagerMixin, PoolManager):
    """PoolManager that builds traced pools and hands them the trace hook."""

    def __init__(self, trace: ConnectionTrace, **kwargs: Any) -> None:
        super().__init__(**kwargs)
        self._install_trace(trace)


class TracingProxyManager(_TracingManagerMixin, ProxyManager):
    """ProxyManager counterpart of `TracingPoolManager`."""

    def __init__(self, trace: ConnectionTrace, proxy_url: str, **kwargs: Any) -> None:
        super().__init__(proxy_url, **kwargs)
        self._install_trace(trace)


class TracingAdapter(HTTPAdapter):
    """Transport adapter that reports connection reuse through ``trace``."""

    def __init__(self, trace: ConnectionTrace, **kwargs: Any) -> None:
        self._trace = trace
        super().__init__(**kwargs)

    def init_poolmanager(self, connections: int, maxsize: int, block: bool = False, **pool_kwargs: Any) -> None:
        self._pool_connections = connections
        self._pool_maxsize = maxsize
        self._pool_block = block
        self.poolmanager = TracingPoolManager(
            self._trace,
            num_pools=connections,
            maxsize=maxsize,
            block=block,
            **pool_kwargs,
        )

    def proxy_manager_for(self, proxy: str, **proxy_kwargs: Any) -> PoolManager:
        # SOCKS proxies keep requests' own manager and go untraced.
        if proxy in self.proxy_manager or proxy.lower().startswith("socks"):
            return super().proxy_manager_for(proxy, **proxy_kwargs)
        manager = TracingProxyManager(
            self._trace,
            proxy,
            proxy_headers=self.proxy_headers(proxy),
            num_pools=self._pool_connections,
            maxsize=self._pool_maxsize,
            block=self._pool_block,
            **proxy_kwargs,
        )
        self.proxy_manager[proxy] = manager
        return manager
