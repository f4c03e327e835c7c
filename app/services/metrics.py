"""
Per-request timing for local store reads vs upstream provider fan-out.
Uses contextvars for request-scoped state (async-safe).
"""
import logging
import time
from contextvars import ContextVar
from dataclasses import dataclass

from app.services import prometheus_metrics

logger = logging.getLogger(__name__)

# Request-scoped metrics (reset per request)
_request_metrics_var: ContextVar["RequestMetrics | None"] = ContextVar(
    "request_metrics", default=None
)


@dataclass
class RequestMetrics:
    """Metrics for a single request (local store and upstream timings)."""

    local_ms: float = 0.0
    upstream_ms: float = 0.0
    cache_hits: int = 0
    cache_misses: int = 0


def start_request_metrics() -> None:
    """Start tracking metrics for a new request."""
    _request_metrics_var.set(RequestMetrics())


def record_local(elapsed_ms: float) -> None:
    """Record a local store read duration."""
    m = _request_metrics_var.get()
    if m is not None:
        m.local_ms += elapsed_ms


def record_upstream(elapsed_ms: float) -> None:
    """Record the wall-clock duration of an upstream fan-out."""
    m = _request_metrics_var.get()
    if m is not None:
        m.upstream_ms += elapsed_ms


def record_cache_lookup(operation: str, hit: bool) -> None:
    """Record a cache lookup for the current request and in Prometheus."""
    m = _request_metrics_var.get()
    if hit:
        if m is not None:
            m.cache_hits += 1
        prometheus_metrics.record_cache_hit(operation)
    else:
        if m is not None:
            m.cache_misses += 1
        prometheus_metrics.record_cache_miss(operation)


def finish_request_metrics() -> None:
    """Fold the current request's metrics into the process aggregate."""
    m = _request_metrics_var.get()
    if m is not None:
        aggregate_metrics.record(
            m.local_ms,
            m.upstream_ms,
            cache_hits=m.cache_hits,
            cache_misses=m.cache_misses,
        )


def timed_local() -> "_TimedContext":
    """Context manager to time a local store read and record it."""
    return _TimedContext(is_local=True)


def timed_upstream() -> "_TimedContext":
    """Context manager to time an upstream call (or a joined group of calls)."""
    return _TimedContext(is_local=False)


class _TimedContext:
    """Context manager that measures elapsed time and records to metrics."""

    def __init__(self, *, is_local: bool) -> None:
        self._is_local = is_local
        self._start: float = 0.0

    def __enter__(self) -> "_TimedContext":
        self._start = time.perf_counter()
        return self

    def __exit__(self, *args: object) -> None:
        elapsed = (time.perf_counter() - self._start) * 1000
        if self._is_local:
            record_local(elapsed)
            prometheus_metrics.record_local_store_duration(elapsed / 1000)
        else:
            record_upstream(elapsed)


@dataclass
class AggregateMetrics:
    """Aggregate metrics across all requests (for /api/metrics endpoint)."""

    local_count: int = 0
    upstream_count: int = 0
    local_total_ms: float = 0.0
    upstream_total_ms: float = 0.0
    cache_hits: int = 0
    cache_misses: int = 0

    def record(
        self,
        local_ms: float,
        upstream_ms: float,
        cache_hits: int = 0,
        cache_misses: int = 0,
    ) -> None:
        if local_ms > 0:
            self.local_count += 1
            self.local_total_ms += local_ms
        if upstream_ms > 0:
            self.upstream_count += 1
            self.upstream_total_ms += upstream_ms
        self.cache_hits += cache_hits
        self.cache_misses += cache_misses
        if local_ms > 0 or upstream_ms > 0 or cache_hits > 0 or cache_misses > 0:
            logger.debug(
                "Request metrics: local=%.2fms upstream=%.2fms hits=%d misses=%d",
                local_ms,
                upstream_ms,
                cache_hits,
                cache_misses,
            )

    def to_dict(self) -> dict:
        total_cache_ops = self.cache_hits + self.cache_misses
        hit_rate = (
            round(100 * self.cache_hits / total_cache_ops, 2)
            if total_cache_ops > 0
            else 0
        )
        return {
            "local": {
                "count": self.local_count,
                "total_ms": round(self.local_total_ms, 2),
                "avg_ms": round(self.local_total_ms / self.local_count, 2)
                if self.local_count > 0
                else 0,
            },
            "upstream": {
                "count": self.upstream_count,
                "total_ms": round(self.upstream_total_ms, 2),
                "avg_ms": round(self.upstream_total_ms / self.upstream_count, 2)
                if self.upstream_count > 0
                else 0,
            },
            "cache": {
                "hits": self.cache_hits,
                "misses": self.cache_misses,
                "hit_rate_percent": hit_rate,
            },
        }


aggregate_metrics = AggregateMetrics()
