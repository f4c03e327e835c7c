"""
Prometheus metrics for cache performance, upstream provider health and
merged-route degradation. Exposed via the /metrics mount for scraping.
"""

from prometheus_client import Counter, Histogram

# Cache metrics
cache_hits_total = Counter(
    "recipe_gateway_cache_hits_total",
    "Total cache hits",
    ["operation"],  # merged, categories, search, recipe, filter
)
cache_misses_total = Counter(
    "recipe_gateway_cache_misses_total",
    "Total cache misses",
    ["operation"],
)
cache_invalidations_total = Counter(
    "recipe_gateway_cache_invalidations_total",
    "Cache entries removed by prefix invalidation",
    ["prefix"],
)

# Response time histograms (seconds)
local_store_duration_seconds = Histogram(
    "recipe_gateway_local_store_duration_seconds",
    "Local recipe store read duration in seconds",
    buckets=(0.001, 0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0),
)
upstream_duration_seconds = Histogram(
    "recipe_gateway_upstream_duration_seconds",
    "Upstream provider call duration in seconds",
    ["provider"],
    buckets=(0.05, 0.1, 0.25, 0.5, 1.0, 2.0, 3.0, 5.0, 10.0),
)

# Upstream success/failure
upstream_calls_total = Counter(
    "recipe_gateway_upstream_calls_total",
    "Upstream provider calls by status",
    ["provider", "operation", "status"],  # success/failure
)

merged_degraded_total = Counter(
    "recipe_gateway_merged_degraded_total",
    "Merged responses that fell back to local recipes only",
)


def record_cache_hit(operation: str) -> None:
    cache_hits_total.labels(operation=operation).inc()


def record_cache_miss(operation: str) -> None:
    cache_misses_total.labels(operation=operation).inc()


def record_cache_invalidation(prefix: str, removed: int) -> None:
    cache_invalidations_total.labels(prefix=prefix).inc(removed)


def record_local_store_duration(seconds: float) -> None:
    local_store_duration_seconds.observe(seconds)


def record_upstream_call(
    provider: str, operation: str, success: bool, seconds: float
) -> None:
    """Record one upstream call's outcome and latency."""
    status = "success" if success else "failure"
    upstream_calls_total.labels(
        provider=provider, operation=operation, status=status
    ).inc()
    upstream_duration_seconds.labels(provider=provider).observe(seconds)


def record_merged_degraded() -> None:
    merged_degraded_total.inc()
