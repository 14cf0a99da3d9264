"""Prometheus metrics for stylecast.

Cache effectiveness, resolution latency, fallback and store error counts.
"""

from prometheus_client import REGISTRY, CollectorRegistry, Counter, Histogram, generate_latest

# Cache metrics
CACHE_HITS = Counter(
    "stylecast_cache_hits_total",
    "Total number of fresh cache reads",
    labelnames=["cache"],
)

CACHE_MISSES = Counter(
    "stylecast_cache_misses_total",
    "Total number of cache reads that found no fresh entry",
    labelnames=["cache"],
)

CACHE_EVICTIONS = Counter(
    "stylecast_cache_evictions_total",
    "Entries removed from a cache",
    labelnames=["cache", "reason"],
)

# Resolution metrics
RESOLUTION_LATENCY = Histogram(
    "stylecast_resolution_latency_seconds",
    "Latency of a cache-miss resolution",
    labelnames=["resolver", "operation"],
    buckets=(0.001, 0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5),
)

FALLBACKS = Counter(
    "stylecast_fallbacks_total",
    "Resolutions served from built-in defaults",
    labelnames=["resolver", "reason"],
)

MALFORMED_FRAGMENTS = Counter(
    "stylecast_malformed_fragments_total",
    "Fragments skipped during merge because their payload was unusable",
)

# Store metrics
STORE_ERRORS = Counter(
    "stylecast_store_errors_total",
    "Failed record store round-trips",
    labelnames=["operation"],
)


def render_metrics(registry: CollectorRegistry = REGISTRY) -> bytes:
    """Serialize metrics in the Prometheus text exposition format."""
    return generate_latest(registry)
