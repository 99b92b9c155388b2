"""Prometheus metrics for the EigenDA client."""

from prometheus_client import Counter, Histogram, Gauge, start_http_server, CollectorRegistry

REGISTRY = CollectorRegistry()

# Disperser request metrics
disperser_requests = Counter(
    'eigenda_client_requests_total',
    'Disperser requests',
    ['method', 'status'],  # DisperseBlob, GetBlobStatus, RetrieveBlob; success, failure
    registry=REGISTRY,
)

disperser_latency = Histogram(
    'eigenda_client_request_latency_seconds',
    'Disperser request latency',
    ['method'],
    buckets=[0.05, 0.1, 0.5, 1.0, 2.0, 5.0, 10.0, 30.0, 60.0],
    registry=REGISTRY,
)

blob_states = Counter(
    'eigenda_client_blob_states_total',
    'Blob states observed in disperser responses',
    ['state'],  # PROCESSING, CONFIRMED, FAILED, OTHER
    registry=REGISTRY,
)

parse_failures = Counter(
    'eigenda_client_parse_failures_total',
    'Disperser responses that could not be parsed',
    ['kind'],  # response, status
    registry=REGISTRY,
)

# Cache metrics
cache_lookups = Counter(
    'eigenda_client_cache_lookups_total',
    'Response cache lookups',
    ['result'],  # hit, miss
    registry=REGISTRY,
)

cache_evictions = Counter(
    'eigenda_client_cache_evictions_total',
    'Responses evicted from the cache',
    registry=REGISTRY,
)

cache_size = Gauge(
    'eigenda_client_cache_size',
    'Responses currently cached',
    registry=REGISTRY,
)


class MetricsCollector:
    """Centralized metrics collection for the client."""

    def __init__(self, registry: CollectorRegistry = REGISTRY):
        self.registry = registry
        self.port = None

    def start_server(self, port: int = 9090):
        """Expose the registry over HTTP."""
        start_http_server(port, registry=self.registry)
        self.port = port

    def record_request(self, method: str, status: str, latency: float):
        """Record a disperser request."""
        disperser_requests.labels(method=method, status=status).inc()
        disperser_latency.labels(method=method).observe(latency)

    def record_blob_state(self, state: str):
        blob_states.labels(state=state).inc()

    def record_parse_failure(self, kind: str):
        parse_failures.labels(kind=kind).inc()

    def record_cache_lookup(self, hit: bool):
        cache_lookups.labels(result="hit" if hit else "miss").inc()

    def record_cache_eviction(self):
        cache_evictions.inc()

    def update_cache_size(self, size: int):
        cache_size.set(size)


# Global metrics collector instance
metrics = MetricsCollector()
