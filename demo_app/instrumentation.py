"""
File: instrumentation.py
Purpose: Prometheus request metrics (count + latency) backed by an explicit registry.

Exports:
  - RequestMetrics.register(): create http_requests_total / http_request_duration_seconds
  - RequestMetrics.record_count(method, route, status)
  - RequestMetrics.record_latency(method, route, seconds)
  - RequestMetrics.render(): (content_type, payload) for the /metrics endpoint
"""

from typing import Optional, Tuple
from prometheus_client import Counter, Histogram, CollectorRegistry, CONTENT_TYPE_LATEST, generate_latest
from .config import ConfigurationError

REQUESTS_NAME = "http_requests_total"
LATENCY_NAME = "http_request_duration_seconds"

# Same ladder as the Prometheus client default (0.005s .. 10s); scrapers rely on it
LATENCY_BUCKETS = Histogram.DEFAULT_BUCKETS


class RequestMetrics:
    """Request counter and latency histogram registered on one CollectorRegistry.

    Each labelled child keeps its own lock inside prometheus_client, so concurrent
    increments on different (method, route, status) cells never contend on a
    single global lock and no update is lost on the same cell.
    """

    def __init__(self, registry: Optional[CollectorRegistry] = None):
        self.registry = registry if registry is not None else CollectorRegistry(auto_describe=True)
        self.requests: Optional[Counter] = None
        self.latency: Optional[Histogram] = None

    def register(self) -> "RequestMetrics":
        """Create both collectors; a name clash on the registry is a startup error."""
        try:
            self.requests = Counter(
                REQUESTS_NAME,
                "Total HTTP requests",
                labelnames=["method", "route", "status"],
                registry=self.registry,
            )
            self.latency = Histogram(
                LATENCY_NAME,
                "HTTP request duration in seconds",
                labelnames=["method", "route"],
                buckets=LATENCY_BUCKETS,
                registry=self.registry,
            )
        except ValueError as e:
            raise ConfigurationError(f"metric registration failed: {e}") from e
        return self

    @property
    def registered(self) -> bool:
        return self.requests is not None and self.latency is not None

    def record_count(self, method: str, route: str, status) -> None:
        """Increment the request counter for (method, route, status)."""
        if self.requests is None:
            raise ConfigurationError("RequestMetrics.register() was not called")
        self.requests.labels(method=method, route=route, status=str(status)).inc()

    def record_latency(self, method: str, route: str, seconds: float) -> None:
        """Observe one request duration for (method, route)."""
        if self.latency is None:
            raise ConfigurationError("RequestMetrics.register() was not called")
        self.latency.labels(method=method, route=route).observe(seconds)

    def render(self) -> Tuple[str, bytes]:
        """Return (content_type, payload) for a Starlette/FastAPI Response."""
        return CONTENT_TYPE_LATEST, generate_latest(self.registry)
