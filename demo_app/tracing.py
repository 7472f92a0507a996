"""
File: tracing.py
Purpose: OpenTelemetry tracer provider lifecycle (OTLP/HTTP exporter, batching, bounded shutdown).

Usage:
    handle = init_tracing("tempo:4318", service_name="demo-app")
    with handle.tracer.start_as_current_span("work"):
        ...
    handle.shutdown(timeout=5.0)   # never blocks longer than timeout
"""

import logging
import threading
from typing import Optional
from urllib.parse import urlsplit, urlunsplit

from opentelemetry.exporter.otlp.proto.http.trace_exporter import OTLPSpanExporter
from opentelemetry.sdk.resources import Resource, SERVICE_NAME
from opentelemetry.sdk.trace import TracerProvider, SpanProcessor
from opentelemetry.sdk.trace.export import BatchSpanProcessor, SpanExporter

from .config import ConfigurationError

log = logging.getLogger(__name__)

TRACES_PATH = "/v1/traces"


def normalize_endpoint(endpoint: str) -> str:
    """Turn 'host:port' or an http(s) URL into a full OTLP/HTTP traces URL."""
    raw = (endpoint or "").strip()
    if not raw or any(c.isspace() for c in raw):
        raise ConfigurationError(f"invalid OTLP endpoint: {endpoint!r}")
    # bare host:port means plain HTTP (collector inside the docker network)
    if "://" not in raw:
        raw = f"http://{raw}"
    parts = urlsplit(raw)
    if parts.scheme not in ("http", "https"):
        raise ConfigurationError(f"unsupported OTLP endpoint scheme: {parts.scheme!r}")
    try:
        parts.port
    except ValueError as e:
        raise ConfigurationError(f"invalid OTLP endpoint port: {endpoint!r}") from e
    if not parts.hostname:
        raise ConfigurationError(f"OTLP endpoint has no host: {endpoint!r}")
    path = parts.path if parts.path not in ("", "/") else TRACES_PATH
    return urlunsplit((parts.scheme, parts.netloc, path, parts.query, ""))


class TracingHandle:
    """Owns a TracerProvider: hands out the tracer and shuts the pipeline down once."""

    def __init__(self, provider: TracerProvider, service_name: str):
        self.provider = provider
        self.service_name = service_name
        self.tracer = provider.get_tracer(service_name)
        self._lock = threading.Lock()
        self._closed = False
        self._drain_error: Optional[BaseException] = None

    @property
    def closed(self) -> bool:
        return self._closed

    def _drain(self, timeout_millis: int) -> None:
        try:
            self.provider.force_flush(timeout_millis=timeout_millis)
            self.provider.shutdown()
        except Exception as e:
            self._drain_error = e
            log.exception("trace provider shutdown failed")

    def shutdown(self, timeout: float = 5.0) -> bool:
        """Flush buffered spans and stop the exporter, waiting at most `timeout` seconds.

        Returns True when draining finished in time. On timeout the drain thread is
        abandoned (daemon) together with whatever spans it still holds.
        """
        with self._lock:
            if self._closed:
                return True
            self._closed = True

        worker = threading.Thread(
            target=self._drain,
            args=(max(int(timeout * 1000), 0),),
            name="otel-shutdown",
            daemon=True,
        )
        worker.start()
        worker.join(max(timeout, 0.0))
        if worker.is_alive():
            log.warning("trace exporter shutdown timed out; dropping unexported spans",
                        extra={"timeout_secs": timeout})
            return False
        if self._drain_error is not None:
            return False
        log.info("trace exporter shut down", extra={"service": self.service_name})
        return True


def init_tracing(
    endpoint: str,
    service_name: str,
    *,
    export_timeout: float = 5.0,
    exporter: Optional[SpanExporter] = None,
    span_processor: Optional[SpanProcessor] = None,
) -> TracingHandle:
    """Build the tracer provider; no network I/O happens here.

    An unreachable collector only shows up later as dropped exports inside the
    batch processor, never as a request failure.
    """
    url = normalize_endpoint(endpoint)
    resource = Resource.create({SERVICE_NAME: service_name})
    # lifecycle is owned by TracingHandle.shutdown, not by an atexit hook
    provider = TracerProvider(resource=resource, shutdown_on_exit=False)

    if span_processor is None:
        if exporter is None:
            exporter = OTLPSpanExporter(endpoint=url, timeout=export_timeout)
        span_processor = BatchSpanProcessor(
            exporter,
            export_timeout_millis=int(export_timeout * 1000),
        )
    provider.add_span_processor(span_processor)

    log.info("tracing initialized", extra={"service": service_name, "endpoint": url})
    return TracingHandle(provider, service_name)
