"""
File: tests/conftest.py
Purpose: Shared fixtures: isolated metrics registry, in-memory span exporter, app + client.
"""

import pytest
from fastapi.testclient import TestClient
from opentelemetry.sdk.trace.export import SimpleSpanProcessor
from opentelemetry.sdk.trace.export.in_memory_span_exporter import InMemorySpanExporter

from demo_app.config import Settings
from demo_app.instrumentation import RequestMetrics
from demo_app.main import create_app
from demo_app.tracing import init_tracing


@pytest.fixture
def settings():
    return Settings(TRACING_ENABLED=False, LOG_LEVEL="WARNING", SLOW_MIN_MS=100, SLOW_MAX_MS=1500)


@pytest.fixture
def metrics():
    return RequestMetrics().register()


@pytest.fixture
def span_exporter():
    return InMemorySpanExporter()


@pytest.fixture
def tracing(span_exporter):
    handle = init_tracing("localhost:4318", "demo-app-test", span_processor=SimpleSpanProcessor(span_exporter))
    yield handle
    handle.shutdown(timeout=1.0)


@pytest.fixture
def app(settings, metrics, tracing):
    return create_app(settings, metrics=metrics, tracing=tracing)


@pytest.fixture
def client(app):
    # no context manager: lifespan (logging setup, tracer shutdown) stays out of the way
    return TestClient(app)


def sample(metrics, name, **labels):
    """Read one sample from the registry, 0.0 when the cell does not exist yet."""
    value = metrics.registry.get_sample_value(name, labels)
    return value if value is not None else 0.0
