"""
File: tests/test_tracing.py
Purpose: Endpoint validation, non-blocking init and bounded-time shutdown of the trace pipeline.
"""

import time

import pytest
from opentelemetry.sdk.trace.export import BatchSpanProcessor, SpanExporter, SpanExportResult
from opentelemetry.sdk.trace.export.in_memory_span_exporter import InMemorySpanExporter

from demo_app.config import ConfigurationError
from demo_app.tracing import init_tracing, normalize_endpoint

# private address nothing listens on
UNROUTABLE = "10.255.255.1:4318"


class StallingExporter(SpanExporter):
    """Exporter whose every export hangs well past any shutdown budget."""

    def __init__(self, stall: float = 3.0):
        self.stall = stall

    def export(self, spans):
        time.sleep(self.stall)
        return SpanExportResult.SUCCESS

    def shutdown(self):
        pass


@pytest.mark.parametrize("raw, expected", [
    ("tempo:4318", "http://tempo:4318/v1/traces"),
    ("http://tempo:4318", "http://tempo:4318/v1/traces"),
    ("http://tempo:4318/", "http://tempo:4318/v1/traces"),
    ("https://collector.example.com/otlp/v1/traces", "https://collector.example.com/otlp/v1/traces"),
])
def test_normalize_endpoint(raw, expected):
    assert normalize_endpoint(raw) == expected


@pytest.mark.parametrize("raw", ["", "   ", "ftp://tempo:4318", "tempo:port", "http://", "tempo 4318"])
def test_invalid_endpoint_is_configuration_error(raw):
    with pytest.raises(ConfigurationError):
        init_tracing(raw, "demo-app-test")


def test_init_does_not_touch_the_network():
    """Building the pipeline against an unreachable collector returns immediately."""
    start = time.monotonic()
    handle = init_tracing(UNROUTABLE, "demo-app-test", export_timeout=1.0)
    assert time.monotonic() - start < 1.0
    with handle.tracer.start_as_current_span("probe"):
        pass
    handle.shutdown(timeout=0.2)


def test_shutdown_flushes_buffered_spans():
    """Spans still sitting in the batch buffer are exported by shutdown."""
    exporter = InMemorySpanExporter()
    processor = BatchSpanProcessor(exporter, schedule_delay_millis=60_000)
    handle = init_tracing("localhost:4318", "demo-app-test", span_processor=processor)
    for i in range(3):
        with handle.tracer.start_as_current_span(f"span-{i}"):
            pass

    assert handle.shutdown(timeout=5.0) is True
    assert sorted(s.name for s in exporter.get_finished_spans()) == ["span-0", "span-1", "span-2"]
    assert handle.closed is True


def test_shutdown_is_bounded_when_export_stalls():
    """A hung exporter costs at most the timeout, then shutdown gives up."""
    processor = BatchSpanProcessor(StallingExporter(stall=3.0), schedule_delay_millis=60_000)
    handle = init_tracing("localhost:4318", "demo-app-test", span_processor=processor)
    for _ in range(5):
        with handle.tracer.start_as_current_span("buffered"):
            pass

    start = time.monotonic()
    ok = handle.shutdown(timeout=0.3)
    elapsed = time.monotonic() - start
    assert ok is False
    assert elapsed < 0.3 + 0.5


def test_shutdown_is_bounded_with_unroutable_collector():
    """Real OTLP exporter pointed nowhere: shutdown still returns by the deadline."""
    handle = init_tracing(UNROUTABLE, "demo-app-test", export_timeout=10.0)
    for _ in range(20):
        with handle.tracer.start_as_current_span("lost"):
            pass

    start = time.monotonic()
    handle.shutdown(timeout=0.5)
    assert time.monotonic() - start < 0.5 + 0.5


def test_second_shutdown_is_a_noop():
    handle = init_tracing("localhost:4318", "demo-app-test", span_processor=BatchSpanProcessor(InMemorySpanExporter()))
    assert handle.shutdown(timeout=1.0) is True
    start = time.monotonic()
    assert handle.shutdown(timeout=1.0) is True
    assert time.monotonic() - start < 0.1
