"""
File: logging_setup.py
Purpose: Structured JSON logs carrying the service name and the active trace/span ids.
"""

import logging
from pythonjsonlogger import jsonlogger
from opentelemetry import trace

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s %(service)s %(otelTraceId)s %(otelSpanId)s"


class TraceIdFilter(logging.Filter):
    """Stamp records with the current span's ids ("0" outside a request span)."""

    def __init__(self, service: str = "demo-app"):
        super().__init__()
        self.service = service

    def filter(self, record):
        ctx = trace.get_current_span().get_span_context()
        record.service = self.service
        record.otelTraceId = format(ctx.trace_id, '032x') if ctx.is_valid else "0"
        record.otelSpanId = format(ctx.span_id, '016x') if ctx.is_valid else "0"
        return True


def configure_logging(level: str = "INFO", service: str = "demo-app") -> None:
    """Send root and uvicorn logs through one JSON handler on stderr."""
    handler = logging.StreamHandler()
    handler.setFormatter(jsonlogger.JsonFormatter(LOG_FORMAT))
    handler.addFilter(TraceIdFilter(service))

    root = logging.getLogger()
    root.setLevel(level)
    root.handlers = [handler]

    # uvicorn installs its own plain-text handlers; let records reach the root instead
    for name in ("uvicorn", "uvicorn.error", "uvicorn.access"):
        logger = logging.getLogger(name)
        logger.handlers = []
        logger.propagate = True
