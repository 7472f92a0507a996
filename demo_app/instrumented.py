"""
File: instrumented.py
Purpose: Per-route request instrumentation: latency + count metrics and an optional server span.

Usage:
    instrumentor = Instrumentor(metrics, tracer=handle.tracer)
    app.add_route("/slow", instrumentor.wrap("slow", slow))
"""

import inspect
import time
from typing import Optional

from opentelemetry import context as otel_context
from opentelemetry import trace
from opentelemetry.propagate import extract
from opentelemetry.trace import SpanKind, Status, StatusCode, Tracer
from starlette.datastructures import Headers
from starlette.routing import request_response
from starlette.types import ASGIApp, Receive, Scope, Send

from .instrumentation import RequestMetrics
from .recorder import StatusRecorder


class InstrumentedHandler:
    """ASGI app that measures and traces every call of the wrapped handler.

    The response is never altered: the handler writes through a StatusRecorder,
    and the recorded status is the single value used for both the metrics labels
    and the span outcome. Handler exceptions propagate unchanged; metrics and
    span finalization still run.
    """

    def __init__(self, route: str, app: ASGIApp, metrics: RequestMetrics, tracer: Optional[Tracer] = None):
        self.route = route
        self.app = app
        self.metrics = metrics
        self.tracer = tracer

    def _start_span(self, scope: Scope, method: str):
        parent = extract(Headers(scope=scope))
        span = self.tracer.start_span(
            f"{method} {self.route}",
            context=parent,
            kind=SpanKind.SERVER,
            attributes={
                "http.method": method,
                "http.route": self.route,
                "http.target": scope.get("path", ""),
            },
        )
        return span, trace.set_span_in_context(span, parent)

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        method = scope.get("method", "GET")
        start = time.perf_counter()
        recorder = StatusRecorder(send)

        span = None
        token = None
        if self.tracer is not None:
            span, ctx = self._start_span(scope, method)
            # visible to the handler as request.state.otel_context
            scope.setdefault("state", {})["otel_context"] = ctx
            token = otel_context.attach(ctx)

        try:
            await self.app(scope, receive, recorder)
        except Exception as exc:
            # nothing reached the client yet; the server answers 500
            if not recorder.started:
                recorder.set_status(500)
            if span is not None:
                span.record_exception(exc)
            raise
        finally:
            elapsed = time.perf_counter() - start
            status = recorder.get_recorded_status()
            try:
                self.metrics.record_latency(method, self.route, elapsed)
                self.metrics.record_count(method, self.route, status)
            finally:
                if span is not None:
                    self._finish_span(span, status)
                    otel_context.detach(token)

    @staticmethod
    def _finish_span(span, status: int) -> None:
        span.set_attribute("http.status_code", status)
        if status >= 500:
            span.set_status(Status(StatusCode.ERROR, "server error"))
        else:
            span.set_status(Status(StatusCode.OK))
        span.end()


class Instrumentor:
    """Holds the injected metrics registry and tracer; wraps route handlers."""

    def __init__(self, metrics: RequestMetrics, tracer: Optional[Tracer] = None):
        self.metrics = metrics
        self.tracer = tracer

    def wrap(self, route: str, handler) -> InstrumentedHandler:
        """Wrap a request function (`async def h(request)`) or an ASGI app object under a fixed route label.

        Plain functions are treated as request handlers, the way Starlette routes treat them.
        """
        if inspect.isfunction(handler) or inspect.ismethod(handler):
            handler = request_response(handler)
        return InstrumentedHandler(route, handler, self.metrics, self.tracer)
