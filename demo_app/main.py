"""
File: main.py
Purpose: Application entrypoint for demo-app. Wires settings, logging, metrics, tracing and routes.
"""

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI

from .config import Settings, get_settings
from .logging_setup import configure_logging
from .instrumentation import RequestMetrics
from .instrumented import Instrumentor
from .tracing import TracingHandle, init_tracing
from .routers import metrics_router, register_demo_routes

log = logging.getLogger("demo_app")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Manage app startup/shutdown lifecycle (flush traces on the way out)."""
    cfg: Settings = app.state.settings
    configure_logging(cfg.LOG_LEVEL, cfg.SERVICE_NAME)
    log.info("demo-app starting", extra={"port": cfg.PORT, "tracing": app.state.tracing is not None})
    yield
    if app.state.tracing is not None:
        app.state.tracing.shutdown(timeout=cfg.TRACE_SHUTDOWN_TIMEOUT_SECS)
    log.info("demo-app stopped")


def create_app(
    settings: Optional[Settings] = None,
    *,
    metrics: Optional[RequestMetrics] = None,
    tracing: Optional[TracingHandle] = None,
) -> FastAPI:
    """Build the app; raises ConfigurationError on bad metric or tracing setup."""
    cfg = settings or get_settings()

    if metrics is None:
        metrics = RequestMetrics()
    if not metrics.registered:
        metrics.register()

    if tracing is None and cfg.TRACING_ENABLED:
        tracing = init_tracing(
            cfg.OTLP_ENDPOINT,
            cfg.SERVICE_NAME,
            export_timeout=cfg.OTLP_TIMEOUT_SECS,
        )

    app = FastAPI(
        title="demo-app",
        version="1.0.0",
        lifespan=lifespan,
    )
    app.state.settings = cfg
    app.state.metrics = metrics
    app.state.tracing = tracing

    instrumentor = Instrumentor(metrics, tracer=tracing.tracer if tracing is not None else None)
    app.include_router(metrics_router, prefix="", tags=["system"])
    register_demo_routes(app, instrumentor)
    return app


if __name__ == "__main__":
    import uvicorn
    cfg = get_settings()
    uvicorn.run("demo_app.main:create_app", factory=True, host=cfg.HOST, port=cfg.PORT, log_level="info")
