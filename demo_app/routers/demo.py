"""
File: routers/demo.py
Purpose: Canned demo routes (ok / forced error / random delay), registered behind the instrumentor.
"""

import asyncio
import logging
import random

from fastapi import FastAPI
from starlette.requests import Request
from starlette.responses import PlainTextResponse, Response

from ..instrumented import Instrumentor

log = logging.getLogger("demo_app.routes")


async def root(request: Request) -> Response:
    """Return 200 immediately."""
    log.info("ok", extra={"route": "/", "method": request.method})
    return PlainTextResponse("ok\n")


async def error(request: Request) -> Response:
    """Return 500 immediately."""
    log.error("forced_error", extra={"route": "/error", "method": request.method})
    return PlainTextResponse("forced error\n", status_code=500)


async def slow(request: Request) -> Response:
    """Return 200 after a random delay in [SLOW_MIN_MS, SLOW_MAX_MS)."""
    cfg = request.app.state.settings
    low = cfg.SLOW_MIN_MS
    delay_ms = low + random.randrange(max(cfg.SLOW_MAX_MS - low, 1))
    await asyncio.sleep(delay_ms / 1000.0)
    log.info("slow", extra={"route": "/slow", "method": request.method, "delay_ms": delay_ms})
    return PlainTextResponse(f"slow ok ({delay_ms} ms)\n")


# (path, route label, handler)
ROUTES = [
    ("/", "root", root),
    ("/error", "error", error),
    ("/slow", "slow", slow),
]


def register_demo_routes(app: FastAPI, instrumentor: Instrumentor) -> None:
    """Mount every demo route wrapped under its fixed route label."""
    for path, label, handler in ROUTES:
        app.add_route(path, instrumentor.wrap(label, handler), name=label)
