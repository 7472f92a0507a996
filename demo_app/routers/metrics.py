"""
File: routers/metrics.py
Purpose: Prometheus metrics endpoint.
"""

from fastapi import APIRouter, Request, Response

router = APIRouter()

@router.get("/metrics")
def metrics(request: Request) -> Response:
    """Expose the app's Prometheus registry in text format."""
    content_type, payload = request.app.state.metrics.render()
    return Response(payload, media_type=content_type)
