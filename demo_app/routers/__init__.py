"""Router registry for demo-app (demo routes and Prometheus metrics)."""

from .demo import register_demo_routes
from .metrics import router as metrics_router

__all__ = ["register_demo_routes", "metrics_router"]
