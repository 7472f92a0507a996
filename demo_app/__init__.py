"""demo-app: canned HTTP routes behind Prometheus metrics and OpenTelemetry tracing."""

__version__ = "1.0.0"
