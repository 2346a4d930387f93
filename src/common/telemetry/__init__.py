"""
Telemetry for the access status service.

Provides OpenTelemetry instrumentation for:
- Request tracing (spans)
- Metrics (counters, histograms)

Usage:
    from src.common.telemetry import init_telemetry, get_tracer, get_access_metrics

    # Initialize at application startup
    init_telemetry(service_name="access-status", otlp_endpoint="http://localhost:4317")

    with trace_span("access.process", {"query_length": len(query)}) as span:
        ...
"""

from src.common.telemetry.metrics import AccessMetrics, get_access_metrics
from src.common.telemetry.setup import (
    TelemetryConfig,
    get_meter,
    get_tracer,
    init_telemetry,
    is_telemetry_enabled,
    shutdown_telemetry,
)
from src.common.telemetry.tracing import add_span_event, record_exception, trace_span

__all__ = [
    # Setup
    "init_telemetry",
    "shutdown_telemetry",
    "get_tracer",
    "get_meter",
    "is_telemetry_enabled",
    "TelemetryConfig",
    # Metrics
    "AccessMetrics",
    "get_access_metrics",
    # Tracing
    "trace_span",
    "add_span_event",
    "record_exception",
]
