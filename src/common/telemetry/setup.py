"""
OpenTelemetry Setup and Configuration.

Handles initialization of tracers, meters, and OTLP exporters.
Until init_telemetry() installs SDK providers, the OpenTelemetry API hands
out its default no-op tracer and meter, so instrumented code runs unchanged
in tests and local runs.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from typing import Any

from opentelemetry import metrics, trace
from opentelemetry.exporter.otlp.proto.grpc.metric_exporter import OTLPMetricExporter
from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import OTLPSpanExporter
from opentelemetry.sdk.metrics import MeterProvider
from opentelemetry.sdk.metrics.export import PeriodicExportingMetricReader
from opentelemetry.sdk.resources import SERVICE_NAME, SERVICE_VERSION, Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor

logger = logging.getLogger(__name__)

TELEMETRY_ENV_VAR = "ACCESS_TELEMETRY_ENABLED"


@dataclass
class TelemetryConfig:
    """Configuration for telemetry setup."""

    # Service identification
    service_name: str = "access-status"
    service_version: str = "0.1.0"
    environment: str = field(default_factory=lambda: os.getenv("ACCESS_ENV", "development"))

    # OTLP exporter settings
    otlp_endpoint: str = field(
        default_factory=lambda: os.getenv("OTEL_EXPORTER_OTLP_ENDPOINT", "http://localhost:4317")
    )
    otlp_insecure: bool = True

    # Feature flags
    tracing_enabled: bool = True
    metrics_enabled: bool = True

    metrics_export_interval_ms: int = 10000

    resource_attributes: dict[str, str] = field(default_factory=dict)


# Global state
_config: TelemetryConfig | None = None
_tracer_provider: Any = None
_meter_provider: Any = None
_telemetry_initialized = False


def _is_telemetry_disabled_by_env() -> bool:
    """Check if telemetry is disabled via environment variable."""
    telemetry_enabled = os.getenv(TELEMETRY_ENV_VAR, "true").lower()
    return telemetry_enabled in ("false", "0", "no", "off")


def init_telemetry(
    service_name: str | None = None,
    otlp_endpoint: str | None = None,
    config: TelemetryConfig | None = None,
) -> bool:
    """
    Initialize OpenTelemetry instrumentation.

    Call this once at application startup. Can be disabled by setting
    ACCESS_TELEMETRY_ENABLED=false.

    Args:
        service_name: Service name for telemetry (overrides config)
        otlp_endpoint: OTLP collector endpoint (overrides config)
        config: Full telemetry configuration

    Returns:
        True if telemetry was initialized, False if disabled or setup failed
    """
    global _telemetry_initialized, _config, _tracer_provider, _meter_provider

    if _telemetry_initialized:
        logger.debug("Telemetry already initialized")
        return _tracer_provider is not None or _meter_provider is not None

    if _is_telemetry_disabled_by_env():
        logger.info(f"Telemetry disabled via {TELEMETRY_ENV_VAR}")
        _telemetry_initialized = True
        return False

    _config = config or TelemetryConfig()
    if service_name:
        _config.service_name = service_name
    if otlp_endpoint:
        _config.otlp_endpoint = otlp_endpoint

    try:
        resource_attrs = {
            SERVICE_NAME: _config.service_name,
            SERVICE_VERSION: _config.service_version,
            "deployment.environment": _config.environment,
        }
        resource_attrs.update(_config.resource_attributes)
        resource = Resource.create(resource_attrs)

        if _config.tracing_enabled:
            _tracer_provider = TracerProvider(resource=resource)
            span_exporter = OTLPSpanExporter(
                endpoint=_config.otlp_endpoint,
                insecure=_config.otlp_insecure,
            )
            _tracer_provider.add_span_processor(BatchSpanProcessor(span_exporter))
            trace.set_tracer_provider(_tracer_provider)
            logger.info(f"Tracing initialized, exporting to {_config.otlp_endpoint}")

        if _config.metrics_enabled:
            metric_exporter = OTLPMetricExporter(
                endpoint=_config.otlp_endpoint,
                insecure=_config.otlp_insecure,
            )
            reader = PeriodicExportingMetricReader(
                metric_exporter,
                export_interval_millis=_config.metrics_export_interval_ms,
            )
            _meter_provider = MeterProvider(resource=resource, metric_readers=[reader])
            metrics.set_meter_provider(_meter_provider)
            logger.info(f"Metrics initialized, exporting to {_config.otlp_endpoint}")

        _telemetry_initialized = True
        return True

    except Exception as e:
        logger.error(f"Failed to initialize telemetry: {e}")
        _telemetry_initialized = True
        return False


def shutdown_telemetry() -> None:
    """
    Shutdown telemetry and flush pending data.

    Call this at application shutdown.
    """
    global _tracer_provider, _meter_provider, _telemetry_initialized

    if not _telemetry_initialized:
        return

    try:
        if _meter_provider:
            _meter_provider.force_flush(timeout_millis=5000)
            _meter_provider.shutdown()
            logger.debug("Meter provider shut down")

        if _tracer_provider:
            _tracer_provider.force_flush(timeout_millis=5000)
            _tracer_provider.shutdown()
            logger.debug("Tracer provider shut down")

    except Exception as e:
        logger.warning(f"Error during telemetry shutdown: {e}")
    finally:
        _tracer_provider = None
        _meter_provider = None
        _telemetry_initialized = False


def get_tracer(name: str = "access-status") -> trace.Tracer:
    """
    Get a tracer for creating spans.

    Args:
        name: Tracer name (typically module or component name)

    Returns:
        OpenTelemetry Tracer (no-op until a provider is installed)
    """
    return trace.get_tracer(name)


def get_meter(name: str = "access-status") -> metrics.Meter:
    """
    Get a meter for creating metrics.

    Args:
        name: Meter name (typically module or component name)

    Returns:
        OpenTelemetry Meter (no-op until a provider is installed)
    """
    return metrics.get_meter(name)


def is_telemetry_enabled() -> bool:
    """Check if SDK providers are installed and exporting."""
    return _telemetry_initialized and (
        _tracer_provider is not None or _meter_provider is not None
    )
