"""Tests for the telemetry module."""

from __future__ import annotations

from unittest.mock import MagicMock, patch

import pytest

from src.common.telemetry import metrics as metrics_module
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


class TestTelemetryConfig:
    """Test TelemetryConfig dataclass."""

    def test_default_config(self) -> None:
        config = TelemetryConfig()

        assert config.service_name == "access-status"
        assert config.tracing_enabled is True
        assert config.metrics_enabled is True

    def test_custom_config(self) -> None:
        config = TelemetryConfig(service_name="custom", otlp_endpoint="http://collector:4317")

        assert config.service_name == "custom"
        assert config.otlp_endpoint == "http://collector:4317"


class TestDisabledTelemetry:
    """Instrumentation must run unchanged when no SDK is installed."""

    def teardown_method(self) -> None:
        shutdown_telemetry()

    def test_init_respects_env_switch(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("ACCESS_TELEMETRY_ENABLED", "false")

        assert init_telemetry(service_name="access-status") is False
        assert is_telemetry_enabled() is False

    def test_tracer_and_meter_are_usable(self) -> None:
        tracer = get_tracer("test")
        meter = get_meter("test")

        with tracer.start_as_current_span("span") as span:
            span.set_attribute("key", "value")
        meter.create_counter("test_counter").add(1)

    def test_trace_span_reraises(self) -> None:
        with pytest.raises(ValueError):
            with trace_span("access.test", {"access.key": "mdma"}):
                raise ValueError("boom")

    def test_span_helpers_without_active_span(self) -> None:
        add_span_event("state.cache_hit", {"key": "mdma"})
        record_exception(RuntimeError("boom"))


class TestRecordException:
    """Tests for record_exception on a recording span."""

    def test_records_on_given_span(self) -> None:
        span = MagicMock()
        span.is_recording.return_value = True
        error = RuntimeError("boom")

        record_exception(error, span)

        span.record_exception.assert_called_once_with(error)
        span.set_status.assert_called_once()

    def test_skips_non_recording_span(self) -> None:
        span = MagicMock()
        span.is_recording.return_value = False

        record_exception(RuntimeError("boom"), span)

        span.record_exception.assert_not_called()


class TestAccessMetrics:
    """Tests for AccessMetrics."""

    def test_records_to_instruments(self) -> None:
        meter = MagicMock()
        with patch.object(metrics_module, "get_meter", return_value=meter):
            access_metrics = AccessMetrics()

        access_metrics.record_request("cache_hit", "cache")
        access_metrics.record_cache_lookup("hit")
        access_metrics.record_parse_fallback("")
        access_metrics.record_persist_failure()
        access_metrics.record_enrichment(193)

        counter = meter.create_counter.return_value
        counter.add.assert_any_call(1, {"state": "cache_hit", "source": "cache"})
        counter.add.assert_any_call(1, {"result": "hit"})
        counter.add.assert_any_call(1, {"context": "unknown"})
        meter.create_histogram.return_value.record.assert_called_once_with(193)

    def test_singleton(self) -> None:
        assert get_access_metrics() is get_access_metrics()
