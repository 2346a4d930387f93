"""
Access Status Metrics.

Pre-defined counters for the resolve -> cache -> enrich pipeline:
- Requests by terminal pipeline state
- Cache lookups by result (hit / miss / error)
- Provider output that fell back to a default during parsing
- Best-effort cache writes that failed
"""

from __future__ import annotations

import logging

from src.common.telemetry.setup import get_meter

logger = logging.getLogger(__name__)


class AccessMetrics:
    """
    Metrics for access status request processing.

    Instruments are created from the global meter, so they are no-ops
    until telemetry is initialized.
    """

    def __init__(self, meter_name: str = "access-status"):
        """Initialize access status metrics."""
        self._meter = get_meter(meter_name)

        self._requests_total = self._meter.create_counter(
            name="access_requests_total",
            description="Pipeline runs by terminal state",
            unit="1",
        )

        self._cache_lookups_total = self._meter.create_counter(
            name="access_cache_lookups_total",
            description="Cache lookups by result",
            unit="1",
        )

        self._parse_fallbacks_total = self._meter.create_counter(
            name="access_parse_fallbacks_total",
            description="Provider responses replaced by a fallback value",
            unit="1",
        )

        self._persist_failures_total = self._meter.create_counter(
            name="access_persist_failures_total",
            description="Failed best-effort cache writes",
            unit="1",
        )

        self._records_enriched = self._meter.create_histogram(
            name="access_records_enriched",
            description="Status records produced per enrichment call",
            unit="1",
        )

    def record_request(self, state: str, source: str | None = None) -> None:
        """Record a completed pipeline run."""
        attrs = {"state": state}
        if source:
            attrs["source"] = source
        self._requests_total.add(1, attrs)

    def record_cache_lookup(self, result: str) -> None:
        """Record a cache lookup ("hit", "miss" or "error")."""
        self._cache_lookups_total.add(1, {"result": result})

    def record_parse_fallback(self, context: str) -> None:
        """Record a parse that fell back to its default."""
        self._parse_fallbacks_total.add(1, {"context": context or "unknown"})

    def record_persist_failure(self) -> None:
        """Record a failed cache write."""
        self._persist_failures_total.add(1)

    def record_enrichment(self, record_count: int) -> None:
        """Record how many status records an enrichment call produced."""
        self._records_enriched.record(record_count)


_access_metrics: AccessMetrics | None = None


def get_access_metrics() -> AccessMetrics:
    """Get the process-wide AccessMetrics instance."""
    global _access_metrics
    if _access_metrics is None:
        _access_metrics = AccessMetrics()
    return _access_metrics
