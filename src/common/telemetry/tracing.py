"""
Tracing Utilities.

Provides helpers for distributed tracing around pipeline stages.
"""

from __future__ import annotations

import logging
from collections.abc import Generator
from contextlib import contextmanager
from typing import Any

from opentelemetry import trace
from opentelemetry.trace import Status, StatusCode

from src.common.telemetry.setup import get_tracer

logger = logging.getLogger(__name__)


def record_exception(exception: Exception, span: Any = None) -> None:
    """
    Record an exception on the current or specified span.

    Args:
        exception: The exception to record
        span: Optional span (uses current span if not provided)
    """
    if span is None:
        span = trace.get_current_span()

    if span.is_recording():
        span.record_exception(exception)
        span.set_status(Status(StatusCode.ERROR, str(exception)))


def add_span_event(name: str, attributes: dict[str, Any] | None = None) -> None:
    """
    Add an event to the current span.

    Example:
        add_span_event("cache_hit", {"key": cache_key})
    """
    span = trace.get_current_span()
    if span.is_recording():
        span.add_event(name, attributes or {})


@contextmanager
def trace_span(
    name: str,
    attributes: dict[str, Any] | None = None,
) -> Generator[Any, None, None]:
    """
    Context manager for creating a traced span.

    Args:
        name: Span name (e.g., "access.resolve", "access.enrich")
        attributes: Optional initial span attributes

    Yields:
        The active span

    Example:
        with trace_span("access.enrich", {"entity": key}) as span:
            records = await enricher.enrich(key, jurisdictions)
            span.set_attribute("records.count", len(records))
    """
    tracer = get_tracer()

    with tracer.start_as_current_span(name) as span:
        if attributes:
            span.set_attributes(attributes)
        try:
            yield span
        except Exception as e:
            record_exception(e, span)
            raise
