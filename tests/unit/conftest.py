"""
Pytest configuration for unit tests.

Disables telemetry export.
"""

import os


def pytest_configure(config):
    """Configure telemetry for unit tests."""
    # get_tracer()/get_meter() then return the OpenTelemetry no-op defaults
    os.environ["ACCESS_TELEMETRY_ENABLED"] = "false"
