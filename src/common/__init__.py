"""
Shared infrastructure for the access status service.

Provides LLM provider adapters, log sanitization and telemetry helpers.
"""
