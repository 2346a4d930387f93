"""Substance access status lookup: resolve, cache and enrich per-country access data."""

__version__ = "0.1.0"
