"""
Access Status Exception Hierarchy

All service-specific exceptions inherit from AccessStatusError and carry a
stable machine-readable `code`, which the HTTP layer copies into the
`error` field of failure responses.

Usage:
    from src.services.access_status.errors import CacheTransportError

    try:
        records = await store.lookup(key)
    except CacheTransportError as e:
        logger.error(f"Cache lookup failed: {e}")
"""

from __future__ import annotations


class AccessStatusError(Exception):
    """
    Base exception for all access status errors.

    Attributes:
        message: Human-readable error description
        code: Machine-readable error code for programmatic handling
    """

    code = "access_error"

    def __init__(self, message: str, code: str | None = None) -> None:
        self.message = message
        if code:
            self.code = code
        super().__init__(message)

    def __str__(self) -> str:
        return f"[{self.code}] {self.message}"


class ConfigurationError(AccessStatusError):
    """Configuration value is missing or invalid."""

    code = "config_invalid"


# =============================================================================
# Collaborator failures
# =============================================================================


class ProviderError(AccessStatusError):
    """An inference provider call failed (transport, auth, timeout)."""

    code = "provider_failed"

    def __init__(self, provider: str, reason: str, code: str | None = None) -> None:
        super().__init__(f"{provider} call failed: {reason}", code=code)
        self.provider = provider
        self.reason = reason


class ResolverProviderError(ProviderError):
    """The name-resolution provider call itself errored."""

    code = "resolver_failed"


class EnrichmentProviderError(ProviderError):
    """The enrichment provider call itself errored (not just bad content)."""

    code = "enrichment_failed"


class CacheTransportError(AccessStatusError):
    """The cache store was unreachable or answered with a non-success status."""

    code = "cache_unavailable"

    def __init__(self, operation: str, reason: str, status_code: int | None = None) -> None:
        super().__init__(f"Cache {operation} failed: {reason}")
        self.operation = operation
        self.reason = reason
        self.status_code = status_code
