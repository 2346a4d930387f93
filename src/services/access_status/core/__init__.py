"""
Core access status logic.

Domain logic for resolving substances and producing per-jurisdiction
access status, independent of any transport or storage backend.
"""

from .enricher import StatusEnricher
from .models import (
    AccessStatus,
    PipelineState,
    RefreshResult,
    ResolvedEntity,
    ResultEnvelope,
    ResultSource,
    StatusRecord,
    UpsertResult,
    normalize_key,
)
from .orchestrator import AccessOrchestrator
from .resolver import SubstanceResolver

__all__ = [
    "AccessOrchestrator",
    "AccessStatus",
    "PipelineState",
    "RefreshResult",
    "ResolvedEntity",
    "ResultEnvelope",
    "ResultSource",
    "StatusEnricher",
    "StatusRecord",
    "SubstanceResolver",
    "UpsertResult",
    "normalize_key",
]
