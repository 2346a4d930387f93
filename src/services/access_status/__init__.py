"""
Access Status Service

Resolves free-form substance queries ("molly", "magic mushrooms") to a
substance name and reports its legal or medical access status per country.
Results are cached per (substance, country) and refreshed on demand.

Usage:
    # As a service
    python -m src.services.access_status --port 8000

    # Programmatic
    from src.services.access_status import AccessOrchestrator, load_config
"""

__version__ = "0.1.0"

from .config import AccessServiceConfig, load_config
from .core.models import (
    AccessStatus,
    PipelineState,
    ResolvedEntity,
    ResultEnvelope,
    ResultSource,
    StatusRecord,
)
from .core.orchestrator import AccessOrchestrator
from .errors import AccessStatusError

__all__ = [
    "AccessOrchestrator",
    "AccessServiceConfig",
    "AccessStatus",
    "AccessStatusError",
    "PipelineState",
    "ResolvedEntity",
    "ResultEnvelope",
    "ResultSource",
    "StatusRecord",
    "load_config",
]
