"""
Access Status Models

Data classes for resolution results, cached status records and the
response envelope.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any


class AccessStatus(str, Enum):
    """Access status of a substance in one jurisdiction."""

    APPROVED_MEDICAL_USE = "Approved Medical Use"
    BANNED = "Banned"
    LIMITED_ACCESS_TRIALS = "Limited Access Trials"
    UNKNOWN = "Unknown"

    @classmethod
    def coerce(cls, value: Any) -> AccessStatus:
        """
        Map provider text to a status, defaulting to UNKNOWN.

        Matching ignores case, spaces, underscores and hyphens, so
        "approved_medical_use" and "ApprovedMedicalUse" both match.
        """
        if isinstance(value, cls):
            return value
        if not isinstance(value, str):
            return cls.UNKNOWN
        squashed = _squash(value)
        for status in cls:
            if _squash(status.value) == squashed:
                return status
        return cls.UNKNOWN


def _squash(text: str) -> str:
    return re.sub(r"[\s_\-]+", "", text).lower()


class ResultSource(str, Enum):
    """Where the records in a successful envelope came from."""

    CACHE = "cache"
    FRESH = "freshly-computed"
    NONE = "none"


class PipelineState(str, Enum):
    """States of one orchestrator run."""

    RESOLVING = "resolving"
    RESOLVED = "resolved"
    CACHE_CHECK = "cache_check"
    CACHE_MISS = "cache_miss"
    ENRICHING = "enriching"

    # Terminal states
    UNRESOLVED = "unresolved"
    RESOLVE_FAILURE = "resolve_failure"
    CACHE_HIT = "cache_hit"
    CACHE_FAILURE = "cache_failure"
    ENRICH_SUCCESS = "enrich_success"
    ENRICH_FAILURE = "enrich_failure"

    @property
    def is_terminal(self) -> bool:
        return self in _TERMINAL_STATES


_TERMINAL_STATES = frozenset(
    {
        PipelineState.UNRESOLVED,
        PipelineState.RESOLVE_FAILURE,
        PipelineState.CACHE_HIT,
        PipelineState.CACHE_FAILURE,
        PipelineState.ENRICH_SUCCESS,
        PipelineState.ENRICH_FAILURE,
    }
)


def normalize_key(name: str) -> str:
    """
    Normalize a substance name into a cache key.

    Collapses whitespace runs and case-folds: "  Magic  Mushrooms " and
    "magic mushrooms" share one key.
    """
    return " ".join(name.split()).lower()


@dataclass(frozen=True)
class ResolvedEntity:
    """
    Resolver output for one user query.

    `resolved_name` is the everyday short name ("MDMA"); None means the
    resolver could not identify the input and `message` says why.
    """

    resolved_name: str | None
    canonical_name: str | None = None
    message: str | None = None

    @property
    def is_resolved(self) -> bool:
        return bool(self.resolved_name)

    def cache_key(self, key_field: str = "resolved_name") -> str:
        """
        Derive the normalized cache key.

        Args:
            key_field: "resolved_name" or "canonical_name"; the canonical
                name falls back to the resolved name when absent.

        Raises:
            ValueError: If the entity is unresolved
        """
        if not self.resolved_name:
            raise ValueError("Unresolved entity has no cache key")
        if key_field == "canonical_name" and self.canonical_name:
            return normalize_key(self.canonical_name)
        return normalize_key(self.resolved_name)


@dataclass(frozen=True)
class StatusRecord:
    """
    Access status of one substance in one jurisdiction.

    Unique on (entity, jurisdiction) in the cache store.
    """

    entity: str  # normalized key, e.g. "mdma"
    jurisdiction: str  # ISO 3166-1 alpha-2, e.g. "US"
    status: AccessStatus
    reference_link: str | None = None
    updated_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    @property
    def key(self) -> tuple[str, str]:
        return (self.entity, self.jurisdiction)

    def to_row(self) -> dict[str, Any]:
        """Convert to the persisted row shape (JSON-safe)."""
        return {
            "substance": self.entity,
            "country_code": self.jurisdiction,
            "access_status": self.status.value,
            "reference_link": self.reference_link,
            "updated_at": self.updated_at.isoformat(),
        }

    @classmethod
    def from_row(cls, row: dict[str, Any]) -> StatusRecord:
        """
        Create from a persisted row.

        Raises:
            KeyError: If a required column is missing
            ValueError: If updated_at is not a timestamp
        """
        return cls(
            entity=row["substance"],
            jurisdiction=row["country_code"],
            status=AccessStatus.coerce(row.get("access_status")),
            reference_link=row.get("reference_link") or None,
            updated_at=_parse_timestamp(row["updated_at"]),
        )


def _parse_timestamp(value: Any) -> datetime:
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, str):
        text = value.strip()
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        parsed = datetime.fromisoformat(text)
    else:
        raise ValueError(f"Unsupported timestamp: {value!r}")
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


@dataclass(frozen=True)
class UpsertResult:
    """Outcome of a cache write. Failures are values, not exceptions."""

    ok: bool
    count: int = 0
    error: str | None = None


@dataclass(frozen=True)
class ResultEnvelope:
    """
    Response for one query, built fresh by the orchestrator.

    `state` and `persisted` are kept for logging and tests; they are not
    part of the public JSON.
    """

    success: bool
    state: PipelineState
    source: ResultSource | None = None
    normalized_key: str | None = None
    resolved_name: str | None = None
    canonical_name: str | None = None
    records: tuple[StatusRecord, ...] = ()
    message: str | None = None
    error: str | None = None
    persisted: bool | None = None

    def to_dict(self) -> dict[str, Any]:
        """Convert to the public JSON shape."""
        if not self.success:
            return {
                "success": False,
                "error": self.error,
                "message": self.message,
            }

        result: dict[str, Any] = {
            "success": True,
            "source": self.source.value if self.source else ResultSource.NONE.value,
            "normalizedKey": self.normalized_key,
            "resolvedName": self.resolved_name,
            "canonicalName": self.canonical_name,
            "records": [r.to_row() for r in self.records],
        }
        if self.message:
            result["message"] = self.message
        return result


@dataclass(frozen=True)
class RefreshResult:
    """Outcome of a forced re-enrichment for one substance."""

    substance: str
    count: int
    persisted: bool

    def to_dict(self) -> dict[str, Any]:
        return {
            "substance": self.substance,
            "count": self.count,
            "persisted": self.persisted,
        }
