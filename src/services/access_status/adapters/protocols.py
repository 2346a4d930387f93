"""
Cache store protocol.

A cache store holds StatusRecords keyed by (normalized substance,
jurisdiction). Reads are exact-match on the substance key; writes are
upserts, so re-writing a pair overwrites it.

Failure contract:
- lookup() raises CacheTransportError; callers cannot proceed safely
  without knowing what is cached.
- upsert() returns UpsertResult(ok=False, ...); writes are best effort.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence
from typing import Any, Protocol, runtime_checkable

from ..core.models import StatusRecord, UpsertResult

logger = logging.getLogger(__name__)


@runtime_checkable
class CacheStore(Protocol):
    """Protocol for status record caches."""

    async def lookup(self, key: str) -> list[StatusRecord]:
        """Return all records for a normalized key, empty if none."""
        ...

    async def upsert(self, records: Sequence[StatusRecord]) -> UpsertResult:
        """Insert or overwrite records by (entity, jurisdiction)."""
        ...

    async def health(self) -> dict[str, Any]:
        """Report connectivity for readiness probes."""
        ...

    async def close(self) -> None:
        """Release connections."""
        ...


def latest_per_key(records: Iterable[StatusRecord]) -> list[StatusRecord]:
    """
    Collapse records to one per (entity, jurisdiction), last one wins.

    A single upsert statement may not touch the same row twice.
    """
    by_key: dict[tuple[str, str], StatusRecord] = {}
    for record in records:
        by_key[record.key] = record
    return list(by_key.values())


def records_from_rows(rows: Iterable[dict[str, Any]], key: str) -> list[StatusRecord]:
    """Convert stored rows to records, skipping rows that cannot be read."""
    records: list[StatusRecord] = []
    for row in rows:
        try:
            record = StatusRecord.from_row(row)
        except (KeyError, TypeError, ValueError) as e:
            logger.warning(f"Skipping unreadable cache row for '{key}': {e}")
            continue
        if record.entity == key:
            records.append(record)
    return records
