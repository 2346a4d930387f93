"""
In-memory cache store.

Dict-backed implementation of CacheStore for local runs and unit tests.
Contents live for the lifetime of the process.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any

from ..core.models import StatusRecord, UpsertResult
from .protocols import latest_per_key


class InMemoryCacheStore:
    """In-memory implementation of CacheStore."""

    def __init__(self, records: Sequence[StatusRecord] = ()):
        self._rows: dict[tuple[str, str], StatusRecord] = {}
        for record in records:
            self._rows[record.key] = record

    def __len__(self) -> int:
        return len(self._rows)

    async def lookup(self, key: str) -> list[StatusRecord]:
        """Return records for an exact key, ordered by jurisdiction."""
        matches = [r for (entity, _), r in self._rows.items() if entity == key]
        return sorted(matches, key=lambda r: r.jurisdiction)

    async def upsert(self, records: Sequence[StatusRecord]) -> UpsertResult:
        """Insert or overwrite records."""
        rows = latest_per_key(records)
        for record in rows:
            self._rows[record.key] = record
        return UpsertResult(ok=True, count=len(rows))

    async def health(self) -> dict[str, Any]:
        return {"connected": True, "backend": "memory", "rows": len(self._rows)}

    async def close(self) -> None:
        return None
