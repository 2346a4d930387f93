"""
PostgreSQL cache store.

Same table shape as the Supabase store, reached directly through an
asyncpg pool. Useful for self-hosted deployments and integration tests.
"""

from __future__ import annotations

import asyncio
import logging
import re
from collections.abc import Sequence
from typing import Any

import asyncpg

from ..core.models import StatusRecord, UpsertResult
from ..errors import CacheTransportError, ConfigurationError
from .protocols import latest_per_key, records_from_rows

logger = logging.getLogger(__name__)

_TABLE_NAME = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")

_DB_ERRORS = (asyncpg.PostgresError, asyncpg.InterfaceError, OSError, asyncio.TimeoutError)


async def create_db_pool(
    postgres_url: str,
    min_size: int = 1,
    max_size: int = 10,
    command_timeout: float | None = None,
) -> asyncpg.Pool:
    """
    Create a PostgreSQL connection pool.

    Args:
        postgres_url: Connection URL
        min_size: Minimum connections
        max_size: Maximum connections
        command_timeout: Per-statement timeout in seconds

    Returns:
        asyncpg connection pool
    """
    logger.info(f"Creating database pool (min={min_size}, max={max_size})")
    pool = await asyncpg.create_pool(
        postgres_url,
        min_size=min_size,
        max_size=max_size,
        command_timeout=command_timeout,
    )
    logger.info("Database pool created")
    return pool


class PostgresCacheStore:
    """Cache store backed by a PostgreSQL table."""

    def __init__(
        self,
        pool: asyncpg.Pool,
        table: str = "psychedelic_access",
        owns_pool: bool = False,
    ):
        """
        Args:
            pool: asyncpg connection pool
            table: Table holding status rows (plain identifier)
            owns_pool: Close the pool in close()
        """
        if not _TABLE_NAME.match(table):
            raise ConfigurationError(f"Invalid table name: {table!r}")
        self._pool = pool
        self._table = table
        self._owns_pool = owns_pool

    @classmethod
    async def connect(
        cls,
        postgres_url: str,
        table: str = "psychedelic_access",
        min_size: int = 1,
        max_size: int = 10,
        timeout_seconds: float | None = None,
    ) -> PostgresCacheStore:
        """Create a pool and a store that owns it."""
        pool = await create_db_pool(
            postgres_url,
            min_size=min_size,
            max_size=max_size,
            command_timeout=timeout_seconds,
        )
        return cls(pool, table=table, owns_pool=True)

    async def ensure_schema(self) -> None:
        """Create the table if it does not exist."""
        async with self._pool.acquire() as conn:
            await conn.execute(
                f"""
                CREATE TABLE IF NOT EXISTS {self._table} (
                    id BIGSERIAL PRIMARY KEY,
                    substance TEXT NOT NULL,
                    country_code CHAR(2) NOT NULL,
                    access_status TEXT NOT NULL,
                    reference_link TEXT,
                    updated_at TIMESTAMPTZ NOT NULL DEFAULT now(),
                    UNIQUE (substance, country_code)
                )
                """
            )

    async def lookup(self, key: str) -> list[StatusRecord]:
        """
        Fetch all rows for a substance key.

        Raises:
            CacheTransportError: If the database is unreachable or errors
        """
        try:
            async with self._pool.acquire() as conn:
                rows = await conn.fetch(
                    f"""
                    SELECT substance, country_code, access_status, reference_link, updated_at
                    FROM {self._table}
                    WHERE substance = $1
                    ORDER BY country_code
                    """,
                    key,
                )
        except _DB_ERRORS as e:
            logger.error(f"Postgres lookup failed for '{key}': {e}")
            raise CacheTransportError("lookup", str(e) or type(e).__name__) from e

        records = records_from_rows((dict(row) for row in rows), key)
        logger.info(f"Cache {'hit' if records else 'miss'} for '{key}'")
        return records

    async def upsert(self, records: Sequence[StatusRecord]) -> UpsertResult:
        """Insert or overwrite rows. Never raises on database errors."""
        if not records:
            return UpsertResult(ok=True, count=0)

        rows = latest_per_key(records)
        try:
            async with self._pool.acquire() as conn:
                await conn.executemany(
                    f"""
                    INSERT INTO {self._table}
                        (substance, country_code, access_status, reference_link, updated_at)
                    VALUES ($1, $2, $3, $4, $5)
                    ON CONFLICT (substance, country_code) DO UPDATE SET
                        access_status = EXCLUDED.access_status,
                        reference_link = EXCLUDED.reference_link,
                        updated_at = EXCLUDED.updated_at
                    """,
                    [
                        (r.entity, r.jurisdiction, r.status.value, r.reference_link, r.updated_at)
                        for r in rows
                    ],
                )
        except _DB_ERRORS as e:
            logger.error(f"Postgres save failed: {e}")
            return UpsertResult(ok=False, error=str(e) or type(e).__name__)

        logger.info(f"Saved {len(rows)} rows for '{rows[0].entity}'")
        return UpsertResult(ok=True, count=len(rows))

    async def health(self) -> dict[str, Any]:
        """Check database health."""
        try:
            async with self._pool.acquire() as conn:
                await conn.fetchval("SELECT 1")
            return {"connected": True, "backend": "postgres", "pool_size": self._pool.get_size()}
        except _DB_ERRORS as e:
            logger.error(f"Database health check failed: {e}")
            return {"connected": False, "backend": "postgres", "error": str(e)}

    async def close(self) -> None:
        if self._owns_pool:
            await self._pool.close()
