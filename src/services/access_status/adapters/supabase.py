"""
Supabase cache store.

Talks to the Supabase PostgREST endpoint over httpx. Rows are read with an
`eq` filter on the substance column and written with
`Prefer: resolution=merge-duplicates` against the
(substance, country_code) unique constraint.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import Any

import httpx

from ..core.models import StatusRecord, UpsertResult
from ..errors import CacheTransportError
from .protocols import latest_per_key, records_from_rows

logger = logging.getLogger(__name__)

CONFLICT_COLUMNS = "substance,country_code"
_ERROR_BODY_CHARS = 500


class SupabaseCacheStore:
    """
    Cache store backed by a Supabase table.

    The HTTP client is created lazily and reused across requests.
    """

    def __init__(
        self,
        base_url: str,
        service_role_key: str,
        table: str = "psychedelic_access",
        timeout_seconds: float = 10.0,
        client: httpx.AsyncClient | None = None,
    ):
        """
        Args:
            base_url: Supabase project URL (https://<ref>.supabase.co)
            service_role_key: Service role key, sent as apikey and bearer token
            table: Table holding status rows
            timeout_seconds: Transport timeout per request
            client: Pre-built client (tests); must carry base URL and headers
        """
        self._rest_url = f"{base_url.rstrip('/')}/rest/v1"
        self._service_role_key = service_role_key
        self._table = table
        self._timeout_seconds = timeout_seconds
        self._client = client

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create the HTTP client."""
        if self._client is None:
            self._client = httpx.AsyncClient(
                base_url=self._rest_url,
                headers={
                    "apikey": self._service_role_key,
                    "Authorization": f"Bearer {self._service_role_key}",
                    "Content-Type": "application/json",
                },
                timeout=httpx.Timeout(self._timeout_seconds),
            )
        return self._client

    async def close(self) -> None:
        """Close the HTTP client."""
        if self._client:
            await self._client.aclose()
            self._client = None

    async def lookup(self, key: str) -> list[StatusRecord]:
        """
        Fetch all rows for a substance key.

        Raises:
            CacheTransportError: On network errors, non-2xx responses or
                a body that is not a JSON array
        """
        client = await self._get_client()
        try:
            response = await client.get(
                f"/{self._table}",
                params={
                    "substance": f"eq.{key}",
                    "select": "*",
                    "order": "country_code.asc",
                },
            )
        except httpx.HTTPError as e:
            logger.error(f"Supabase lookup error for '{key}': {e}")
            raise CacheTransportError("lookup", str(e) or type(e).__name__) from e

        if response.is_error:
            body = response.text[:_ERROR_BODY_CHARS]
            logger.error(f"Supabase lookup failed for '{key}' ({response.status_code}): {body}")
            raise CacheTransportError("lookup", body, status_code=response.status_code)

        try:
            rows = response.json()
        except ValueError as e:
            raise CacheTransportError("lookup", f"invalid JSON body: {e}") from e
        if not isinstance(rows, list):
            raise CacheTransportError("lookup", f"expected a JSON array, got {type(rows).__name__}")

        records = records_from_rows(rows, key)
        if records:
            logger.info(f"Cache hit for '{key}' ({len(records)} rows)")
        else:
            logger.info(f"Cache miss for '{key}'")
        return records

    async def upsert(self, records: Sequence[StatusRecord]) -> UpsertResult:
        """Merge rows into the table. Never raises on transport errors."""
        if not records:
            logger.info("No rows to save")
            return UpsertResult(ok=True, count=0)

        rows = [r.to_row() for r in latest_per_key(records)]
        client = await self._get_client()
        try:
            response = await client.post(
                f"/{self._table}",
                params={"on_conflict": CONFLICT_COLUMNS},
                json=rows,
                headers={"Prefer": "resolution=merge-duplicates,return=minimal"},
            )
        except httpx.HTTPError as e:
            logger.error(f"Supabase save error: {e}")
            return UpsertResult(ok=False, error=str(e) or type(e).__name__)

        if response.is_error:
            body = response.text[:_ERROR_BODY_CHARS]
            logger.error(f"Supabase save failed ({response.status_code}): {body}")
            return UpsertResult(ok=False, error=f"HTTP {response.status_code}: {body}")

        logger.info(f"Saved {len(rows)} rows for '{rows[0]['substance']}'")
        return UpsertResult(ok=True, count=len(rows))

    async def health(self) -> dict[str, Any]:
        """Check that the table is reachable."""
        try:
            client = await self._get_client()
            response = await client.get(
                f"/{self._table}",
                params={"select": "substance", "limit": "1"},
            )
            if response.is_error:
                return {
                    "connected": False,
                    "backend": "supabase",
                    "error": f"HTTP {response.status_code}",
                }
            return {"connected": True, "backend": "supabase"}
        except httpx.HTTPError as e:
            logger.error(f"Supabase health check failed: {e}")
            return {"connected": False, "backend": "supabase", "error": str(e)}
