"""
Cache store adapters.

- InMemoryCacheStore: process-local dict (tests, local runs)
- SupabaseCacheStore: Supabase PostgREST over httpx
- PostgresCacheStore: PostgreSQL over asyncpg
"""

from .memory import InMemoryCacheStore
from .postgres import PostgresCacheStore, create_db_pool
from .protocols import CacheStore, latest_per_key, records_from_rows
from .supabase import SupabaseCacheStore

__all__ = [
    "CacheStore",
    "InMemoryCacheStore",
    "PostgresCacheStore",
    "SupabaseCacheStore",
    "create_db_pool",
    "latest_per_key",
    "records_from_rows",
]
