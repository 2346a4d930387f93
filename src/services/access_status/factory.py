"""
Wiring for the access status service.

Builds the cache store, providers and orchestrator from a config object.
Transports call these at startup; tests inject their own collaborators.
"""

from __future__ import annotations

import logging

from src.common.llm.factory import create_llm_provider
from src.common.llm.protocols import LLMProvider

from .adapters.memory import InMemoryCacheStore
from .adapters.postgres import PostgresCacheStore
from .adapters.protocols import CacheStore
from .adapters.supabase import SupabaseCacheStore
from .config import AccessServiceConfig
from .core.enricher import StatusEnricher
from .core.orchestrator import AccessOrchestrator
from .core.resolver import SubstanceResolver
from .errors import ConfigurationError

logger = logging.getLogger(__name__)


async def create_cache_store(config: AccessServiceConfig) -> CacheStore:
    """
    Create the configured cache store.

    Raises:
        ConfigurationError: If the backend's connection settings are missing
    """
    if config.cache_backend == "memory":
        logger.info("Using in-memory cache store")
        return InMemoryCacheStore()

    if config.cache_backend == "postgres":
        logger.info(f"Using Postgres cache store (table={config.cache_table})")
        store = await PostgresCacheStore.connect(
            config.postgres_url,
            table=config.cache_table,
            min_size=config.postgres_pool_min,
            max_size=config.postgres_pool_max,
            timeout_seconds=config.cache_timeout_seconds,
        )
        await store.ensure_schema()
        return store

    if not config.supabase_url or not config.supabase_service_role_key:
        raise ConfigurationError(
            "SUPABASE_URL and SUPABASE_SERVICE_ROLE_KEY are required for the supabase backend"
        )
    logger.info(f"Using Supabase cache store (table={config.cache_table})")
    return SupabaseCacheStore(
        config.supabase_url,
        config.supabase_service_role_key,
        table=config.cache_table,
        timeout_seconds=config.cache_timeout_seconds,
    )


def create_orchestrator(
    config: AccessServiceConfig,
    cache_store: CacheStore,
    resolver_llm: LLMProvider | None = None,
    enrichment_llm: LLMProvider | None = None,
) -> AccessOrchestrator:
    """
    Create the orchestrator, building any provider not passed in.

    Raises:
        ConfigurationError: If a provider has no API key
    """
    try:
        if resolver_llm is None:
            resolver_llm = create_llm_provider(
                config.resolver_provider,
                api_key=config.resolver_api_key,
                model=config.resolver_model,
                base_url=config.resolver_base_url,
                timeout_seconds=config.llm_timeout_seconds,
            )
        if enrichment_llm is None:
            enrichment_llm = create_llm_provider(
                config.enrichment_provider,
                api_key=config.enrichment_api_key,
                model=config.enrichment_model,
                base_url=config.enrichment_base_url,
                timeout_seconds=config.llm_timeout_seconds,
            )
    except RuntimeError as e:
        raise ConfigurationError(str(e)) from e

    logger.info(
        f"Resolver: {config.resolver_provider}/{resolver_llm.model_name}, "
        f"enrichment: {config.enrichment_provider}/{enrichment_llm.model_name}, "
        f"{len(config.jurisdictions)} jurisdictions"
    )
    return AccessOrchestrator(
        resolver=SubstanceResolver(resolver_llm, max_tokens=config.resolver_max_tokens),
        enricher=StatusEnricher(enrichment_llm, max_tokens=config.enrichment_max_tokens),
        cache_store=cache_store,
        jurisdictions=config.jurisdictions,
        cache_key_field=config.cache_key_field,
    )
