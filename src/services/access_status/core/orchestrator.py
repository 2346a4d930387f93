"""
Access Orchestrator

Runs one query through the pipeline:

    RESOLVING -> RESOLVED -> CACHE_CHECK -> CACHE_HIT
                                         -> CACHE_MISS -> ENRICHING -> ENRICH_SUCCESS

with terminal failure states UNRESOLVED, RESOLVE_FAILURE, CACHE_FAILURE and
ENRICH_FAILURE. Each stage runs at most once per query. Cached rows always
win over fresh enrichment; writes after enrichment are best effort and
never change the outcome returned to the caller.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import TYPE_CHECKING

from src.common.telemetry import AccessMetrics, add_span_event, get_access_metrics, trace_span

from ..errors import CacheTransportError, EnrichmentProviderError, ResolverProviderError
from .enricher import StatusEnricher
from .models import (
    PipelineState,
    RefreshResult,
    ResolvedEntity,
    ResultEnvelope,
    ResultSource,
    StatusRecord,
    normalize_key,
)
from .resolver import SubstanceResolver

if TYPE_CHECKING:
    from ..adapters.protocols import CacheStore

logger = logging.getLogger(__name__)


class AccessOrchestrator:
    """
    Coordinates resolver, cache store and enricher for each query.

    Holds no per-query state; one instance serves concurrent requests.
    """

    def __init__(
        self,
        resolver: SubstanceResolver,
        enricher: StatusEnricher,
        cache_store: CacheStore,
        jurisdictions: Sequence[str],
        cache_key_field: str = "resolved_name",
        metrics: AccessMetrics | None = None,
    ):
        """
        Args:
            resolver: Free text -> substance name
            enricher: Substance -> per-jurisdiction status records
            cache_store: Where records are looked up and persisted
            jurisdictions: Codes sent to the enricher on a cache miss
            cache_key_field: Resolver field the cache key is derived from
            metrics: Metrics sink (process-wide instance by default)
        """
        if not jurisdictions:
            raise ValueError("At least one jurisdiction is required")
        self._resolver = resolver
        self._enricher = enricher
        self._cache_store = cache_store
        self._jurisdictions = tuple(jurisdictions)
        self._cache_key_field = cache_key_field
        self._metrics = metrics or get_access_metrics()

    @property
    def cache_store(self) -> CacheStore:
        return self._cache_store

    async def process(self, raw_query: str) -> ResultEnvelope:
        """
        Answer one user query.

        Collaborator failures become failure envelopes; this method does not
        raise for them.

        Raises:
            ValueError: If the query is empty or whitespace
        """
        query = raw_query.strip() if raw_query else ""
        if not query:
            raise ValueError("query is required")

        with trace_span("access.process", {"query.length": len(query)}) as span:
            envelope = await self._run(query)
            span.set_attribute("access.state", envelope.state.value)
            if envelope.normalized_key:
                span.set_attribute("access.key", envelope.normalized_key)

        self._metrics.record_request(
            envelope.state.value,
            envelope.source.value if envelope.source else None,
        )
        logger.info(
            f"Query '{query}' finished in state {envelope.state.value}"
            + (f" ({len(envelope.records)} records)" if envelope.success else "")
        )
        return envelope

    async def _run(self, query: str) -> ResultEnvelope:
        self._enter(PipelineState.RESOLVING)
        try:
            entity = await self._resolver.resolve(query)
        except ResolverProviderError as e:
            return self._failure(PipelineState.RESOLVE_FAILURE, e.code, e.message)

        if not entity.is_resolved:
            return self._failure(
                PipelineState.UNRESOLVED,
                "no_record",
                entity.message or f"No known record of '{query}'",
            )

        self._enter(PipelineState.RESOLVED)
        key = entity.cache_key(self._cache_key_field)

        self._enter(PipelineState.CACHE_CHECK)
        try:
            cached = await self._cache_store.lookup(key)
        except CacheTransportError as e:
            self._metrics.record_cache_lookup("error")
            return self._failure(PipelineState.CACHE_FAILURE, e.code, e.message)

        if cached:
            self._metrics.record_cache_lookup("hit")
            self._enter(PipelineState.CACHE_HIT)
            return self._success(
                PipelineState.CACHE_HIT, ResultSource.CACHE, key, entity, cached
            )

        self._metrics.record_cache_lookup("miss")
        self._enter(PipelineState.CACHE_MISS)

        self._enter(PipelineState.ENRICHING)
        try:
            records = await self._enricher.enrich(key, self._jurisdictions)
        except EnrichmentProviderError as e:
            return self._failure(PipelineState.ENRICH_FAILURE, e.code, e.message)

        if not records:
            self._enter(PipelineState.ENRICH_SUCCESS)
            return self._success(
                PipelineState.ENRICH_SUCCESS,
                ResultSource.NONE,
                key,
                entity,
                [],
                message=f"No enrichment produced for '{key}'",
            )

        persisted = await self._persist(records)
        self._enter(PipelineState.ENRICH_SUCCESS)
        return self._success(
            PipelineState.ENRICH_SUCCESS,
            ResultSource.FRESH,
            key,
            entity,
            records,
            persisted=persisted,
        )

    async def refresh(self, entities: Sequence[str]) -> list[RefreshResult]:
        """
        Re-enrich substances by name, bypassing resolution and cache reads.

        Each name is normalized and used as the key directly. Writes stay
        best effort.

        Raises:
            EnrichmentProviderError: If any enrichment call fails
        """
        results: list[RefreshResult] = []
        for name in entities:
            key = normalize_key(name)
            if not key:
                continue
            with trace_span("access.refresh", {"access.key": key}):
                records = await self._enricher.enrich(key, self._jurisdictions)
                persisted = await self._persist(records) if records else False
            logger.info(f"Refreshed '{key}' ({len(records)} records, persisted={persisted})")
            results.append(RefreshResult(substance=key, count=len(records), persisted=persisted))
        return results

    async def _persist(self, records: Sequence[StatusRecord]) -> bool:
        try:
            result = await self._cache_store.upsert(records)
        except CacheTransportError as e:
            logger.error(f"Cache write failed: {e}")
            self._metrics.record_persist_failure()
            return False

        if not result.ok:
            logger.error(f"Cache write failed: {result.error}")
            self._metrics.record_persist_failure()
            return False
        return True

    def _enter(self, state: PipelineState) -> None:
        logger.debug(f"Pipeline state -> {state.value}")
        add_span_event(f"state.{state.value}")

    def _failure(self, state: PipelineState, error: str, message: str) -> ResultEnvelope:
        self._enter(state)
        logger.warning(f"Pipeline ended in {state.value}: {message}")
        return ResultEnvelope(success=False, state=state, error=error, message=message)

    @staticmethod
    def _success(
        state: PipelineState,
        source: ResultSource,
        key: str,
        entity: ResolvedEntity,
        records: Sequence[StatusRecord],
        message: str | None = None,
        persisted: bool | None = None,
    ) -> ResultEnvelope:
        return ResultEnvelope(
            success=True,
            state=state,
            source=source,
            normalized_key=key,
            resolved_name=entity.resolved_name,
            canonical_name=entity.canonical_name,
            records=tuple(records),
            message=message,
            persisted=persisted,
        )
