"""Fixtures for access status unit tests."""

from __future__ import annotations

import pytest
from fakes import FIXED_NOW, FakeLLM

from src.services.access_status.adapters.memory import InMemoryCacheStore
from src.services.access_status.core.enricher import StatusEnricher
from src.services.access_status.core.orchestrator import AccessOrchestrator
from src.services.access_status.core.resolver import SubstanceResolver


@pytest.fixture
def store() -> InMemoryCacheStore:
    return InMemoryCacheStore()


@pytest.fixture
def resolver_llm() -> FakeLLM:
    return FakeLLM(name="resolver-model")


@pytest.fixture
def enrichment_llm() -> FakeLLM:
    return FakeLLM(name="enrichment-model")


@pytest.fixture
def orchestrator(
    resolver_llm: FakeLLM, enrichment_llm: FakeLLM, store: InMemoryCacheStore
) -> AccessOrchestrator:
    return AccessOrchestrator(
        resolver=SubstanceResolver(resolver_llm),
        enricher=StatusEnricher(enrichment_llm, clock=lambda: FIXED_NOW),
        cache_store=store,
        jurisdictions=("US", "CA", "NL"),
    )
