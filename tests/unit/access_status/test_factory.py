"""Tests for service wiring and CLI config."""

from __future__ import annotations

import pytest
from fakes import FakeLLM

from src.services.access_status.__main__ import build_config, parse_args
from src.services.access_status.adapters.memory import InMemoryCacheStore
from src.services.access_status.adapters.supabase import SupabaseCacheStore
from src.services.access_status.config import AccessServiceConfig
from src.services.access_status.core.orchestrator import AccessOrchestrator
from src.services.access_status.errors import ConfigurationError
from src.services.access_status.factory import create_cache_store, create_orchestrator


class TestCreateCacheStore:
    """Tests for create_cache_store."""

    async def test_memory_backend(self) -> None:
        store = await create_cache_store(AccessServiceConfig(cache_backend="memory"))

        assert isinstance(store, InMemoryCacheStore)

    async def test_supabase_backend(self) -> None:
        config = AccessServiceConfig(
            cache_backend="supabase",
            supabase_url="https://project.supabase.co",
            supabase_service_role_key="service-key",
        )

        store = await create_cache_store(config)

        assert isinstance(store, SupabaseCacheStore)
        await store.close()

    async def test_supabase_requires_credentials(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.delenv("SUPABASE_URL", raising=False)
        monkeypatch.delenv("SUPABASE_SERVICE_ROLE_KEY", raising=False)

        with pytest.raises(ConfigurationError):
            await create_cache_store(AccessServiceConfig(cache_backend="supabase"))


class TestCreateOrchestrator:
    """Tests for create_orchestrator."""

    def test_uses_injected_providers(self) -> None:
        orchestrator = create_orchestrator(
            AccessServiceConfig(cache_backend="memory"),
            InMemoryCacheStore(),
            resolver_llm=FakeLLM(),
            enrichment_llm=FakeLLM(),
        )

        assert isinstance(orchestrator, AccessOrchestrator)

    def test_missing_provider_key(self, monkeypatch: pytest.MonkeyPatch) -> None:
        for name in ("HF_TOKEN", "HUGGING_FACE_KEY", "ACCESS_RESOLVER_API_KEY"):
            monkeypatch.delenv(name, raising=False)

        with pytest.raises(ConfigurationError):
            create_orchestrator(
                AccessServiceConfig(cache_backend="memory"),
                InMemoryCacheStore(),
                enrichment_llm=FakeLLM(),
            )


def test_cli_overrides() -> None:
    args = parse_args(["--port", "8099", "--cache-backend", "memory", "--log-level", "debug"])

    config = build_config(args)

    assert config.port == 8099
    assert config.cache_backend == "memory"
    assert config.log_level == "DEBUG"
