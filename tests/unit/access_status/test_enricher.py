"""Tests for StatusEnricher."""

from __future__ import annotations

import json

import pytest
from fakes import FIXED_NOW, FakeLLM, enrichment_reply

from src.services.access_status.core.enricher import StatusEnricher
from src.services.access_status.core.models import AccessStatus
from src.services.access_status.errors import EnrichmentProviderError


def make_enricher(llm: FakeLLM) -> StatusEnricher:
    return StatusEnricher(llm, max_tokens=4000, clock=lambda: FIXED_NOW)


class TestStatusEnricher:
    """Tests for StatusEnricher.enrich."""

    async def test_builds_one_record_per_jurisdiction(self) -> None:
        llm = FakeLLM(responses=[enrichment_reply({"US": "Banned", "CA": "Limited Access Trials"})])

        records = await make_enricher(llm).enrich("mdma", ["US", "CA"])

        by_code = {r.jurisdiction: r for r in records}
        assert set(by_code) == {"US", "CA"}
        assert by_code["US"].status is AccessStatus.BANNED
        assert by_code["CA"].status is AccessStatus.LIMITED_ACCESS_TRIALS
        assert by_code["US"].reference_link == "https://example.org/us"
        assert all(r.entity == "mdma" for r in records)
        assert all(r.updated_at == FIXED_NOW for r in records)

    async def test_request_uses_json_mode_and_lists_jurisdictions(self) -> None:
        llm = FakeLLM(responses=["{}"])

        await make_enricher(llm).enrich("lsd", ["US", "NL"])

        call = llm.calls[0]
        assert call["json_mode"] is True
        assert call["temperature"] == 0.0
        assert call["max_tokens"] == 4000
        prompt = call["messages"][-1].content
        assert '"lsd"' in prompt
        assert "US, NL" in prompt

    async def test_drops_malformed_keys(self) -> None:
        content = json.dumps(
            {
                "US": {"access_status": "Banned"},
                "usa": {"access_status": "Banned"},
                "GBR": {"access_status": "Banned"},
                "1A": {"access_status": "Banned"},
                "": {"access_status": "Banned"},
            }
        )
        llm = FakeLLM(responses=[content])

        records = await make_enricher(llm).enrich("mdma", ["US"])

        assert [r.jurisdiction for r in records] == ["US"]

    async def test_accepts_bare_status_strings(self) -> None:
        llm = FakeLLM(responses=[json.dumps({"US": "Approved Medical Use", "CA": 7})])

        records = await make_enricher(llm).enrich("ketamine", ["US", "CA"])

        by_code = {r.jurisdiction: r for r in records}
        assert by_code["US"].status is AccessStatus.APPROVED_MEDICAL_USE
        assert by_code["US"].reference_link is None
        assert by_code["CA"].status is AccessStatus.UNKNOWN

    async def test_unknown_status_and_blank_link(self) -> None:
        content = json.dumps({"DE": {"access_status": "Decriminalized", "reference_link": "  "}})
        llm = FakeLLM(responses=[content])

        records = await make_enricher(llm).enrich("psilocybin", ["DE"])

        assert records[0].status is AccessStatus.UNKNOWN
        assert records[0].reference_link is None

    @pytest.mark.parametrize("content", ["{}", "", "not json", '["US"]'])
    async def test_empty_or_unparseable_output(self, content: str) -> None:
        llm = FakeLLM(responses=[content])

        assert await make_enricher(llm).enrich("mdma", ["US"]) == []

    async def test_provider_error_is_wrapped(self) -> None:
        llm = FakeLLM(error=ConnectionError("connection reset"))

        with pytest.raises(EnrichmentProviderError) as exc_info:
            await make_enricher(llm).enrich("mdma", ["US"])

        assert exc_info.value.code == "enrichment_failed"
        assert exc_info.value.provider == "fake-model"

    async def test_empty_entity_rejected(self) -> None:
        with pytest.raises(ValueError):
            await make_enricher(FakeLLM()).enrich("", ["US"])

    async def test_truncated_output_logs_warning(self, caplog: pytest.LogCaptureFixture) -> None:
        llm = FakeLLM(responses=['{"US": {"access_status": "Bann'], finish_reason="length")

        records = await make_enricher(llm).enrich("mdma", ["US"])

        assert records == []
        assert "hit the token limit" in caplog.text
