"""Tests for access status models."""

from __future__ import annotations

from datetime import datetime, timezone

import pytest

from src.services.access_status.core.models import (
    AccessStatus,
    PipelineState,
    RefreshResult,
    ResolvedEntity,
    ResultEnvelope,
    ResultSource,
    StatusRecord,
    normalize_key,
)


class TestNormalizeKey:
    """Tests for normalize_key."""

    @pytest.mark.parametrize("name", ["MDMA", "mdma", "MdMa", "  MDMA  "])
    def test_case_variants_share_a_key(self, name: str) -> None:
        assert normalize_key(name) == "mdma"

    def test_collapses_inner_whitespace(self) -> None:
        assert normalize_key("Magic   Mushrooms") == "magic mushrooms"


class TestAccessStatus:
    """Tests for AccessStatus.coerce."""

    @pytest.mark.parametrize(
        "value, expected",
        [
            ("Banned", AccessStatus.BANNED),
            ("banned", AccessStatus.BANNED),
            ("approved_medical_use", AccessStatus.APPROVED_MEDICAL_USE),
            ("Limited-Access Trials", AccessStatus.LIMITED_ACCESS_TRIALS),
            ("Decriminalized", AccessStatus.UNKNOWN),
            (None, AccessStatus.UNKNOWN),
            (3, AccessStatus.UNKNOWN),
        ],
    )
    def test_coerce(self, value, expected: AccessStatus) -> None:
        assert AccessStatus.coerce(value) is expected


class TestResolvedEntity:
    """Tests for ResolvedEntity."""

    def test_cache_key_uses_resolved_name(self) -> None:
        entity = ResolvedEntity("MDMA", "3,4-methylenedioxymethamphetamine")

        assert entity.cache_key() == "mdma"

    def test_cache_key_from_canonical_name(self) -> None:
        entity = ResolvedEntity("LSD", "Lysergide")

        assert entity.cache_key("canonical_name") == "lysergide"

    def test_canonical_key_falls_back_to_resolved_name(self) -> None:
        assert ResolvedEntity("Ketamine").cache_key("canonical_name") == "ketamine"

    def test_unresolved_has_no_key(self) -> None:
        entity = ResolvedEntity(None, message="No known record of 'x'")

        assert not entity.is_resolved
        with pytest.raises(ValueError):
            entity.cache_key()


class TestStatusRecord:
    """Tests for StatusRecord row conversion."""

    def test_to_row(self) -> None:
        record = StatusRecord(
            entity="mdma",
            jurisdiction="US",
            status=AccessStatus.LIMITED_ACCESS_TRIALS,
            reference_link="https://www.fda.gov/",
            updated_at=datetime(2025, 1, 1, tzinfo=timezone.utc),
        )

        assert record.to_row() == {
            "substance": "mdma",
            "country_code": "US",
            "access_status": "Limited Access Trials",
            "reference_link": "https://www.fda.gov/",
            "updated_at": "2025-01-01T00:00:00+00:00",
        }

    def test_from_row_accepts_zulu_timestamp(self) -> None:
        record = StatusRecord.from_row(
            {
                "substance": "lsd",
                "country_code": "NL",
                "access_status": "Banned",
                "reference_link": "",
                "updated_at": "2025-01-01T10:30:00Z",
            }
        )

        assert record.key == ("lsd", "NL")
        assert record.status is AccessStatus.BANNED
        assert record.reference_link is None
        assert record.updated_at == datetime(2025, 1, 1, 10, 30, tzinfo=timezone.utc)

    def test_from_row_treats_naive_timestamp_as_utc(self) -> None:
        record = StatusRecord.from_row(
            {
                "substance": "lsd",
                "country_code": "NL",
                "access_status": "Banned",
                "updated_at": datetime(2025, 1, 1),
            }
        )

        assert record.updated_at.tzinfo is timezone.utc

    def test_from_row_missing_column(self) -> None:
        with pytest.raises(KeyError):
            StatusRecord.from_row({"substance": "lsd"})


class TestResultEnvelope:
    """Tests for ResultEnvelope.to_dict."""

    def test_failure_shape(self) -> None:
        envelope = ResultEnvelope(
            success=False,
            state=PipelineState.UNRESOLVED,
            error="no_record",
            message="No known record of 'xyz'",
        )

        assert envelope.to_dict() == {
            "success": False,
            "error": "no_record",
            "message": "No known record of 'xyz'",
        }

    def test_success_shape(self) -> None:
        record = StatusRecord("mdma", "US", AccessStatus.BANNED)
        envelope = ResultEnvelope(
            success=True,
            state=PipelineState.CACHE_HIT,
            source=ResultSource.CACHE,
            normalized_key="mdma",
            resolved_name="MDMA",
            records=(record,),
        )

        data = envelope.to_dict()

        assert data["success"] is True
        assert data["source"] == "cache"
        assert data["normalizedKey"] == "mdma"
        assert data["resolvedName"] == "MDMA"
        assert data["canonicalName"] is None
        assert data["records"] == [record.to_row()]
        assert "message" not in data
        assert "state" not in data

    def test_terminal_states(self) -> None:
        assert PipelineState.CACHE_HIT.is_terminal
        assert PipelineState.ENRICH_FAILURE.is_terminal
        assert not PipelineState.ENRICHING.is_terminal


def test_refresh_result_to_dict() -> None:
    assert RefreshResult("mdma", 3, True).to_dict() == {
        "substance": "mdma",
        "count": 3,
        "persisted": True,
    }
