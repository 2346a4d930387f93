"""
Status Enricher

Asks the enrichment provider for the access status of one substance in
every configured jurisdiction with a single call, and turns the JSON
object it returns into StatusRecords.

Accepted value shapes per jurisdiction key:
    {"US": {"access_status": "Banned", "reference_link": "https://..."}}
    {"US": "Banned"}
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from datetime import datetime, timezone
from typing import Any

from src.common.llm.protocols import LLMMessage, LLMProvider, MessageRole
from src.common.telemetry import get_access_metrics

from ..errors import EnrichmentProviderError
from ..jurisdictions import is_jurisdiction_code
from ..prompts import ENRICHMENT_SYSTEM_PROMPT, enrichment_user_prompt
from .models import AccessStatus, StatusRecord
from .parsing import parse_json

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _read_entry(payload: Any) -> tuple[AccessStatus, str | None]:
    """Extract (status, reference_link) from one jurisdiction's value."""
    if isinstance(payload, dict):
        link = payload.get("reference_link")
        link = link.strip() if isinstance(link, str) and link.strip() else None
        return AccessStatus.coerce(payload.get("access_status")), link
    if isinstance(payload, str):
        return AccessStatus.coerce(payload), None
    return AccessStatus.UNKNOWN, None


class StatusEnricher:
    """
    Enrichment client. Stateless per call; safe to share across requests.
    """

    def __init__(
        self,
        llm: LLMProvider,
        max_tokens: int = 16000,
        clock: Callable[[], datetime] | None = None,
    ):
        """
        Args:
            llm: Enrichment provider
            max_tokens: Output bound for the completion
            clock: Source of the updated_at stamp (UTC now by default)
        """
        self._llm = llm
        self._max_tokens = max_tokens
        self._clock = clock or _utcnow

    async def enrich(self, entity: str, jurisdictions: Sequence[str]) -> list[StatusRecord]:
        """
        Produce status records for `entity` across `jurisdictions`.

        Args:
            entity: Normalized substance key (e.g. "mdma")
            jurisdictions: Alpha-2 codes to ask about

        Returns:
            One record per well-formed jurisdiction key in the provider
            output; empty when the output is empty or unparseable

        Raises:
            EnrichmentProviderError: If the provider call itself fails
        """
        if not entity:
            raise ValueError("entity is required")

        messages = [
            LLMMessage(role=MessageRole.SYSTEM, content=ENRICHMENT_SYSTEM_PROMPT),
            LLMMessage(
                role=MessageRole.USER,
                content=enrichment_user_prompt(entity, jurisdictions),
            ),
        ]

        try:
            response = await self._llm.complete(
                messages,
                temperature=0.0,
                max_tokens=self._max_tokens,
                json_mode=True,
            )
        except Exception as e:
            logger.error(f"Enrichment provider failed for '{entity}': {e}")
            raise EnrichmentProviderError(self._llm.model_name, str(e)) from e

        if response.finish_reason == "length":
            logger.warning(f"Enrichment output for '{entity}' hit the token limit")

        parsed = parse_json(response.content, {}, context="enrichment")
        records = self._to_records(entity, parsed)
        get_access_metrics().record_enrichment(len(records))
        return records

    def _to_records(self, entity: str, parsed: dict[str, Any]) -> list[StatusRecord]:
        updated_at = self._clock()
        records: list[StatusRecord] = []
        dropped: list[str] = []

        for code, payload in parsed.items():
            if not is_jurisdiction_code(code):
                dropped.append(code)
                continue
            status, link = _read_entry(payload)
            records.append(
                StatusRecord(
                    entity=entity,
                    jurisdiction=code,
                    status=status,
                    reference_link=link,
                    updated_at=updated_at,
                )
            )

        if dropped:
            logger.debug(f"Dropped {len(dropped)} malformed jurisdiction keys: {dropped[:10]}")
        logger.info(f"Enriched '{entity}' with {len(records)} jurisdictions")
        return records
