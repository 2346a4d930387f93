"""
Substance Resolver

Maps free-form user input ("molly", "magic mushrooms", a misspelling) to a
substance name using the resolver provider. Decoding is pinned to
temperature 0 with a small output bound so repeated queries resolve the
same way in practice.
"""

from __future__ import annotations

import logging
from typing import Any

from src.common.llm.protocols import LLMMessage, LLMProvider, MessageRole

from ..errors import ResolverProviderError
from ..prompts import RESOLVER_SYSTEM_PROMPT, resolver_user_prompt
from .models import ResolvedEntity
from .parsing import parse_json

logger = logging.getLogger(__name__)


def unresolved_message(raw_query: str) -> str:
    """Default message for input the resolver could not identify."""
    return f"No known record of '{raw_query}'"


def _clean(value: Any) -> str | None:
    if isinstance(value, str) and value.strip():
        return value.strip()
    return None


class SubstanceResolver:
    """
    Resolver client. Stateless per call; safe to share across requests.
    """

    def __init__(self, llm: LLMProvider, max_tokens: int = 150):
        """
        Args:
            llm: Resolver provider
            max_tokens: Output bound for the completion
        """
        self._llm = llm
        self._max_tokens = max_tokens

    async def resolve(self, raw_query: str) -> ResolvedEntity:
        """
        Resolve user input to a substance.

        Unparseable provider output is treated as "no known record" rather
        than an error.

        Returns:
            ResolvedEntity; `resolved_name` is None when unresolved

        Raises:
            ResolverProviderError: If the provider call itself fails
        """
        fallback_message = unresolved_message(raw_query)
        messages = [
            LLMMessage(role=MessageRole.SYSTEM, content=RESOLVER_SYSTEM_PROMPT),
            LLMMessage(role=MessageRole.USER, content=resolver_user_prompt(raw_query)),
        ]

        try:
            response = await self._llm.complete(
                messages,
                temperature=0.0,
                max_tokens=self._max_tokens,
            )
        except Exception as e:
            logger.error(f"Resolver provider failed for '{raw_query}': {e}")
            raise ResolverProviderError(self._llm.model_name, str(e)) from e

        parsed = parse_json(
            response.content,
            {"resolved_name": None, "message": fallback_message},
            context="resolver",
        )

        resolved_name = _clean(parsed.get("resolved_name"))
        if resolved_name is None:
            message = _clean(parsed.get("message")) or fallback_message
            logger.info(f"Could not resolve '{raw_query}': {message}")
            return ResolvedEntity(resolved_name=None, message=message)

        canonical_name = _clean(parsed.get("canonical_name"))
        logger.info(f"Resolved '{raw_query}' -> '{resolved_name}'")
        return ResolvedEntity(resolved_name=resolved_name, canonical_name=canonical_name)
