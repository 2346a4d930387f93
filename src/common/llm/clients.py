"""
Shared LLM Client Factories

Single place where OpenAI-compatible and Anthropic SDK clients are built.

Key features:
- OpenAI uses `max_completion_tokens` (required for gpt-5 and o-series models)
- Hugging Face Inference Providers are reached through their
  OpenAI-compatible router, so one client type covers both
- API keys fall back to the conventional environment variables
- Transport timeouts are set on the client so calls fail closed
"""

from __future__ import annotations

import logging
import os
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from anthropic import AsyncAnthropic
    from openai import AsyncOpenAI

logger = logging.getLogger(__name__)

HF_ROUTER_BASE_URL = "https://router.huggingface.co/v1"

DEFAULT_TIMEOUT_SECONDS = 60.0


# =============================================================================
# API key resolution
# =============================================================================


def get_openai_api_key() -> str:
    """
    Get OpenAI API key from environment.

    Raises:
        RuntimeError: If OPENAI_API_KEY is not set
    """
    api_key = os.getenv("OPENAI_API_KEY")
    if not api_key:
        raise RuntimeError("OpenAI API key required. Set OPENAI_API_KEY")
    return api_key


def get_huggingface_token() -> str:
    """
    Get Hugging Face token from environment.

    Checks HF_TOKEN, then HUGGING_FACE_KEY.

    Raises:
        RuntimeError: If no token is found
    """
    token = os.getenv("HF_TOKEN") or os.getenv("HUGGING_FACE_KEY")
    if not token:
        raise RuntimeError("Hugging Face token required. Set HF_TOKEN or HUGGING_FACE_KEY")
    return token


def get_anthropic_api_key() -> str:
    """
    Get Anthropic API key from environment.

    Raises:
        RuntimeError: If ANTHROPIC_API_KEY is not set
    """
    api_key = os.getenv("ANTHROPIC_API_KEY")
    if not api_key:
        raise RuntimeError("Anthropic API key required. Set ANTHROPIC_API_KEY")
    return api_key


# =============================================================================
# OpenAI-compatible clients (OpenAI, Hugging Face router)
# =============================================================================


def create_openai_client(
    *,
    api_key: str | None = None,
    base_url: str | None = None,
    timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS,
) -> AsyncOpenAI:
    """
    Create an async OpenAI client.

    Args:
        api_key: API key. If None, reads OPENAI_API_KEY.
        base_url: Optional custom base URL (e.g. the Hugging Face router).
        timeout_seconds: Per-request transport timeout.

    Raises:
        RuntimeError: If no API key is found
    """
    import openai

    resolved_key = api_key or get_openai_api_key()
    return openai.AsyncOpenAI(api_key=resolved_key, base_url=base_url, timeout=timeout_seconds)


def create_huggingface_client(
    *,
    api_key: str | None = None,
    base_url: str | None = None,
    timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS,
) -> AsyncOpenAI:
    """Create an async OpenAI client pointed at the Hugging Face router."""
    return create_openai_client(
        api_key=api_key or get_huggingface_token(),
        base_url=base_url or HF_ROUTER_BASE_URL,
        timeout_seconds=timeout_seconds,
    )


def _is_reasoning_model(model: str) -> bool:
    """Check if model is a reasoning model (doesn't support temperature)."""
    return model.startswith(("gpt-5", "o1", "o3", "o4"))


def _reasoning_effort(model: str) -> str:
    """Lowest effort the model accepts; only gpt-5 models take "minimal"."""
    return "minimal" if model.startswith("gpt-5") else "low"


async def openai_chat_completion(
    client: AsyncOpenAI,
    *,
    model: str,
    messages: list[dict[str, Any]],
    max_tokens: int = 1024,
    temperature: float = 0.0,
    response_format: dict[str, Any] | None = None,
    use_max_completion_tokens: bool = True,
    **kwargs: Any,
) -> Any:
    """
    Make a chat completion request with correct parameters for the model.

    Reasoning models reject `temperature`; it is omitted for them and
    `reasoning_effort` is pinned to the lowest level the model accepts.
    OpenAI-compatible routers that predate `max_completion_tokens` are
    sent `max_tokens` instead (use_max_completion_tokens=False).

    Returns:
        ChatCompletion response
    """
    token_param = "max_completion_tokens" if use_max_completion_tokens else "max_tokens"
    request_kwargs: dict[str, Any] = {
        "model": model,
        "messages": messages,
        token_param: max_tokens,
        **kwargs,
    }

    if _is_reasoning_model(model):
        request_kwargs["reasoning_effort"] = _reasoning_effort(model)
    else:
        request_kwargs["temperature"] = temperature

    if response_format:
        request_kwargs["response_format"] = response_format

    return await client.chat.completions.create(**request_kwargs)


# =============================================================================
# Anthropic
# =============================================================================


def create_anthropic_client(
    *,
    api_key: str | None = None,
    base_url: str | None = None,
    timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS,
) -> AsyncAnthropic:
    """
    Create an async Anthropic client.

    Raises:
        RuntimeError: If no API key is found
    """
    import anthropic

    resolved_key = api_key or get_anthropic_api_key()
    return anthropic.AsyncAnthropic(api_key=resolved_key, base_url=base_url, timeout=timeout_seconds)


async def anthropic_message_create(
    client: AsyncAnthropic,
    *,
    model: str,
    messages: list[dict[str, Any]],
    max_tokens: int = 1024,
    temperature: float = 0.0,
    system: str | None = None,
    **kwargs: Any,
) -> Any:
    """Make an Anthropic message creation request with consistent parameters."""
    request_kwargs: dict[str, Any] = {
        "model": model,
        "messages": messages,
        "max_tokens": max_tokens,
        "temperature": temperature,
        **kwargs,
    }

    if system:
        request_kwargs["system"] = system

    return await client.messages.create(**request_kwargs)
