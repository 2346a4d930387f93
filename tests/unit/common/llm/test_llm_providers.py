"""Tests for the OpenAI-compatible and Claude providers."""

from __future__ import annotations

from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

import pytest

from src.common.llm.claude import ClaudeProvider
from src.common.llm.clients import HF_ROUTER_BASE_URL, openai_chat_completion
from src.common.llm.factory import create_llm_provider
from src.common.llm.openai import OpenAIProvider
from src.common.llm.protocols import LLMMessage, LLMProvider, MessageRole

MESSAGES = [
    LLMMessage(role=MessageRole.SYSTEM, content="Output JSON only."),
    LLMMessage(role=MessageRole.USER, content="Resolve: molly"),
]


def openai_client(content: str | None, finish_reason: str = "stop") -> MagicMock:
    client = MagicMock()
    client.chat.completions.create = AsyncMock(
        return_value=SimpleNamespace(
            choices=[
                SimpleNamespace(
                    message=SimpleNamespace(content=content),
                    finish_reason=finish_reason,
                )
            ],
            usage=SimpleNamespace(prompt_tokens=10, completion_tokens=5, total_tokens=15),
        )
    )
    return client


class TestOpenAIProvider:
    """Tests for OpenAIProvider."""

    async def test_complete_json_mode(self) -> None:
        client = openai_client('  {"resolved_name": "MDMA"}\n')
        provider = OpenAIProvider(model="gpt-4o-mini", client=client)

        response = await provider.complete(MESSAGES, max_tokens=150, json_mode=True)

        assert response.content == '{"resolved_name": "MDMA"}'
        assert response.total_tokens == 15
        kwargs = client.chat.completions.create.call_args.kwargs
        assert kwargs["response_format"] == {"type": "json_object"}
        assert kwargs["max_completion_tokens"] == 150
        assert kwargs["temperature"] == 0.0
        assert kwargs["messages"][0] == {"role": "system", "content": "Output JSON only."}

    async def test_huggingface_uses_max_tokens(self) -> None:
        client = openai_client("{}")
        provider = OpenAIProvider(
            model="meta-llama/Meta-Llama-3-70B-Instruct",
            provider_label="huggingface",
            client=client,
        )

        await provider.complete(MESSAGES, max_tokens=150)

        kwargs = client.chat.completions.create.call_args.kwargs
        assert kwargs["max_tokens"] == 150
        assert "max_completion_tokens" not in kwargs
        assert "response_format" not in kwargs

    async def test_null_content(self) -> None:
        provider = OpenAIProvider(client=openai_client(None, finish_reason="length"))

        response = await provider.complete(MESSAGES)

        assert response.content == ""
        assert response.finish_reason == "length"

    async def test_no_choices(self) -> None:
        client = MagicMock()
        client.chat.completions.create = AsyncMock(
            return_value=SimpleNamespace(choices=[], usage=None)
        )

        response = await OpenAIProvider(client=client).complete(MESSAGES)

        assert response.content == ""
        assert response.finish_reason == "empty"

    async def test_transport_errors_propagate(self) -> None:
        client = MagicMock()
        client.chat.completions.create = AsyncMock(side_effect=TimeoutError("timed out"))

        with pytest.raises(TimeoutError):
            await OpenAIProvider(client=client).complete(MESSAGES)

    def test_satisfies_protocol(self) -> None:
        assert isinstance(OpenAIProvider(client=MagicMock()), LLMProvider)


@pytest.mark.parametrize(
    "model, effort",
    [("gpt-5-mini", "minimal"), ("o3-mini", "low"), ("o4-mini", "low"), ("o1", "low")],
)
async def test_reasoning_models_skip_temperature(model: str, effort: str) -> None:
    client = openai_client("{}")

    await openai_chat_completion(client, model=model, messages=[], temperature=0.0)

    kwargs = client.chat.completions.create.call_args.kwargs
    assert "temperature" not in kwargs
    assert kwargs["reasoning_effort"] == effort


class TestClaudeProvider:
    """Tests for ClaudeProvider."""

    def make_client(self, text: str, stop_reason: str = "end_turn") -> MagicMock:
        client = MagicMock()
        client.messages.create = AsyncMock(
            return_value=SimpleNamespace(
                content=[SimpleNamespace(type="text", text=text)],
                usage=SimpleNamespace(input_tokens=12, output_tokens=4),
                stop_reason=stop_reason,
            )
        )
        return client

    async def test_system_prompt_sent_separately(self) -> None:
        client = self.make_client('{"resolved_name": "LSD"}')
        provider = ClaudeProvider(client=client)

        response = await provider.complete(MESSAGES)

        kwargs = client.messages.create.call_args.kwargs
        assert kwargs["system"] == "Output JSON only."
        assert kwargs["messages"] == [{"role": "user", "content": "Resolve: molly"}]
        assert response.total_tokens == 16

    async def test_json_mode_prefills_brace(self) -> None:
        client = self.make_client('"US": {"access_status": "Banned"}}')
        provider = ClaudeProvider(client=client)

        response = await provider.complete(MESSAGES, json_mode=True)

        assert response.content == '{"US": {"access_status": "Banned"}}'
        assert client.messages.create.call_args.kwargs["messages"][-1] == {
            "role": "assistant",
            "content": "{",
        }

    async def test_max_tokens_reported_as_length(self) -> None:
        provider = ClaudeProvider(client=self.make_client("{", stop_reason="max_tokens"))

        response = await provider.complete(MESSAGES)

        assert response.finish_reason == "length"


class TestFactory:
    """Tests for create_llm_provider."""

    def test_huggingface_router(self) -> None:
        provider = create_llm_provider("huggingface", api_key="hf_test")

        assert isinstance(provider, OpenAIProvider)
        assert provider.model_name == "meta-llama/Meta-Llama-3-70B-Instruct"
        assert str(provider._client.base_url).rstrip("/") == HF_ROUTER_BASE_URL.rstrip("/")

    def test_openai_default_model(self) -> None:
        assert create_llm_provider("openai", api_key="sk-test").model_name == "gpt-4o-mini"

    def test_unknown_provider(self) -> None:
        with pytest.raises(ValueError):
            create_llm_provider("mistral")  # type: ignore[arg-type]
