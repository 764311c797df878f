"""Tests for model clients."""

from types import SimpleNamespace

import httpx
import openai
import pytest

from bugfix_bench.config import LLMConfig
from bugfix_bench.harness import _create_llm_client
from bugfix_bench.llm.anthropic import AnthropicClient
from bugfix_bench.llm.base import ModelAPIError
from bugfix_bench.llm.openai_compat import OpenAICompatClient, resolve_endpoint


class _FakeCompletions:
    def __init__(self, response=None, error=None):
        self.response = response
        self.error = error
        self.calls = []

    def create(self, **kwargs):
        self.calls.append(kwargs)
        if self.error is not None:
            raise self.error
        return self.response


def _fake_client(completions: _FakeCompletions) -> SimpleNamespace:
    return SimpleNamespace(chat=SimpleNamespace(completions=completions))


def _completion(content, total_tokens=42):
    return SimpleNamespace(
        choices=[SimpleNamespace(message=SimpleNamespace(content=content))],
        usage=SimpleNamespace(total_tokens=total_tokens),
        model="qwen/test",
    )


def test_generate_sends_single_user_message():
    completions = _FakeCompletions(response=_completion("<think>hmm</think>\nfixed code"))
    client = OpenAICompatClient(model="qwen/test", client=_fake_client(completions))

    response = client.generate("fix it", max_tokens=100, temperature=0.1)

    assert response.text == "fixed code"
    assert response.tokens_used == 42
    assert response.duration_ms >= 0
    call = completions.calls[0]
    assert call["messages"] == [{"role": "user", "content": "fix it"}]
    assert call["max_tokens"] == 100
    assert call["temperature"] == 0.1


def test_system_prompt_is_optional():
    completions = _FakeCompletions(response=_completion("ok"))
    client = OpenAICompatClient(model="m", client=_fake_client(completions))
    client.generate("fix it", system="be brief")
    assert completions.calls[0]["messages"][0] == {"role": "system", "content": "be brief"}


def test_empty_completion_is_not_an_error():
    completions = _FakeCompletions(response=_completion(None, total_tokens=0))
    client = OpenAICompatClient(model="m", client=_fake_client(completions))
    response = client.generate("fix it")
    assert response.text == ""
    assert response.is_empty


def test_connection_error_becomes_model_api_error():
    request = httpx.Request("POST", "https://openrouter.ai/api/v1/chat/completions")
    completions = _FakeCompletions(error=openai.APIConnectionError(request=request))
    client = OpenAICompatClient(model="m", client=_fake_client(completions))

    with pytest.raises(ModelAPIError) as exc_info:
        client.generate("fix it")
    assert isinstance(exc_info.value.__cause__, openai.APIConnectionError)


def test_status_error_keeps_status_code():
    request = httpx.Request("POST", "https://openrouter.ai/api/v1/chat/completions")
    response = httpx.Response(429, request=request, json={"error": "rate limited"})
    error = openai.RateLimitError("rate limited", response=response, body=None)
    client = OpenAICompatClient(model="m", client=_fake_client(_FakeCompletions(error=error)))

    with pytest.raises(ModelAPIError) as exc_info:
        client.generate("fix it")
    assert exc_info.value.status_code == 429


def test_openrouter_requires_api_key(monkeypatch):
    monkeypatch.delenv("OPENROUTER_API_KEY", raising=False)
    with pytest.raises(ModelAPIError):
        resolve_endpoint("openrouter", None, None)

    monkeypatch.setenv("OPENROUTER_API_KEY", "sk-test")
    assert resolve_endpoint("openrouter", None, None) == ("https://openrouter.ai/api/v1", "sk-test")


def test_local_provider_defaults():
    assert resolve_endpoint("vllm", None, None) == ("http://localhost:8000/v1", "dummy")


def test_unknown_provider():
    with pytest.raises(ValueError):
        _create_llm_client(LLMConfig(provider="carrier-pigeon"))


def test_malformed_completion_becomes_model_api_error():
    completions = _FakeCompletions(response=SimpleNamespace(usage=None))
    client = OpenAICompatClient(model="m", client=_fake_client(completions))

    with pytest.raises(ModelAPIError) as exc_info:
        client.generate("fix it")
    assert isinstance(exc_info.value.__cause__, AttributeError)


def test_anthropic_joins_text_blocks():
    message = SimpleNamespace(
        content=[
            SimpleNamespace(type="thinking", thinking="hmm"),
            SimpleNamespace(type="text", text="fixed code"),
        ],
        usage=SimpleNamespace(input_tokens=30, output_tokens=12),
        model="claude-test",
    )
    messages = _FakeCompletions(response=message)
    client = AnthropicClient(model="claude-test", client=SimpleNamespace(messages=messages))

    response = client.generate("fix it", system="be brief")

    assert response.text == "fixed code"
    assert response.tokens_used == 42
    assert messages.calls[0]["system"] == "be brief"


def test_anthropic_malformed_message_becomes_model_api_error():
    messages = _FakeCompletions(response=SimpleNamespace(content=None, usage=None))
    client = AnthropicClient(model="claude-test", client=SimpleNamespace(messages=messages))

    with pytest.raises(ModelAPIError):
        client.generate("fix it")
