"""OpenAI-compatible client for OpenRouter, OpenAI and local servers (vLLM, ollama).

Reasoning models served through vLLM sometimes leave ``<think>`` blocks in
the content; they are stripped so fenced code inside a thought is never
mistaken for the answer.
"""

from __future__ import annotations

import os
import re
import time
from typing import Any

import openai
from openai import OpenAI

from .base import LLMClient, LLMResponse, ModelAPIError

OPENROUTER_BASE_URL = "https://openrouter.ai/api/v1"
LOCAL_BASE_URL = "http://localhost:8000/v1"

OPENROUTER_HEADERS = {
    "HTTP-Referer": "https://github.com/bun-bench-tasks",
    "X-Title": "Bun Benchmark",
}


def resolve_endpoint(provider: str, base_url: str | None, api_key: str | None) -> tuple[str | None, str]:
    """Fill in base URL and API key defaults for ``provider``."""
    if provider == "openrouter":
        key = api_key or os.environ.get("OPENROUTER_API_KEY")
        if not key:
            raise ModelAPIError("OPENROUTER_API_KEY not set in environment")
        return base_url or OPENROUTER_BASE_URL, key
    if provider == "openai":
        key = api_key or os.environ.get("OPENAI_API_KEY")
        if not key:
            raise ModelAPIError("OPENAI_API_KEY not set in environment")
        return base_url, key
    return base_url or LOCAL_BASE_URL, api_key or "dummy"


class OpenAICompatClient(LLMClient):
    """Chat-completions client; one user message in, text plus usage out."""

    def __init__(
        self,
        model: str,
        base_url: str | None = OPENROUTER_BASE_URL,
        api_key: str = "dummy",
        client: Any = None,
    ):
        self.model = model
        self.base_url = base_url
        headers = OPENROUTER_HEADERS if base_url == OPENROUTER_BASE_URL else None
        self.client = client or OpenAI(base_url=base_url, api_key=api_key, default_headers=headers)

    def generate(
        self,
        prompt: str,
        system: str = "",
        max_tokens: int = 6000,
        temperature: float = 0.3,
    ) -> LLMResponse:
        messages: list[dict[str, Any]] = []
        if system:
            messages.append({"role": "system", "content": system})
        messages.append({"role": "user", "content": prompt})

        start = time.perf_counter()
        try:
            response = self.client.chat.completions.create(
                model=self.model,
                messages=messages,
                max_tokens=max_tokens,
                temperature=temperature,
            )
        except openai.APIStatusError as e:
            raise ModelAPIError(f"API error: {e.status_code} - {e.message}", status_code=e.status_code) from e
        except openai.APIError as e:
            raise ModelAPIError(f"API error: {e}") from e
        duration_ms = (time.perf_counter() - start) * 1000

        try:
            text = ""
            if response.choices:
                text = _strip_thinking(response.choices[0].message.content or "")
            usage = response.usage
            tokens_used = usage.total_tokens if usage else 0
        except (AttributeError, TypeError, IndexError) as e:
            raise ModelAPIError(f"Malformed API response: {e}") from e

        return LLMResponse(
            text=text,
            tokens_used=tokens_used,
            duration_ms=duration_ms,
            model=getattr(response, "model", None) or self.model,
            raw_response=response,
        )


def _strip_thinking(text: str) -> str:
    """Remove <think>...</think> blocks from model output."""
    return re.sub(r"<think>.*?</think>\s*", "", text, flags=re.DOTALL).strip()
