"""Anthropic Claude client."""

from __future__ import annotations

import time
from typing import Any

import anthropic

from .base import LLMClient, LLMResponse, ModelAPIError


class AnthropicClient(LLMClient):
    """Messages API client. Only text blocks of the reply are kept."""

    def __init__(self, model: str = "claude-sonnet-4-6", api_key: str | None = None, client: Any = None):
        self.model = model
        self.client = client or anthropic.Anthropic(api_key=api_key)

    def generate(
        self,
        prompt: str,
        system: str = "",
        max_tokens: int = 6000,
        temperature: float = 0.3,
    ) -> LLMResponse:
        kwargs: dict[str, Any] = {
            "model": self.model,
            "max_tokens": max_tokens,
            "temperature": temperature,
            "messages": [{"role": "user", "content": prompt}],
        }
        if system:
            kwargs["system"] = system

        start = time.perf_counter()
        try:
            response = self.client.messages.create(**kwargs)
        except anthropic.APIStatusError as e:
            raise ModelAPIError(f"API error: {e.status_code} - {e.message}", status_code=e.status_code) from e
        except anthropic.APIError as e:
            raise ModelAPIError(f"API error: {e}") from e
        duration_ms = (time.perf_counter() - start) * 1000

        try:
            text = "\n".join(block.text for block in response.content if block.type == "text")
            tokens_used = response.usage.input_tokens + response.usage.output_tokens
        except (AttributeError, TypeError) as e:
            raise ModelAPIError(f"Malformed API response: {e}") from e

        return LLMResponse(
            text=text,
            tokens_used=tokens_used,
            duration_ms=duration_ms,
            model=getattr(response, "model", None) or self.model,
            raw_response=response,
        )
