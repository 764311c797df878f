"""Abstract base class for model clients."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any


class ModelAPIError(Exception):
    """Network, auth or non-2xx failure talking to the completion API.

    Kept separate from an empty completion: that is not an API failure
    and is reported as ``no_code_generated`` by the caller.
    """

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


@dataclass
class LLMResponse:
    """Response from a single completion call."""
    text: str
    tokens_used: int = 0
    duration_ms: float = 0.0
    model: str = ""
    raw_response: Any = None

    @property
    def is_empty(self) -> bool:
        return not self.text.strip()


class LLMClient(ABC):
    """Abstract base for completion API clients."""

    model: str = ""

    @abstractmethod
    def generate(
        self,
        prompt: str,
        system: str = "",
        max_tokens: int = 6000,
        temperature: float = 0.3,
    ) -> LLMResponse:
        """Send ``prompt`` as a single user message and return the completion."""
        ...
