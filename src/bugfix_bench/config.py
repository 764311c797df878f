"""Configuration data models for the bug-fix benchmark."""

from __future__ import annotations

from pathlib import Path

import yaml
from pydantic import BaseModel, Field


class LLMConfig(BaseModel):
    provider: str = "openrouter"  # openrouter | openai | vllm | local | anthropic
    model: str = "qwen/qwen3-next-80b-a3b-thinking"
    max_tokens: int = 6000
    temperature: float | None = None  # None -> difficulty tier of the task
    base_url: str | None = None
    api_key: str | None = None


class HarnessConfig(BaseModel):
    """Configuration for the per-task attempt loop."""
    llm: LLMConfig = Field(default_factory=LLMConfig)
    max_attempts: int = Field(default=3, ge=1)
    test_command: str = "bun test"
    source_dir: str = "src"
    source_extensions: list[str] = Field(default_factory=lambda: [".ts"])
    code_language: str = "typescript"
    output_excerpt_chars: int = 1000
    system_prompt: str = ""
    retry_failed: bool = False


class BenchmarkConfig(BaseModel):
    """Configuration for a full benchmark run."""
    run_id: str
    harness: HarnessConfig = Field(default_factory=HarnessConfig)
    tasks_dir: str = "tasks"
    task_names: list[str] = Field(default_factory=list)
    output_dir: str = "benchmark-logs"


def load_config(path: str | Path) -> BenchmarkConfig:
    """Load benchmark config from YAML file."""
    with open(path) as f:
        data = yaml.safe_load(f) or {}
    return BenchmarkConfig(**data)
