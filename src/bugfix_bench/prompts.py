"""Prompt rendering for fix requests."""

from __future__ import annotations

from bugfix_bench.benchmark.base import Task

FIX_PROMPT = """You are an expert Bun.js developer. Your task is to fix the buggy code below.

Task: {task_name}

## Problem Description
{problem_statement}

## Instructions
1. Read the problem carefully and understand what's broken
2. Fix ONLY the bugs - do not refactor working code
3. Think through the test cases mentally before writing code
4. Return fixed code in this format: ```{language}
// File: {source_dir}/filename.ts
[fixed code here]
```

## Buggy Source Code
{source_blocks}"""

FEEDBACK_SECTION = """

## Previous Attempts Failed

Your previous fix did not pass. Here is the specific feedback:

{attempts}

Please analyze these errors and fix the specific issues mentioned above."""


class PromptBuilder:
    """Render a task and any prior failure feedback into one request prompt.

    Output depends only on the arguments: source files are emitted in
    sorted path order so identical inputs give identical prompts.
    """

    def __init__(self, source_dir: str = "src", language: str = "typescript"):
        self.source_dir = source_dir
        self.language = language

    def build(self, task: Task, prior_errors: list[str] | None = None) -> str:
        prompt = FIX_PROMPT.format(
            task_name=task.name,
            problem_statement=task.problem_statement.strip(),
            language=self.language,
            source_dir=self.source_dir,
            source_blocks=self._render_sources(task.source_files),
        )
        if prior_errors:
            prompt += FEEDBACK_SECTION.format(attempts=self._render_feedback(prior_errors))
        return prompt

    def _render_sources(self, source_files: dict[str, str]) -> str:
        return "\n".join(
            f"\n## File: {self.source_dir}/{path}\n```{self.language}\n{content}\n```"
            for path, content in sorted(source_files.items())
        )

    @staticmethod
    def _render_feedback(errors: list[str]) -> str:
        return "\n\n".join(f"### Attempt {i}:\n{err}" for i, err in enumerate(errors, start=1))
