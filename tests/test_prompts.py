"""Tests for prompt rendering."""

from bugfix_bench.benchmark.base import Task
from bugfix_bench.prompts import PromptBuilder


def _make_task() -> Task:
    return Task(
        name="task-001-add",
        problem_statement="add(2, 3) should return 5.\n",
        source_files={
            "zeta.ts": "export const z = 1;",
            "add.ts": "export function add(a,b){return a-b}",
        },
    )


def test_prompt_contains_task_and_sources():
    prompt = PromptBuilder().build(_make_task())
    assert "Task: task-001-add" in prompt
    assert "add(2, 3) should return 5." in prompt
    assert "## File: src/add.ts\n```typescript\nexport function add(a,b){return a-b}\n```" in prompt
    assert prompt.index("src/add.ts") < prompt.index("src/zeta.ts")
    assert "Previous Attempts Failed" not in prompt


def test_prompt_is_deterministic():
    builder = PromptBuilder()
    errors = ["Tests: 0/1 passed"]
    assert builder.build(_make_task(), errors) == builder.build(_make_task(), list(errors))


def test_empty_error_list_adds_no_feedback():
    builder = PromptBuilder()
    assert builder.build(_make_task(), []) == builder.build(_make_task())


def test_feedback_lists_attempts_in_order():
    prompt = PromptBuilder().build(_make_task(), ["first failure", "second failure"])
    assert "## Previous Attempts Failed" in prompt
    assert "### Attempt 1:\nfirst failure" in prompt
    assert "### Attempt 2:\nsecond failure" in prompt
    assert prompt.index("first failure") < prompt.index("second failure")
    assert prompt.rstrip().endswith("fix the specific issues mentioned above.")


def test_custom_source_dir_and_language():
    prompt = PromptBuilder(source_dir="lib", language="javascript").build(_make_task())
    assert "## File: lib/add.ts\n```javascript" in prompt
    assert "// File: lib/filename.ts" in prompt
