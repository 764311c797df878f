"""Task, attempt and result data models."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class ErrorType(str, Enum):
    NONE = "none"
    NO_CODE_GENERATED = "no_code_generated"
    SYNTAX_ERROR = "syntax_error"
    TYPE_ERROR = "type_error"
    TEST_FAILURE = "test_failure"
    TIMEOUT = "timeout"
    RUNTIME_ERROR = "runtime_error"
    API_ERROR = "api_error"
    UNKNOWN = "unknown"


@dataclass(frozen=True)
class Task:
    """A single bug-fix task: problem statement plus the buggy source tree.

    ``source_files`` maps paths relative to the task's source directory
    (``add.ts``, ``lib/util.ts``) to file content.
    """
    name: str
    problem_statement: str
    source_files: dict[str, str] = field(default_factory=dict)
    test_command: str = ""


@dataclass(frozen=True)
class TestResult:
    """Outcome of one test-command run (or of an attempt that never ran one)."""
    __test__ = False

    passed: bool
    duration_ms: float
    error_type: ErrorType
    output: str | None = None
    tests_run: int | None = None
    tests_passed: int | None = None
    tests_failed: int | None = None
    exit_code: int | None = None


@dataclass
class Attempt:
    """One prompt -> model -> patch -> test cycle."""
    number: int
    prompt: str
    test_result: TestResult
    response_text: str | None = None
    patch: dict[str, str] = field(default_factory=dict)
    tokens_used: int = 0
    inference_duration_ms: float = 0.0
    error_summary: str = ""

    @property
    def passed(self) -> bool:
        return self.test_result.passed

    @property
    def error_type(self) -> ErrorType:
        return self.test_result.error_type


@dataclass
class BenchmarkResult:
    """Terminal result of running the attempt loop on a single task."""
    task_name: str
    passed: bool
    attempts_used: int
    total_duration_ms: float
    errors: list[str] = field(default_factory=list)
    error_type: ErrorType = ErrorType.NONE
    tokens_used: int = 0
    timestamp: str = ""
    metadata: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {
            "taskName": self.task_name,
            "passed": self.passed,
            "attemptsUsed": self.attempts_used,
            "totalDurationMs": round(self.total_duration_ms, 1),
            "errorType": self.error_type.value,
            "tokensUsed": self.tokens_used,
            "timestamp": self.timestamp,
            "errors": list(self.errors),
        }
