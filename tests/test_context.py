"""Tests for attempt-state transitions."""

import pytest

from bugfix_bench.benchmark.base import Attempt, ErrorType, Task, TestResult
from bugfix_bench.context import AttemptState, TaskContext


def _attempt(number: int, passed: bool) -> Attempt:
    result = TestResult(passed=passed, duration_ms=1.0, error_type=ErrorType.NONE if passed else ErrorType.TEST_FAILURE)
    return Attempt(number=number, prompt="p", test_result=result, tokens_used=3,
                   error_summary="" if passed else f"failure {number}")


def test_failures_retry_then_exhaust():
    ctx = TaskContext(task=Task(name="t", problem_statement="x"), max_attempts=2)
    assert ctx.state == AttemptState.PENDING

    ctx.transition(AttemptState.ATTEMPTING)
    ctx.record_attempt(_attempt(1, passed=False))
    assert ctx.state == AttemptState.RETRY_PENDING
    assert ctx.attempts_remaining == 1

    ctx.transition(AttemptState.ATTEMPTING)
    ctx.record_attempt(_attempt(2, passed=False))
    assert ctx.state == AttemptState.EXHAUSTED
    assert ctx.errors == ["failure 1", "failure 2"]
    assert ctx.token_usage.total_tokens == 6


def test_pass_is_terminal():
    ctx = TaskContext(task=Task(name="t", problem_statement="x"))
    ctx.transition(AttemptState.ATTEMPTING)
    ctx.record_attempt(_attempt(1, passed=True))
    assert ctx.is_terminal
    assert ctx.errors == []
    with pytest.raises(RuntimeError):
        ctx.transition(AttemptState.ATTEMPTING)
