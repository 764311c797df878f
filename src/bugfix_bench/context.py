"""Per-task attempt state."""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from enum import Enum

from bugfix_bench.benchmark.base import Attempt, Task


class AttemptState(str, Enum):
    PENDING = "pending"
    ATTEMPTING = "attempting"
    RETRY_PENDING = "retry_pending"
    PASSED = "passed"
    EXHAUSTED = "exhausted"


TERMINAL_STATES = (AttemptState.PASSED, AttemptState.EXHAUSTED)


@dataclass
class TokenUsage:
    total_tokens: int = 0
    calls: int = 0

    def add(self, tokens: int) -> None:
        self.total_tokens += tokens
        self.calls += 1


@dataclass
class TaskContext:
    """Everything the attempt loop owns while it works on one task."""
    task: Task
    max_attempts: int = 3
    state: AttemptState = AttemptState.PENDING
    attempts: list[Attempt] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)
    token_usage: TokenUsage = field(default_factory=TokenUsage)
    start_time: float = field(default_factory=time.perf_counter)

    @property
    def attempts_used(self) -> int:
        return len(self.attempts)

    @property
    def attempts_remaining(self) -> int:
        return max(self.max_attempts - self.attempts_used, 0)

    @property
    def is_terminal(self) -> bool:
        return self.state in TERMINAL_STATES

    @property
    def elapsed_ms(self) -> float:
        return (time.perf_counter() - self.start_time) * 1000

    @property
    def last_attempt(self) -> Attempt | None:
        return self.attempts[-1] if self.attempts else None

    def transition(self, state: AttemptState) -> None:
        if self.is_terminal:
            raise RuntimeError(f"{self.task.name}: already terminal ({self.state.value})")
        self.state = state

    def record_attempt(self, attempt: Attempt) -> None:
        """Store a finished attempt and move to the next state.

        Passing attempts end the loop. Failing ones add their summary to
        the error feedback and either queue a retry or exhaust the task.
        """
        self.attempts.append(attempt)
        self.token_usage.add(attempt.tokens_used)
        if attempt.passed:
            self.transition(AttemptState.PASSED)
            return
        self.errors.append(attempt.error_summary)
        self.transition(AttemptState.RETRY_PENDING)
        if self.attempts_remaining == 0:
            self.transition(AttemptState.EXHAUSTED)
