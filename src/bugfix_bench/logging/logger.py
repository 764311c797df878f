"""Structured JSON benchmark logger."""

from __future__ import annotations

import json
import time
from pathlib import Path
from typing import Any

from bugfix_bench.benchmark.base import Attempt, BenchmarkResult, TestResult


class BenchmarkLogger:
    """Logs all benchmark events as structured JSON lines."""

    def __init__(self, run_id: str, output_dir: str = "benchmark-logs"):
        self.run_id = run_id
        self.output_dir = Path(output_dir)
        self.output_dir.mkdir(parents=True, exist_ok=True)
        self.log_path = self.output_dir / f"{run_id}.jsonl"
        self._events: list[dict[str, Any]] = []

    @property
    def events(self) -> list[dict[str, Any]]:
        return list(self._events)

    def _write_event(self, event: dict[str, Any]) -> None:
        event["run_id"] = self.run_id
        event["timestamp"] = time.time()
        self._events.append(event)
        with open(self.log_path, "a") as f:
            f.write(json.dumps(event, default=str) + "\n")

    def log_run_start(self, config: dict[str, Any], task_count: int) -> None:
        self._write_event({
            "event": "run_start",
            "config": config,
            "task_count": task_count,
        })

    def log_task_skipped(self, task_name: str, reason: str) -> None:
        self._write_event({
            "event": "task_skipped",
            "task_name": task_name,
            "reason": reason,
        })

    def log_task_start(self, task_name: str, source_files: list[str], max_attempts: int) -> None:
        self._write_event({
            "event": "task_start",
            "task_name": task_name,
            "source_files": source_files,
            "max_attempts": max_attempts,
        })

    def log_llm_call(
        self,
        task_name: str,
        attempt: int,
        tokens_used: int,
        duration_ms: float,
        temperature: float,
    ) -> None:
        self._write_event({
            "event": "llm_call",
            "task_name": task_name,
            "attempt": attempt,
            "tokens_used": tokens_used,
            "duration_ms": round(duration_ms, 1),
            "temperature": temperature,
        })

    def log_patch_extracted(self, task_name: str, attempt: int, files: list[str]) -> None:
        self._write_event({
            "event": "patch_extracted",
            "task_name": task_name,
            "attempt": attempt,
            "files": files,
        })

    def log_test_run(self, task_name: str, attempt: int, result: TestResult) -> None:
        self._write_event({
            "event": "test_run",
            "task_name": task_name,
            "attempt": attempt,
            "passed": result.passed,
            "error_type": result.error_type.value,
            "duration_ms": round(result.duration_ms, 1),
            "tests_run": result.tests_run,
            "tests_passed": result.tests_passed,
            "tests_failed": result.tests_failed,
        })

    def log_attempt_end(self, task_name: str, attempt: Attempt, state: str) -> None:
        self._write_event({
            "event": "attempt_end",
            "task_name": task_name,
            "attempt": attempt.number,
            "passed": attempt.passed,
            "error_type": attempt.error_type.value,
            "next_state": state,
            "feedback": attempt.error_summary[:1000],
        })

    def log_task_end(self, result: BenchmarkResult) -> None:
        self._write_event({
            "event": "task_end",
            "task_name": result.task_name,
            "result": result.to_dict(),
        })

    def log_task_error(self, task_name: str, error: BaseException) -> None:
        self._write_event({
            "event": "task_error",
            "task_name": task_name,
            "error_class": type(error).__name__,
            "error": str(error),
        })
