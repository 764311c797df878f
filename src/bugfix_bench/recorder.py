"""JSON artifacts written into each task directory."""

from __future__ import annotations

import json
import os
import tempfile
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from bugfix_bench.benchmark.base import Attempt, BenchmarkResult

INFERENCE_FILE = "inference-response.json"
EVALUATION_FILE = "evaluation-result.json"


def utc_timestamp() -> str:
    return datetime.now(timezone.utc).isoformat()


class ResultRecorder:
    """Reads and writes the per-task JSON artifacts."""

    def __init__(self, model: str = "unknown"):
        self.model = model

    def _write(self, path: Path, data: dict[str, Any]) -> None:
        """Write ``data`` as JSON so readers never see a half-written file."""
        fd, tmp_path = tempfile.mkstemp(prefix=f".{path.name}.", suffix=".tmp", dir=path.parent)
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(data, f, indent=2, default=str, ensure_ascii=False)
            os.replace(tmp_path, path)
        except BaseException:
            Path(tmp_path).unlink(missing_ok=True)
            raise

    def write_attempt(
        self, task_dir: Path, number: int, prompt: str, response_text: str, tokens_used: int,
    ) -> Path:
        path = Path(task_dir) / f"attempt-{number}.json"
        self._write(path, {
            "attempt": number,
            "timestamp": utc_timestamp(),
            "prompt": prompt,
            "response": response_text,
            "tokensUsed": tokens_used,
        })
        return path

    def write_inference(self, task_dir: Path, task_name: str, attempt: Attempt) -> Path:
        path = Path(task_dir) / INFERENCE_FILE
        self._write(path, {
            "taskName": task_name,
            "model": self.model,
            "timestamp": utc_timestamp(),
            "inferenceDurationMs": round(attempt.inference_duration_ms, 1),
            "attempts": attempt.number,
            "responseText": attempt.response_text,
            "tokensUsed": attempt.tokens_used,
        })
        return path

    def write_evaluation(self, task_dir: Path, result: BenchmarkResult, last: Attempt | None) -> Path:
        path = Path(task_dir) / EVALUATION_FILE
        test_result = last.test_result if last else None
        data: dict[str, Any] = {
            "taskName": result.task_name,
            "passed": result.passed,
            "durationMs": round(test_result.duration_ms, 1) if test_result else 0.0,
            "timestamp": result.timestamp,
            "errorType": result.error_type.value,
            "testsRun": test_result.tests_run if test_result else None,
            "testsPassed": test_result.tests_passed if test_result else None,
            "testsFailed": test_result.tests_failed if test_result else None,
            "attemptsUsed": result.attempts_used,
            "errors": list(result.errors),
        }
        if test_result and not test_result.passed and test_result.output:
            data["error"] = test_result.output
        self._write(path, data)
        return path

    def load_evaluation(self, task_dir: Path) -> dict[str, Any] | None:
        """Return the recorded evaluation for a task, or None if there is none.

        A file that is not a JSON object (e.g. cut off by a crash) counts as
        no record, so the task runs again.
        """
        path = Path(task_dir) / EVALUATION_FILE
        if not path.is_file():
            return None
        try:
            with open(path, encoding="utf-8") as f:
                data = json.load(f)
        except (json.JSONDecodeError, UnicodeDecodeError):
            return None
        return data if isinstance(data, dict) else None
