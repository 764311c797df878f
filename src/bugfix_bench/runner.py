"""Sequential benchmark driver: every task runs to completion before the next starts."""

from __future__ import annotations

import json
from collections.abc import Callable
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from bugfix_bench.benchmark.base import BenchmarkResult
from bugfix_bench.benchmark.tasks import discover_tasks
from bugfix_bench.config import BenchmarkConfig
from bugfix_bench.harness import AttemptController
from bugfix_bench.logging.logger import BenchmarkLogger


@dataclass
class RunSummary:
    results: list[BenchmarkResult] = field(default_factory=list)
    skipped: list[str] = field(default_factory=list)
    errored: dict[str, str] = field(default_factory=dict)

    @property
    def passed(self) -> int:
        return sum(1 for r in self.results if r.passed)

    @property
    def failed(self) -> int:
        return len(self.results) - self.passed

    @property
    def pass_rate(self) -> float:
        return self.passed / len(self.results) if self.results else 0.0


def run_benchmark(
    config: BenchmarkConfig,
    controller: AttemptController,
    logger: BenchmarkLogger | None = None,
    task_names: list[str] | None = None,
    on_task_done: Callable[[str, BenchmarkResult | None, Exception | None], None] | None = None,
) -> RunSummary:
    """Run every selected task through ``controller`` one after another.

    An exception from one task (including a failed sandbox restore) is
    recorded and the run moves on to the next task.
    """
    task_dirs = discover_tasks(config.tasks_dir, task_names or config.task_names)
    summary = RunSummary()

    if logger:
        logger.log_run_start(config.model_dump(), len(task_dirs))

    for task_dir in task_dirs:
        try:
            result = controller.run(task_dir)
        except Exception as e:
            summary.errored[task_dir.name] = f"{type(e).__name__}: {e}"
            if logger:
                logger.log_task_error(task_dir.name, e)
            if on_task_done:
                on_task_done(task_dir.name, None, e)
            continue

        if result is None:
            summary.skipped.append(task_dir.name)
        else:
            summary.results.append(result)
        if on_task_done:
            on_task_done(task_dir.name, result, None)

    return summary


def save_summary(config: BenchmarkConfig, summary: RunSummary, model: str = "") -> Path:
    summary_path = Path(config.output_dir) / f"{config.run_id}_summary.json"
    summary_path.parent.mkdir(parents=True, exist_ok=True)

    data: dict[str, Any] = {
        "run_id": config.run_id,
        "model": model or config.harness.llm.model,
        "config": config.model_dump(),
        "pass_rate": summary.pass_rate,
        "passed": summary.passed,
        "failed": summary.failed,
        "skipped": len(summary.skipped),
        "errored": len(summary.errored),
        "total_tokens": sum(r.tokens_used for r in summary.results),
        "avg_attempts": (
            sum(r.attempts_used for r in summary.results) / len(summary.results)
            if summary.results else 0
        ),
        "results": [r.to_dict() for r in summary.results],
        "skipped_tasks": summary.skipped,
        "errors": summary.errored,
    }
    with open(summary_path, "w") as f:
        json.dump(data, f, indent=2, default=str)
    return summary_path
