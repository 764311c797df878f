#!/usr/bin/env python3
"""CLI entry point for running the bug-fix benchmark."""

from __future__ import annotations

import argparse
import os

from dotenv import load_dotenv
load_dotenv()

from bugfix_bench.benchmark.base import BenchmarkResult
from bugfix_bench.config import BenchmarkConfig, load_config
from bugfix_bench.harness import AttemptController
from bugfix_bench.logging.logger import BenchmarkLogger
from bugfix_bench.runner import run_benchmark, save_summary


def _print_progress(task_name: str, result: BenchmarkResult | None, error: Exception | None) -> None:
    if error is not None:
        print(f"  {task_name}: ERROR {type(error).__name__}: {error}")
    elif result is None:
        print(f"  {task_name}: skipped (already recorded)")
    else:
        status = "PASSED" if result.passed else "FAILED"
        print(f"  {task_name}: {status} | Attempts: {result.attempts_used} | "
              f"Tokens: {result.tokens_used:,} | Time: {result.total_duration_ms / 1000:.1f}s")
        if not result.passed and result.errors:
            for line in result.errors[-1].split("\n")[:3]:
                print(f"     {line}")


def main() -> None:
    parser = argparse.ArgumentParser(description="Run the AI bug-fix benchmark")
    parser.add_argument("--config", help="Path to benchmark YAML config")
    parser.add_argument("tasks", nargs="*", help="Task names to run (default: all)")
    parser.add_argument("--max-attempts", type=int, help="Override harness.max_attempts")
    parser.add_argument("--retry-failed", action="store_true",
                        help="Re-run tasks whose recorded result is a failure")
    parser.add_argument("--run-id", help="Override run_id (names the log and summary files)")
    args = parser.parse_args()

    config = load_config(args.config) if args.config else BenchmarkConfig(run_id="benchmark")
    if args.run_id:
        config.run_id = args.run_id
    if args.max_attempts:
        config.harness.max_attempts = args.max_attempts
    if args.retry_failed:
        config.harness.retry_failed = True
    if os.environ.get("OPENROUTER_MODEL"):
        config.harness.llm.model = os.environ["OPENROUTER_MODEL"]

    logger = BenchmarkLogger(config.run_id, config.output_dir)
    controller = AttemptController(config=config.harness, logger=logger)

    print("=" * 60)
    print("BUG-FIX BENCHMARK")
    print("=" * 60)
    print(f"Model:        {config.harness.llm.model}")
    print(f"Max attempts: {config.harness.max_attempts}")
    print(f"Log:          {logger.log_path}")
    print("=" * 60)

    summary = run_benchmark(
        config, controller, logger=logger,
        task_names=args.tasks or None, on_task_done=_print_progress,
    )
    summary_path = save_summary(config, summary)

    print(f"\n{'=' * 60}")
    print("SUMMARY")
    print("=" * 60)
    print(f"Passed:  {summary.passed}")
    print(f"Failed:  {summary.failed}")
    print(f"Skipped: {len(summary.skipped)}")
    print(f"Errored: {len(summary.errored)}")
    if summary.results:
        print(f"Success: {summary.pass_rate:.1%}")
    print(f"\nSummary saved to {summary_path}")


if __name__ == "__main__":
    main()
