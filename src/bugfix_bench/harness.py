"""Per-task attempt loop: prompt -> model -> patch -> sandboxed test run -> retry or stop."""

from __future__ import annotations

from pathlib import Path

from bugfix_bench.benchmark.base import Attempt, BenchmarkResult, ErrorType, TestResult
from bugfix_bench.benchmark.tasks import load_task, temperature_for_task
from bugfix_bench.config import HarnessConfig, LLMConfig
from bugfix_bench.context import AttemptState, TaskContext
from bugfix_bench.extraction import PatchExtractor
from bugfix_bench.llm.base import LLMClient, ModelAPIError
from bugfix_bench.logging.logger import BenchmarkLogger
from bugfix_bench.prompts import PromptBuilder
from bugfix_bench.recorder import ResultRecorder, utc_timestamp
from bugfix_bench.sandbox import PatchApplyError, SourceSandbox
from bugfix_bench.verification import (
    NO_CODE_MESSAGE,
    TestRunner,
    format_api_error,
    format_test_feedback,
)


class AttemptController:
    """Runs one task at a time through up to ``max_attempts`` fix attempts.

    Attempts are strictly sequential and each one that reaches the test
    stage holds the task's source directory through ``SourceSandbox.scoped``,
    so the next attempt always starts from the original tree. A failed
    restore is the only error that escapes ``run``; everything else is
    recorded against the attempt and retried.
    """

    def __init__(
        self,
        config: HarnessConfig,
        llm_client: LLMClient | None = None,
        logger: BenchmarkLogger | None = None,
        recorder: ResultRecorder | None = None,
        sandbox: SourceSandbox | None = None,
        runner: TestRunner | None = None,
    ):
        self.config = config
        self.llm_client: LLMClient = llm_client or _create_llm_client(config.llm)
        self.logger = logger
        self.prompts = PromptBuilder(config.source_dir, config.code_language)
        extension = config.source_extensions[0] if config.source_extensions else ".ts"
        self.extractor = PatchExtractor(config.source_dir, extension=extension)
        self.sandbox = sandbox or SourceSandbox(config.source_dir)
        self.runner = runner or TestRunner(config.test_command, config.output_excerpt_chars)
        self.recorder = recorder or ResultRecorder(model=config.llm.model)

    def run(self, task_dir: str | Path) -> BenchmarkResult | None:
        """Run the attempt loop on a task. Returns None if the task was skipped."""
        task_dir = Path(task_dir)

        skip_reason = self._skip_reason(task_dir)
        if skip_reason:
            if self.logger:
                self.logger.log_task_skipped(task_dir.name, skip_reason)
            return None

        task = load_task(
            task_dir,
            source_dir=self.config.source_dir,
            extensions=self.config.source_extensions,
            test_command=self.config.test_command,
        )
        context = TaskContext(task=task, max_attempts=self.config.max_attempts)

        if self.logger:
            self.logger.log_task_start(task.name, sorted(task.source_files), context.max_attempts)

        while not context.is_terminal:
            context.transition(AttemptState.ATTEMPTING)
            attempt = self._run_attempt(context, task_dir)
            context.record_attempt(attempt)
            if self.logger:
                self.logger.log_attempt_end(task.name, attempt, context.state.value)

        result = self._build_result(context)
        self._record(task_dir, context, result)

        if self.logger:
            self.logger.log_task_end(result)
        return result

    def _skip_reason(self, task_dir: Path) -> str | None:
        recorded = self.recorder.load_evaluation(task_dir)
        if recorded is None:
            return None
        if recorded.get("passed") is True:
            return "already passed"
        if not self.config.retry_failed:
            return "already exhausted"
        return None

    def _run_attempt(self, context: TaskContext, task_dir: Path) -> Attempt:
        task = context.task
        number = context.attempts_used + 1
        prompt = self.prompts.build(task, context.errors)
        temperature = self._temperature(task.name)

        try:
            response = self.llm_client.generate(
                prompt,
                system=self.config.system_prompt,
                max_tokens=self.config.llm.max_tokens,
                temperature=temperature,
            )
        except ModelAPIError as e:
            return Attempt(
                number=number,
                prompt=prompt,
                test_result=_untested(ErrorType.API_ERROR, str(e)),
                error_summary=format_api_error(e),
            )

        if self.logger:
            self.logger.log_llm_call(task.name, number, response.tokens_used, response.duration_ms, temperature)
        self.recorder.write_attempt(task_dir, number, prompt, response.text, response.tokens_used)

        attempt = Attempt(
            number=number,
            prompt=prompt,
            test_result=_untested(ErrorType.NO_CODE_GENERATED),
            response_text=response.text,
            tokens_used=response.tokens_used,
            inference_duration_ms=response.duration_ms,
            error_summary=NO_CODE_MESSAGE,
        )

        patch = self.extractor.extract(response.text)
        if not patch:
            return attempt

        attempt.patch = patch
        if self.logger:
            self.logger.log_patch_extracted(task.name, number, sorted(patch))

        try:
            with self.sandbox.scoped(task_dir) as handle:
                self.sandbox.apply(handle, patch)
                test_result = self.runner.run(task_dir, task.test_command or None)
        except PatchApplyError as e:
            attempt.test_result = _untested(ErrorType.UNKNOWN, str(e))
            attempt.error_summary = f"Patch could not be applied: {e}"
            return attempt

        if self.logger:
            self.logger.log_test_run(task.name, number, test_result)

        attempt.test_result = test_result
        attempt.error_summary = "" if test_result.passed else format_test_feedback(test_result)
        return attempt

    def _temperature(self, task_name: str) -> float:
        if self.config.llm.temperature is not None:
            return self.config.llm.temperature
        return temperature_for_task(task_name)

    def _build_result(self, context: TaskContext) -> BenchmarkResult:
        last = context.last_attempt
        return BenchmarkResult(
            task_name=context.task.name,
            passed=context.state == AttemptState.PASSED,
            attempts_used=context.attempts_used,
            total_duration_ms=context.elapsed_ms,
            errors=list(context.errors),
            error_type=last.error_type if last else ErrorType.NONE,
            tokens_used=context.token_usage.total_tokens,
            timestamp=utc_timestamp(),
        )

    def _record(self, task_dir: Path, context: TaskContext, result: BenchmarkResult) -> None:
        answered = [a for a in context.attempts if a.response_text is not None]
        if answered:
            self.recorder.write_inference(task_dir, context.task.name, answered[-1])
        self.recorder.write_evaluation(task_dir, result, context.last_attempt)


def _untested(error_type: ErrorType, message: str | None = None) -> TestResult:
    """Result for an attempt that never reached the test command."""
    return TestResult(passed=False, duration_ms=0.0, error_type=error_type, output=message)


def _create_llm_client(llm_config: LLMConfig) -> LLMClient:
    """Create LLM client based on provider config."""
    provider = llm_config.provider

    if provider == "anthropic":
        from bugfix_bench.llm.anthropic import AnthropicClient
        return AnthropicClient(model=llm_config.model, api_key=llm_config.api_key)

    if provider in ("openrouter", "openai", "vllm", "local"):
        from bugfix_bench.llm.openai_compat import OpenAICompatClient, resolve_endpoint
        base_url, api_key = resolve_endpoint(provider, llm_config.base_url, llm_config.api_key)
        return OpenAICompatClient(model=llm_config.model, base_url=base_url, api_key=api_key)

    raise ValueError(f"Unknown LLM provider: {provider}")
