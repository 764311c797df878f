"""Format failed attempts into feedback for the next prompt."""

from __future__ import annotations

import re

from bugfix_bench.benchmark.base import ErrorType, TestResult

NO_CODE_MESSAGE = "Could not extract code from model response"
ASSERTION_RE = re.compile(r"expect\((.*?)\)\.\s*(.*?)Received", re.DOTALL)


def format_test_feedback(result: TestResult) -> str:
    lines: list[str] = []
    passed = result.tests_passed or 0
    run = result.tests_run or 0

    if result.error_type in (ErrorType.SYNTAX_ERROR, ErrorType.TYPE_ERROR):
        lines.append(f"{result.error_type.value.upper()}: Fix this first.")
        if result.output:
            lines.extend(result.output.split("\n")[:3])
    elif result.error_type == ErrorType.TEST_FAILURE:
        lines.append(f"Tests: {passed}/{run} passed")
        assertions = [m.group(0) for m in ASSERTION_RE.finditer(result.output or "")]
        if assertions:
            lines.append("Failed assertions:")
            lines.extend(assertions[:3])
    else:
        lines.append(f"Error: {result.error_type.value}")
        lines.append(f"Tests: {passed}/{run} passed")

    return "\n".join(lines)


def format_api_error(error: Exception) -> str:
    return f"API Error: {error}"
