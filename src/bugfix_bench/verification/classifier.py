"""Map raw test output to a single failure category."""

from __future__ import annotations

from bugfix_bench.benchmark.base import ErrorType

# Checked in order; the first category with a matching token wins.
_RULES: list[tuple[ErrorType, tuple[str, ...]]] = [
    (ErrorType.TIMEOUT, ("timeout", "timed out")),
    (ErrorType.SYNTAX_ERROR, ("syntaxerror", "syntax error")),
    (ErrorType.TYPE_ERROR, ("typeerror", "type error")),
    (ErrorType.TEST_FAILURE, ("fail", "assert", "expect(", "expected")),
    (ErrorType.RUNTIME_ERROR, ("referenceerror", "error:")),
]


def classify(raw_output: str | None) -> ErrorType:
    """Classify test output. Empty output means nothing failed."""
    if not raw_output or not raw_output.strip():
        return ErrorType.NONE
    text = raw_output.lower()
    for error_type, tokens in _RULES:
        if any(token in text for token in tokens):
            return error_type
    return ErrorType.UNKNOWN
