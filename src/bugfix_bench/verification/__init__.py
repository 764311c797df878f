"""Test execution, failure classification and feedback."""

from .classifier import classify
from .feedback import NO_CODE_MESSAGE, format_api_error, format_test_feedback
from .test_execution import TestRunner, parse_counts

__all__ = [
    "NO_CODE_MESSAGE",
    "TestRunner",
    "classify",
    "format_api_error",
    "format_test_feedback",
    "parse_counts",
]
