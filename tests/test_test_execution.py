"""Tests for the test-command runner."""

import subprocess
import tempfile

from bugfix_bench.benchmark.base import ErrorType
from bugfix_bench.verification import TestRunner, parse_counts


def test_passing_command():
    with tempfile.TemporaryDirectory() as tmpdir:
        result = TestRunner("true").run(tmpdir)
        assert result.passed is True
        assert result.error_type == ErrorType.NONE
        assert result.exit_code == 0
        assert result.output is None
        assert result.duration_ms >= 0


def test_failing_command_without_output_is_unknown():
    with tempfile.TemporaryDirectory() as tmpdir:
        result = TestRunner("false").run(tmpdir)
        assert result.passed is False
        assert result.error_type == ErrorType.UNKNOWN
        assert result.tests_run is None


def test_counts_and_classification():
    command = "echo ' 3 pass'; echo ' 1 fail' >&2; exit 1"
    with tempfile.TemporaryDirectory() as tmpdir:
        result = TestRunner(command).run(tmpdir)
        assert result.passed is False
        assert result.error_type == ErrorType.TEST_FAILURE
        assert result.tests_passed == 3
        assert result.tests_failed == 1
        assert result.tests_run == 4
        assert "1 fail" in result.output


def test_passing_run_with_fail_count_in_output():
    with tempfile.TemporaryDirectory() as tmpdir:
        result = TestRunner("echo '2 pass'; echo '0 fail'").run(tmpdir)
        assert result.passed is True
        assert result.error_type == ErrorType.NONE
        assert result.tests_passed == 2
        assert result.tests_failed == 0


def test_runs_in_task_directory():
    with tempfile.TemporaryDirectory() as tmpdir:
        result = TestRunner("test -f marker.txt").run(tmpdir)
        assert result.passed is False
        open(f"{tmpdir}/marker.txt", "w").close()
        result = TestRunner("test -f marker.txt").run(tmpdir)
        assert result.passed is True


def test_output_excerpt_is_bounded():
    with tempfile.TemporaryDirectory() as tmpdir:
        runner = TestRunner("printf 'x%.0s' $(seq 1 500); echo; echo '1 fail'; exit 1", output_excerpt_chars=50)
        result = runner.run(tmpdir)
        assert len(result.output) == 50


def test_missing_command_is_a_normal_result():
    with tempfile.TemporaryDirectory() as tmpdir:
        result = TestRunner("definitely-not-a-real-command-xyz").run(tmpdir)
        assert result.passed is False
        assert result.exit_code == 127
        assert result.error_type == ErrorType.UNKNOWN


def test_spawn_failure_is_unknown(monkeypatch):
    def boom(*args, **kwargs):
        raise FileNotFoundError("bash")

    monkeypatch.setattr(subprocess, "run", boom)
    with tempfile.TemporaryDirectory() as tmpdir:
        result = TestRunner("true").run(tmpdir)
        assert result.passed is False
        assert result.error_type == ErrorType.UNKNOWN
        assert "bash" in result.output


def test_parse_counts_without_summary_lines():
    assert parse_counts("nothing useful here") == (None, None)
    assert parse_counts(" 4 pass\n 0 fail\nRan 4 tests") == (4, 0)
