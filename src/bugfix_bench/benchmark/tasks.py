"""Task-directory loader.

A task directory looks like::

    task-001-content-length/
        README.md        problem statement
        src/             buggy source tree (mutated only inside the sandbox)
        test/            test suite, never modified
"""

from __future__ import annotations

import re
from pathlib import Path

from .base import Task

README_NAME = "README.md"
TASK_PREFIX = "task-"

# (task-number ranges, temperature); anything unmatched falls into the hard tier
_TEMPERATURE_TIERS = [
    (((1, 10), (41, 45)), 0.1),
    (((11, 30), (51, 56), (68, 72)), 0.3),
]
_HARD_TEMPERATURE = 0.5
_DEFAULT_TEMPERATURE = 0.3


class TaskLoadError(Exception):
    """Raised when a task directory is missing its README or source tree."""


def discover_tasks(tasks_dir: str | Path, names: list[str] | None = None) -> list[Path]:
    """Return task directories, sorted by name.

    Args:
        tasks_dir: Directory holding one sub-directory per task.
        names: Optional explicit task names; ``"all"`` or an empty list
            selects every ``task-*`` directory.
    """
    root = Path(tasks_dir)
    if names and names != ["all"]:
        return [root / name for name in names]
    return sorted(
        p for p in root.iterdir()
        if p.is_dir() and p.name.startswith(TASK_PREFIX)
    )


def read_source_files(source_root: Path, extensions: list[str] | tuple[str, ...]) -> dict[str, str]:
    files: dict[str, str] = {}
    for path in sorted(source_root.rglob("*")):
        if path.is_file() and path.suffix in extensions:
            files[path.relative_to(source_root).as_posix()] = path.read_text(encoding="utf-8")
    return files


def load_task(
    task_dir: str | Path,
    source_dir: str = "src",
    extensions: list[str] | tuple[str, ...] = (".ts",),
    test_command: str = "",
) -> Task:
    """Read a task directory into an immutable Task."""
    task_dir = Path(task_dir)
    readme = task_dir / README_NAME
    source_root = task_dir / source_dir

    if not readme.is_file():
        raise TaskLoadError(f"{task_dir.name}: missing {README_NAME}")
    if not source_root.is_dir():
        raise TaskLoadError(f"{task_dir.name}: missing {source_dir}/ directory")

    return Task(
        name=task_dir.name,
        problem_statement=readme.read_text(encoding="utf-8"),
        source_files=read_source_files(source_root, extensions),
        test_command=test_command,
    )


def task_number(task_name: str) -> int | None:
    match = re.match(r"task-(\d+)", task_name)
    return int(match.group(1)) if match else None


def temperature_for_task(task_name: str) -> float:
    """Pick a sampling temperature from the task's difficulty tier."""
    number = task_number(task_name)
    if number is None:
        return _DEFAULT_TEMPERATURE
    for ranges, temperature in _TEMPERATURE_TIERS:
        if any(lo <= number <= hi for lo, hi in ranges):
            return temperature
    return _HARD_TEMPERATURE
