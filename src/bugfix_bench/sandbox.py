"""Snapshot/apply/restore for a task's mutable source tree.

The source directory is copied aside before a patch is written and put
back afterwards, so every attempt starts from the original buggy tree.
``SourceSandbox.scoped`` is the only way the attempt loop touches it::

    with sandbox.scoped(task_dir) as handle:
        sandbox.apply(handle, patch)
        result = runner.run(task_dir)
"""

from __future__ import annotations

import shutil
import tempfile
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass
from pathlib import Path, PurePosixPath


class SandboxError(Exception):
    """Base class for sandbox failures."""


class PatchApplyError(SandboxError):
    """A patch could not be written into the source tree."""


class SandboxRestoreError(SandboxError):
    """The source tree could not be put back; its on-disk state is unknown."""


@dataclass
class SandboxHandle:
    task_dir: Path
    source_root: Path
    backup_root: Path
    source_existed: bool
    restored: bool = False

    @property
    def backup_dir(self) -> Path:
        return self.backup_root / "source"


class SourceSandbox:
    """Owns the working copy of one task's source directory for one attempt."""

    def __init__(self, source_dir: str = "src"):
        self.source_dir = source_dir

    def snapshot(self, task_dir: str | Path) -> SandboxHandle:
        task_dir = Path(task_dir)
        source_root = task_dir / self.source_dir
        backup_root = Path(tempfile.mkdtemp(prefix=f"bugfix-bench-{task_dir.name}-"))
        handle = SandboxHandle(
            task_dir=task_dir,
            source_root=source_root,
            backup_root=backup_root,
            source_existed=source_root.is_dir(),
        )
        if handle.source_existed:
            try:
                shutil.copytree(source_root, handle.backup_dir, symlinks=True)
            except OSError:
                shutil.rmtree(backup_root, ignore_errors=True)
                raise
        return handle

    def apply(self, handle: SandboxHandle, patch: dict[str, str]) -> None:
        """Write every file in ``patch`` under the source root."""
        if handle.restored:
            raise PatchApplyError("sandbox already restored")
        targets = [(self._target_path(handle.source_root, rel), content) for rel, content in patch.items()]
        try:
            for target, content in targets:
                target.parent.mkdir(parents=True, exist_ok=True)
                target.write_bytes(content.encode("utf-8"))
        except OSError as e:
            raise PatchApplyError(f"Failed to write patch: {e}") from e

    def restore(self, handle: SandboxHandle) -> None:
        """Put the source tree back to exactly what ``snapshot`` saw.

        The backup is only deleted once the tree is back in place, so a
        failed restore leaves it on disk for manual recovery.
        """
        if handle.restored:
            return
        try:
            if handle.source_root.exists() or handle.source_root.is_symlink():
                if handle.source_root.is_dir() and not handle.source_root.is_symlink():
                    shutil.rmtree(handle.source_root)
                else:
                    handle.source_root.unlink()
            if handle.source_existed:
                shutil.copytree(handle.backup_dir, handle.source_root, symlinks=True)
        except OSError as e:
            raise SandboxRestoreError(
                f"Could not restore {handle.source_root} (backup kept at {handle.backup_dir}): {e}"
            ) from e
        handle.restored = True
        shutil.rmtree(handle.backup_root, ignore_errors=True)

    @contextmanager
    def scoped(self, task_dir: str | Path) -> Iterator[SandboxHandle]:
        """Snapshot on entry, restore on every exit path."""
        handle = self.snapshot(task_dir)
        try:
            yield handle
        finally:
            self.restore(handle)

    @staticmethod
    def _target_path(source_root: Path, relative: str) -> Path:
        rel = PurePosixPath(relative.replace("\\", "/"))
        if not relative or rel.is_absolute() or ".." in rel.parts:
            raise PatchApplyError(f"Refusing to write outside the source tree: {relative!r}")
        target = source_root.joinpath(*rel.parts)
        # Symlinks inside the tree must not lead the write anywhere else.
        root = source_root.resolve()
        resolved = target.resolve()
        if resolved != root and root not in resolved.parents:
            raise PatchApplyError(f"Refusing to write through a link out of the source tree: {relative!r}")
        return target
