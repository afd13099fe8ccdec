"""Atomic application of planned patches.

The Transaction collects one patch per file together with the content the
patch was planned against. Every file's new content is computed before any
write happens, so a consistency error aborts the whole commit with nothing
written. Each file is then replaced atomically (temp file + ``os.replace``),
so a crash never leaves a half-written file.
"""
from __future__ import annotations

import logging
import os
import shutil
import tempfile
from dataclasses import dataclass, field
from pathlib import Path

from tidytodo.core.diff import combine_diffs, generate_diff
from tidytodo.core.errors import InternalConsistencyError
from tidytodo.core.results import BatchResult, ErrorResult, Result
from tidytodo.todos.models import Patch
from tidytodo.todos.mutator import apply_patch

logger = logging.getLogger(__name__)


@dataclass
class PendingChange:
    """New content for one file, and the snapshot it was computed from."""

    path: Path
    original_content: str
    new_content: str
    edit_count: int
    display_path: str


def write_atomic(path: Path, content: str) -> None:
    """Replace ``path`` with ``content`` in one rename, keeping its permissions."""
    fd, tmp_name = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.", suffix=".tmp")
    tmp_path = Path(tmp_name)
    try:
        with os.fdopen(fd, "w", encoding="utf-8", newline="") as f:
            f.write(content)
            f.flush()
            os.fsync(f.fileno())
        shutil.copymode(path, tmp_path)
        os.replace(tmp_path, path)
    except BaseException:
        tmp_path.unlink(missing_ok=True)
        raise


@dataclass
class Transaction:
    """Collect patches and write them out together.

    Parameters
    ----------
    dry_run : bool
        When True, ``commit`` only reports diffs and writes nothing.

    Examples
    --------
    >>> tx = Transaction()
    >>> for scan, patch in planned:
    ...     tx.add_patch(scan.path, scan.content, patch)
    >>> print(tx.preview())
    >>> result = tx.commit()
    """

    dry_run: bool = False
    _pending: dict[Path, PendingChange] = field(default_factory=dict)
    _error: InternalConsistencyError | None = None
    _committed: bool = False
    _rolled_back: bool = False

    def add_patch(self, path: Path, snapshot: str, patch: Patch) -> Result:
        """Compute the new content of ``path`` from ``snapshot`` and ``patch``.

        A consistency error poisons the transaction: ``commit`` will refuse to
        write anything.

        Parameters
        ----------
        path : Path
            The file to rewrite.
        snapshot : str
            The file content the patch was planned against.
        patch : Patch
            All edits for this file.

        Returns
        -------
        Result
            A pending result carrying the file's diff.
        """
        if self._committed or self._rolled_back:
            return ErrorResult(message="Transaction already finalized", operation="add_patch")

        if path in self._pending:
            self._error = InternalConsistencyError(
                "file patched twice in one transaction; merge patches first", str(path)
            )
            return ErrorResult(message=str(self._error), exception=self._error, operation="add_patch")

        try:
            new_content = apply_patch(snapshot, patch)
        except InternalConsistencyError as e:
            logger.error("Aborting rewrite: %s", e)
            self._error = e
            return ErrorResult(message=str(e), exception=e, operation="add_patch")

        if new_content == snapshot:
            return Result(success=True, message=f"No changes for {path}")

        self._pending[path] = PendingChange(path, snapshot, new_content, len(patch), patch.path)
        diff = generate_diff(snapshot, new_content, patch.path)
        return Result(
            success=True,
            message=f"[PENDING] {len(patch)} edits in {path}",
            files_changed=[path],
            diff=diff,
            diffs={path: diff},
        )

    def commit(self) -> BatchResult:
        """Write every pending change.

        Files whose on-disk content changed since the scan are left untouched
        and reported as failures; the others are still written.

        Returns
        -------
        BatchResult
            One result per file.
        """
        if self._committed:
            return BatchResult([ErrorResult(message="Transaction already committed")])
        if self._rolled_back:
            return BatchResult([ErrorResult(message="Transaction was rolled back")])

        self._committed = True

        if self._error is not None:
            return BatchResult([
                ErrorResult(
                    message=f"Aborted, no files written: {self._error}",
                    exception=self._error,
                    operation="commit",
                )
            ])

        if not self._pending:
            return BatchResult([Result(success=True, message="No changes to commit")])

        if self.dry_run:
            diffs = self._diffs()
            return BatchResult([
                Result(
                    success=True,
                    message=f"[DRY RUN] Would rewrite {len(self._pending)} files",
                    files_changed=list(self._pending),
                    diff=combine_diffs(diffs),
                    diffs=diffs,
                )
            ])

        results = [self._write(change) for change in self._pending.values()]
        return BatchResult(results)

    def rollback(self) -> Result:
        """Discard all pending changes."""
        if self._committed:
            return ErrorResult(message="Cannot rollback: transaction already committed")

        self._rolled_back = True
        count = len(self._pending)
        self._pending.clear()
        return Result(success=True, message=f"Rolled back {count} pending changes")

    @property
    def pending_count(self) -> int:
        """Number of files with pending changes."""
        return len(self._pending)

    @property
    def pending_files(self) -> list[Path]:
        """List of files with pending changes."""
        return list(self._pending)

    def preview(self) -> str:
        """Combined unified diff of all pending changes."""
        return combine_diffs(self._diffs())

    def _diffs(self) -> dict[Path, str]:
        return {
            path: generate_diff(change.original_content, change.new_content, change.display_path)
            for path, change in self._pending.items()
        }

    def _write(self, change: PendingChange) -> Result:
        path = change.path
        try:
            with path.open(encoding="utf-8", newline="") as f:
                current = f.read()
            if current != change.original_content:
                return ErrorResult(
                    message=f"{path} changed since it was scanned; not rewritten",
                    operation="commit",
                )
            write_atomic(path, change.new_content)
        except OSError as e:
            logger.error("Failed to rewrite %s: %s", path, e)
            return ErrorResult(message=f"Failed to rewrite {path}: {e}", exception=e, operation="commit")

        logger.info("Rewrote %s (%d edits)", path, change.edit_count)
        diff = generate_diff(change.original_content, change.new_content, change.display_path)
        return Result(
            success=True,
            message=f"Rewrote {path}",
            files_changed=[path],
            diff=diff,
            diffs={path: diff},
        )
