"""Turn files or comment lines into sorted records and diagnostics.

Files are independent, so they are read and parsed on a thread pool. Each
worker owns its file; results are only merged, and put in (path, line)
order, once every file is done.
"""
from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable

from tidytodo.todos.finder import find_comments, read_source
from tidytodo.todos.models import AnnotationRecord, CommentLine, ParseDiagnostic
from tidytodo.todos.parser import AnnotationParser

logger = logging.getLogger(__name__)


@dataclass
class FileScan:
    """Records found in one file, with the content they were parsed from.

    ``content`` is the snapshot any patch for this file is applied to.
    """

    key: str
    path: Path
    content: str
    records: list[AnnotationRecord] = field(default_factory=list)
    diagnostics: list[ParseDiagnostic] = field(default_factory=list)


@dataclass
class ScanResult:
    """Everything one scan produced."""

    files: dict[str, FileScan] = field(default_factory=dict)
    skipped: list[Path] = field(default_factory=list)

    @property
    def records(self) -> list[AnnotationRecord]:
        """All records, ordered by path then line."""
        return sort_records(r for scan in self.files.values() for r in scan.records)

    @property
    def diagnostics(self) -> list[ParseDiagnostic]:
        """All diagnostics, ordered by path then line."""
        return sorted(
            (d for scan in self.files.values() for d in scan.diagnostics),
            key=lambda d: (d.path, d.line),
        )

    def __len__(self) -> int:
        return sum(len(scan.records) for scan in self.files.values())


def sort_records(records: Iterable[AnnotationRecord]) -> list[AnnotationRecord]:
    """Put records in the deterministic (path, line) order."""
    return sorted(records, key=AnnotationRecord.sort_key)


class TodoScanner:
    """Parse TODO annotations from comment lines or whole files.

    Parameters
    ----------
    parser : AnnotationParser | None
        Parser to use. A default one is created when omitted.
    workers : int
        Number of threads used by ``scan_files``.

    Examples
    --------
    >>> scanner = TodoScanner(workers=4)
    >>> result = scanner.scan_files(files, root=Path("src"))
    >>> for record in result.records:
    ...     print(record.location, record.note)
    """

    def __init__(self, parser: AnnotationParser | None = None, workers: int = 1) -> None:
        self._parser = parser or AnnotationParser()
        self._workers = max(1, workers)

    def scan_comments(
        self, comments: Iterable[CommentLine]
    ) -> tuple[list[AnnotationRecord], list[ParseDiagnostic]]:
        """Parse collaborator-supplied comment lines.

        Returns
        -------
        tuple[list[AnnotationRecord], list[ParseDiagnostic]]
            Records and diagnostics, each in (path, line) order.
        """
        records: list[AnnotationRecord] = []
        diagnostics: list[ParseDiagnostic] = []
        for result in self._parser.parse_comments(comments):
            if result.record is not None:
                records.append(result.record)
            if result.diagnostic is not None:
                diagnostics.append(result.diagnostic)
        return (
            sort_records(records),
            sorted(diagnostics, key=lambda d: (d.path, d.line)),
        )

    def scan_text(self, key: str, path: Path, content: str) -> FileScan:
        """Parse the comments of one file's content."""
        records, diagnostics = self.scan_comments(find_comments(key, path, content))
        return FileScan(key, path, content, records, diagnostics)

    def scan_file(self, path: Path, key: str | None = None) -> FileScan | None:
        """Read and parse one file; None when it cannot be read as text."""
        content = read_source(path)
        if content is None:
            return None
        return self.scan_text(key or str(path), path, content)

    def scan_files(self, paths: Iterable[Path], root: Path | None = None) -> ScanResult:
        """Scan many files in parallel.

        Parameters
        ----------
        paths : Iterable[Path]
            Files to scan.
        root : Path | None
            When given, record paths are shown relative to it.

        Returns
        -------
        ScanResult
            Per-file scans keyed by display path, plus skipped files.
        """
        jobs = [(path, self._display_key(path, root)) for path in paths]
        result = ScanResult()

        with ThreadPoolExecutor(max_workers=self._workers) as pool:
            scans = list(pool.map(lambda job: self.scan_file(*job), jobs))

        for (path, key), scan in zip(jobs, scans):
            if scan is None:
                result.skipped.append(path)
            elif scan.records or scan.diagnostics:
                result.files[key] = scan

        logger.info(
            "Scanned %d files: %d TODOs, %d diagnostics, %d skipped",
            len(jobs),
            len(result),
            len(result.diagnostics),
            len(result.skipped),
        )
        return result

    @staticmethod
    def _display_key(path: Path, root: Path | None) -> str:
        if root is not None:
            try:
                return path.relative_to(root).as_posix()
            except ValueError:
                pass
        return path.as_posix()
