"""Outcomes of project operations.

Listing, validating and rewriting TODOs report how they went through these
objects. Nothing a user can cause (an empty selection, a bad option, a file
edited behind our back) is raised; it comes back as a falsy result whose
``exit_code`` the command line passes straight to the shell.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Iterator

from tidytodo.core.diff import combine_diffs


@dataclass
class Result:
    """What one operation did.

    Attributes:
        success: False when nothing useful happened
        message: One line for the user, e.g. "TODOs formatted."
        files_changed: Files rewritten, or that a dry run would rewrite
        data: Operation payload such as the planned patches
        diff: All changes as one unified diff
        diffs: The same changes keyed by file
    """

    success: bool
    message: str
    files_changed: list[Path] = field(default_factory=list)
    data: Any = None
    diff: str | None = None
    diffs: dict[Path, str] = field(default_factory=dict)

    def __bool__(self) -> bool:
        return self.success

    def is_error(self) -> bool:
        return not self.success

    @property
    def exit_code(self) -> int:
        """Shell status for this outcome: 0 or 1."""
        return int(not self.success)


@dataclass
class ErrorResult(Result):
    """A failed operation, carrying the exception behind it when there is one."""

    success: bool = field(default=False, init=False)
    exception: Exception | None = None
    operation: str = ""

    def raise_if_error(self) -> None:
        """Turn the failure back into an exception."""
        if self.exception is not None:
            raise self.exception
        raise RuntimeError(self.message)


@dataclass
class BatchResult:
    """One result per file touched by a commit."""

    results: list[Result] = field(default_factory=list)

    @property
    def success(self) -> bool:
        return all(self.results)

    @property
    def failed(self) -> list[Result]:
        return [r for r in self.results if not r]

    @property
    def files_changed(self) -> list[Path]:
        """Changed files without repeats, first occurrence first."""
        seen: dict[Path, None] = {}
        for r in self.results:
            seen.update(dict.fromkeys(r.files_changed))
        return list(seen)

    @property
    def diffs(self) -> dict[Path, str]:
        merged: dict[Path, str] = {}
        for r in self.results:
            merged.update(r.diffs)
        return merged

    @property
    def diff(self) -> str | None:
        return combine_diffs(self.diffs) or None

    def __bool__(self) -> bool:
        return self.success

    def __len__(self) -> int:
        return len(self.results)

    def __iter__(self) -> Iterator[Result]:
        return iter(self.results)
