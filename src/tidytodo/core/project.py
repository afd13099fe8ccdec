"""TodoProject - entry point for scanning and rewriting TODOs in a source tree."""
from __future__ import annotations

import logging
from datetime import date
from pathlib import Path
from typing import Any

from tidytodo.config import TidyTodoConfig, load_config
from tidytodo.core.errors import InternalConsistencyError
from tidytodo.core.results import ErrorResult, Result
from tidytodo.core.transaction import Transaction
from tidytodo.todos.aggregator import GroupBy, aggregate, group_key_for
from tidytodo.todos.codemods import build_codemod
from tidytodo.todos.exporter import export
from tidytodo.todos.filters import TodoFilters
from tidytodo.todos.finder import iter_source_files, split_glob
from tidytodo.todos.models import AnnotationRecord, Patch, ValidationViolation
from tidytodo.todos.mutator import Predicate, RecordEdit, plan_format, plan_mutation
from tidytodo.todos.scanner import ScanResult, TodoScanner
from tidytodo.todos.validator import RuleSet, validate_all

logger = logging.getLogger(__name__)


class TodoProject:
    """
    Main entry point for TODO operations over a source tree.

    Parameters
    ----------
    path : str | Path
        A directory, a single file, or a glob pattern.
        - Directory: every text file below it (recursive)
        - File: just this file
        - Glob pattern: all files matching it (e.g. "src/**/*.rs")
    dry_run : bool, optional
        If True, rewriting operations report a diff instead of writing.
    config : TidyTodoConfig | None, optional
        Project defaults. Loaded from the nearest pyproject.toml when omitted.

    Examples
    --------
    >>> project = TodoProject("src/")
    >>> for record in project.find_todos(TodoFilters(unassigned=True)):
    ...     print(record.location, record.note)
    >>>
    >>> # Preview a bulk edit
    >>> project = TodoProject("src/", dry_run=True)
    >>> print(project.modify("add-issue-for-all-untracked", issue="#123").diff)
    """

    def __init__(
        self,
        path: str | Path,
        dry_run: bool = False,
        config: TidyTodoConfig | None = None,
    ) -> None:
        self.path = Path(path) if isinstance(path, str) else path
        self.dry_run = dry_run
        self._config = config
        self._files: list[Path] | None = None
        self._root_path: Path | None = None

    @property
    def root(self) -> Path:
        """Directory record paths are shown relative to."""
        if self._root_path is None:
            if self.path.is_file():
                self._root_path = self.path.parent.resolve()
            elif self.path.is_dir():
                self._root_path = self.path.resolve()
            else:
                base, _ = split_glob(self.path)
                self._root_path = base.resolve()
        return self._root_path

    @property
    def config(self) -> TidyTodoConfig:
        """Project configuration, loaded lazily."""
        if self._config is None:
            self._config = load_config(self.root)
        return self._config

    @property
    def files(self) -> list[Path]:
        """Files in the working set. Lazily computed on first access."""
        if self._files is None:
            self._files = iter_source_files(self.path, self.config.exclude)
        return self._files

    def scan(self) -> ScanResult:
        """Read and parse every file in the working set.

        Each call reads the files afresh.
        """
        scanner = TodoScanner(workers=self.config.workers)
        return scanner.scan_files(self.files, root=self.root)

    # -------------------------------------------------------------------------
    # Read-only operations
    # -------------------------------------------------------------------------

    def find_todos(
        self,
        filters: TodoFilters | None = None,
        today: date | None = None,
        scan: ScanResult | None = None,
    ) -> list[AnnotationRecord]:
        """Records matching ``filters``, in (path, line) order."""
        records = (scan if scan is not None else self.scan()).records
        if filters is None:
            return records
        return filters.apply(records, today)

    def stat(
        self,
        group_by: GroupBy | str = GroupBy.TOTAL,
        filters: TodoFilters | None = None,
        today: date | None = None,
        scan: ScanResult | None = None,
    ) -> dict[str, int]:
        """Count matching records per group."""
        records = self.find_todos(filters, today, scan)
        return aggregate(records, group_key_for(group_by, today))

    def validate(
        self, ruleset: RuleSet | None = None, scan: ScanResult | None = None
    ) -> list[ValidationViolation]:
        """Check every record against ``ruleset`` (the configured rules by default)."""
        ruleset = ruleset or self.config.ruleset()
        return validate_all((scan if scan is not None else self.scan()).records, ruleset)

    def export(self, tool_version: str, scan: ScanResult | None = None) -> dict[str, Any]:
        """The export document for every record."""
        return export((scan if scan is not None else self.scan()).records, tool_version)

    # -------------------------------------------------------------------------
    # Rewriting operations
    # -------------------------------------------------------------------------

    def format(self, scan: ScanResult | None = None) -> Result:
        """Rewrite every non-canonical TODO into canonical form."""
        scan = scan if scan is not None else self.scan()
        if not scan.records:
            return ErrorResult(message="No TODOs found", operation="format")

        try:
            patches = plan_format(scan.records)
        except InternalConsistencyError as e:
            return ErrorResult(message=str(e), exception=e, operation="format")

        if not patches:
            return Result(success=True, message="All TODOs already formatted.")
        return self._apply(scan, patches, "TODOs formatted.")

    def modify(self, name: str, scan: ScanResult | None = None, **options: str | None) -> Result:
        """Run a predefined code mod.

        Parameters
        ----------
        name : str
            Code mod name, e.g. "rename-assignee".
        **options : str | None
            Code mod options (``issue``, ``assignee``, ``from_``, ``to``, ``date``).

        Returns
        -------
        Result
            Falsy when the options are invalid or no TODO was selected.
        """
        try:
            codemod = build_codemod(name, **options)
        except ValueError as e:
            return ErrorResult(message=str(e), exception=e, operation=name)

        return self.mutate(
            codemod.predicate,
            codemod.edit,
            done_message=codemod.done_message,
            empty_message=codemod.empty_message,
            operation=codemod.name,
            scan=scan,
        )

    def mutate(
        self,
        predicate: Predicate,
        edit: RecordEdit,
        done_message: str = "TODOs updated.",
        empty_message: str = "No matching TODOs",
        operation: str = "mutate",
        scan: ScanResult | None = None,
    ) -> Result:
        """Apply ``edit`` to every record ``predicate`` selects.

        Returns
        -------
        Result
            Falsy with ``empty_message`` when nothing was selected.
        """
        scan = scan if scan is not None else self.scan()
        if not any(predicate(r) for r in scan.records):
            return ErrorResult(message=empty_message, operation=operation)

        try:
            patches = plan_mutation(scan.records, predicate, edit)
        except InternalConsistencyError as e:
            return ErrorResult(message=str(e), exception=e, operation=operation)

        if not patches:
            return Result(success=True, message=done_message)
        return self._apply(scan, patches, done_message)

    def transaction(self) -> Transaction:
        """A new transaction honouring this project's dry-run setting."""
        return Transaction(dry_run=self.dry_run)

    def _apply(self, scan: ScanResult, patches: list[Patch], done_message: str) -> Result:
        tx = self.transaction()
        for patch in patches:
            file_scan = scan.files[patch.path]
            tx.add_patch(file_scan.path, file_scan.content, patch)

        batch = tx.commit()
        if not batch.success:
            failure = batch.failed[0]
            message = "; ".join(r.message for r in batch.failed)
            return ErrorResult(
                message=message,
                files_changed=batch.files_changed,
                exception=getattr(failure, "exception", None),
                data=patches,
                diff=batch.diff,
                diffs=batch.diffs,
            )

        message = done_message
        if self.dry_run:
            message = f"[DRY RUN] {done_message}"
        return Result(
            success=True,
            message=message,
            files_changed=batch.files_changed,
            data=patches,
            diff=batch.diff,
            diffs=batch.diffs,
        )
