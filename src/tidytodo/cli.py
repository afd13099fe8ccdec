"""Command-line interface.

Every command scans the tree at ``--path``, prints its output, reports parse
diagnostics on stderr, and returns the process exit code.
"""
from __future__ import annotations

import json
import logging
import sys
from datetime import date
from typing import Annotated, Literal, Optional

from cyclopts import App, Parameter
from rich.console import Console

from tidytodo import __version__
from tidytodo.core.project import TodoProject
from tidytodo.core.results import Result
from tidytodo.todos.aggregator import GroupBy
from tidytodo.todos.filters import TodoFilters
from tidytodo.todos.parser import parse_due_date
from tidytodo.todos.reporter import (
    TodoReporter,
    format_counts,
    format_diagnostics,
    format_violations,
)
from tidytodo.todos.scanner import ScanResult

app = App(
    name="tidytodo",
    help="Find, lint, and bulk-edit structured TODO comments.",
    version=__version__,
)

# Notes and issue refs contain square brackets; never treat output as markup.
console = Console(markup=False, highlight=False, emoji=False, soft_wrap=True)
err_console = Console(stderr=True, markup=False, highlight=False, emoji=False, soft_wrap=True)


def _setup_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )


def _scan(path: str, verbose: bool, dry_run: bool = False) -> tuple[TodoProject, ScanResult]:
    _setup_logging(verbose)
    project = TodoProject(path, dry_run=dry_run)
    return project, project.scan()


def _report_diagnostics(scan: ScanResult) -> None:
    if scan.diagnostics:
        err_console.print(format_diagnostics(scan.diagnostics))


def _report_result(result: Result) -> int:
    if result.diff:
        console.print(result.diff.rstrip("\n"))
    if result.success:
        console.print(result.message)
    else:
        err_console.print(f"ERROR: {result.message}")
    return result.exit_code


def _filters(
    assignee: Optional[list[str]],
    unassigned: bool,
    issue: Optional[list[str]],
    untracked: bool,
    due: Optional[list[str]],
    someday: bool,
    overdue: bool,
) -> TodoFilters:
    due_dates = None
    if due is not None:
        due_dates = []
        for value in due:
            parsed = parse_due_date(value)
            if parsed is None:
                raise ValueError(f'Invalid date "{value}", expected YYYY-MM-DD')
            due_dates.append(parsed)

    return TodoFilters(
        assignee=tuple(assignee) if assignee is not None else None,
        unassigned=unassigned,
        issue=tuple(issue) if issue is not None else None,
        untracked=untracked,
        due=tuple(due_dates) if due_dates is not None else None,
        someday=someday,
        overdue=overdue,
    )


@app.command(name="list")
def list_todos(
    *,
    assignee: Optional[list[str]] = None,
    unassigned: bool = False,
    issue: Optional[list[str]] = None,
    untracked: bool = False,
    due: Optional[list[str]] = None,
    someday: bool = False,
    overdue: bool = False,
    path: str = ".",
    verbose: bool = False,
) -> int:
    """List TODOs, optionally filtered.

    Args:
        assignee: Only TODOs assigned to this handle (repeatable).
        unassigned: Only TODOs without an assignee.
        issue: Only TODOs citing this issue (repeatable).
        untracked: Only TODOs without an issue.
        due: Only TODOs due on this date (repeatable).
        someday: Only TODOs without a due date.
        overdue: Only TODOs whose due date has passed.
        path: Directory, file, or glob to scan.
        verbose: Enable debug logging.
    """
    try:
        filters = _filters(assignee, unassigned, issue, untracked, due, someday, overdue)
    except ValueError as e:
        err_console.print(f"ERROR: {e}")
        return 1

    project, scan = _scan(path, verbose)
    records = project.find_todos(filters, date.today(), scan=scan)
    _report_diagnostics(scan)

    if not records:
        console.print("<no TODOs>")
        return 1
    console.print(TodoReporter(records).to_list())
    return 0


@app.command
def stat(
    *,
    group_by: Optional[Literal["assignee", "issue", "due", "overdue"]] = None,
    assignee: Optional[list[str]] = None,
    unassigned: bool = False,
    issue: Optional[list[str]] = None,
    untracked: bool = False,
    due: Optional[list[str]] = None,
    someday: bool = False,
    overdue: bool = False,
    path: str = ".",
    verbose: bool = False,
) -> int:
    """Count TODOs, in total or per group.

    Args:
        group_by: Count per assignee, issue, due date, or overdue bucket.
        assignee: Only TODOs assigned to this handle (repeatable).
        unassigned: Only TODOs without an assignee.
        issue: Only TODOs citing this issue (repeatable).
        untracked: Only TODOs without an issue.
        due: Only TODOs due on this date (repeatable).
        someday: Only TODOs without a due date.
        overdue: Only TODOs whose due date has passed.
        path: Directory, file, or glob to scan.
        verbose: Enable debug logging.
    """
    try:
        filters = _filters(assignee, unassigned, issue, untracked, due, someday, overdue)
    except ValueError as e:
        err_console.print(f"ERROR: {e}")
        return 1

    project, scan = _scan(path, verbose)
    today = date.today()
    _report_diagnostics(scan)

    if group_by is None:
        console.print(str(len(project.find_todos(filters, today, scan=scan))))
        return 0

    counts = project.stat(GroupBy(group_by), filters, today, scan=scan)
    if counts:
        console.print(format_counts(counts))
    return 0


@app.command
def validate(
    *,
    require_assignees: bool = False,
    require_due_dates: bool = False,
    require_issues: bool = False,
    path: str = ".",
    verbose: bool = False,
) -> int:
    """Check TODOs against the required-metadata rules.

    Exits non-zero when any TODO violates a rule. Rules enabled in
    ``[tool.tidytodo]`` apply as well.

    Args:
        require_assignees: Every TODO needs an assignee.
        require_due_dates: Every TODO needs a due date.
        require_issues: Every TODO needs an issue reference.
        path: Directory, file, or glob to scan.
        verbose: Enable debug logging.
    """
    project, scan = _scan(path, verbose)
    ruleset = project.config.ruleset(require_assignees, require_issues, require_due_dates)
    violations = project.validate(ruleset, scan=scan)
    _report_diagnostics(scan)

    if violations:
        console.print(format_violations(violations))
        return 1
    console.print("No TODO formatting errors found. Great job!")
    return 0


@app.command(name="format")
def format_todos(
    *,
    dry_run: bool = False,
    path: str = ".",
    verbose: bool = False,
) -> int:
    """Rewrite every TODO into canonical form in place.

    Args:
        dry_run: Print the diff instead of writing files.
        path: Directory, file, or glob to scan.
        verbose: Enable debug logging.
    """
    project, scan = _scan(path, verbose, dry_run=dry_run)
    _report_diagnostics(scan)
    return _report_result(project.format(scan=scan))


@app.command(name="export")
def export_todos(
    fmt: Annotated[Literal["json"], Parameter(name="format")] = "json",
    *,
    path: str = ".",
    verbose: bool = False,
) -> int:
    """Print every TODO in the versioned export schema.

    Args:
        fmt: Output format.
        path: Directory, file, or glob to scan.
        verbose: Enable debug logging.
    """
    project, scan = _scan(path, verbose)
    _report_diagnostics(scan)
    console.print(json.dumps(project.export(__version__, scan=scan), indent=2))
    return 0


@app.command
def mod(
    operation: str,
    *,
    issue: Optional[str] = None,
    assignee: Optional[str] = None,
    from_: Annotated[Optional[str], Parameter(name="--from")] = None,
    to: Optional[str] = None,
    date: Optional[str] = None,
    dry_run: bool = False,
    path: str = ".",
    verbose: bool = False,
) -> int:
    """Run a predefined bulk edit over all TODOs.

    Args:
        operation: The code mod to run.
        issue: Issue reference to match or set.
        assignee: Assignee to match or set.
        from_: Value to rename from.
        to: Value to rename to.
        date: Due date (YYYY-MM-DD) to set.
        dry_run: Print the diff instead of writing files.
        path: Directory, file, or glob to scan.
        verbose: Enable debug logging.
    """
    project, scan = _scan(path, verbose, dry_run=dry_run)
    _report_diagnostics(scan)
    result = project.modify(
        operation,
        scan=scan,
        issue=issue,
        assignee=assignee,
        from_=from_,
        to=to,
        date=date,
    )
    return _report_result(result)


def main() -> None:
    try:
        sys.exit(app())
    except ValueError as e:
        # Malformed [tool.tidytodo] configuration
        err_console.print(f"ERROR: {e}")
        sys.exit(1)
