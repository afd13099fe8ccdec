"""Predefined bulk edits for the ``mod`` command.

Each code mod pairs a predicate with a record edit and is run through
``plan_mutation``. Builders validate their arguments up front and raise
ValueError, so nothing is planned for a bad replacement value.
"""
from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import date
from typing import Callable

from tidytodo.todos.models import AnnotationRecord
from tidytodo.todos.mutator import Predicate, RecordEdit
from tidytodo.todos.parser import ASSIGNEE_PATTERN, parse_due_date, parse_issue


@dataclass(frozen=True)
class CodeMod:
    """A named predicate/edit pair with its user-facing messages."""

    name: str
    predicate: Predicate
    edit: RecordEdit
    done_message: str
    empty_message: str


def _issue(value: str | None, option: str = "issue") -> str:
    if value is None:
        raise ValueError(f"--{option} is required")
    issue = parse_issue(value)
    if issue is None:
        raise ValueError(f'Invalid issue "{value}"')
    return issue


def _assignee(value: str | None, option: str = "assignee") -> str:
    if value is None:
        raise ValueError(f"--{option} is required")
    handle = value[1:] if value.startswith("@") else value
    if not ASSIGNEE_PATTERN.match(f"@{handle}"):
        raise ValueError(f'Invalid assignee "{value}"')
    return handle


def _date(value: str | None, option: str = "date") -> date:
    if value is None:
        raise ValueError(f"--{option} is required")
    due = parse_due_date(value)
    if due is None:
        raise ValueError(f'Invalid date "{value}", expected YYYY-MM-DD')
    return due


def _required(value: str | None, option: str) -> str:
    if not value:
        raise ValueError(f"--{option} is required")
    return value


def remove_issue(issue: str | None = None, **_: str | None) -> CodeMod:
    target = _required(issue, "issue")
    return CodeMod(
        "remove-issue",
        lambda r: r.issue == target,
        lambda r: replace(r, issue=None),
        f'All citations of issue "{target}" were removed.',
        f'No TODOs citing issue "{target}"',
    )


def remove_all_issues(**_: str | None) -> CodeMod:
    return CodeMod(
        "remove-all-issues",
        lambda r: r.issue is not None,
        lambda r: replace(r, issue=None),
        "All citations of issues were removed.",
        "No TODOs citing any issues",
    )


def rename_issue(from_: str | None = None, to: str | None = None, **_: str | None) -> CodeMod:
    source = _required(from_, "from")
    target = _issue(to, "to")
    return CodeMod(
        "rename-issue",
        lambda r: r.issue == source,
        lambda r: replace(r, issue=target),
        f'All TODOs citing issue "{source}" now cite "{target}".',
        f'No TODOs citing issue "{source}"',
    )


def add_issue_for_all_untracked(issue: str | None = None, **_: str | None) -> CodeMod:
    target = _issue(issue)
    return CodeMod(
        "add-issue-for-all-untracked",
        lambda r: r.issue is None,
        lambda r: replace(r, issue=target),
        f'All untracked TODOs now cite issue "{target}".',
        "No TODOs untracked",
    )


def remove_assignee(assignee: str | None = None, **_: str | None) -> CodeMod:
    target = _assignee(assignee)
    return CodeMod(
        "remove-assignee",
        lambda r: r.assignee == target,
        lambda r: replace(r, assignee=None),
        f'All TODOs assigned to "{target}" were unassigned.',
        f'No TODOs assigned to "{target}"',
    )


def remove_all_assignees(**_: str | None) -> CodeMod:
    return CodeMod(
        "remove-all-assignees",
        lambda r: r.assignee is not None,
        lambda r: replace(r, assignee=None),
        "All TODOs were unassigned.",
        "No TODOs assigned",
    )


def rename_assignee(from_: str | None = None, to: str | None = None, **_: str | None) -> CodeMod:
    source = _assignee(from_, "from")
    target = _assignee(to, "to")
    return CodeMod(
        "rename-assignee",
        lambda r: r.assignee == source,
        lambda r: replace(r, assignee=target),
        f'All TODOs assigned to "{source}" were reassigned to "{target}".',
        f'No TODOs assigned to "{source}"',
    )


def assign_unassigned(assignee: str | None = None, **_: str | None) -> CodeMod:
    target = _assignee(assignee)
    return CodeMod(
        "assign-unassigned",
        lambda r: r.assignee is None,
        lambda r: replace(r, assignee=target),
        f'All unassigned TODOs assigned to "{target}".',
        "No TODOs unassigned",
    )


def assign_issue(
    issue: str | None = None, assignee: str | None = None, **_: str | None
) -> CodeMod:
    source = _required(issue, "issue")
    target = _assignee(assignee)
    return CodeMod(
        "assign-issue",
        lambda r: r.issue == source,
        lambda r: replace(r, assignee=target),
        f'All TODOs citing issue "{source}" assigned to "{target}".',
        f'No TODOs citing issue "{source}"',
    )


def remove_all_due_dates(**_: str | None) -> CodeMod:
    return CodeMod(
        "remove-all-due-dates",
        lambda r: r.due is not None,
        lambda r: replace(r, due=None),
        "All TODO due dates were removed.",
        "No TODOs with due dates",
    )


def add_missing_due_dates(date: str | None = None, **_: str | None) -> CodeMod:
    due = _date(date)
    return CodeMod(
        "add-missing-due-dates",
        lambda r: r.due is None,
        lambda r: replace(r, due=due),
        f'All TODOs without due dates are now due "{due.isoformat()}".',
        "No TODOs without due dates",
    )


def set_issue_due_date(
    issue: str | None = None, date: str | None = None, **_: str | None
) -> CodeMod:
    source = _required(issue, "issue")
    due = _date(date)
    return CodeMod(
        "set-issue-due-date",
        lambda r: r.issue == source,
        lambda r: replace(r, due=due),
        f'All TODOs citing issue "{source}" are now due "{due.isoformat()}".',
        f'No TODOs citing issue "{source}"',
    )


CODEMODS: dict[str, Callable[..., CodeMod]] = {
    "remove-issue": remove_issue,
    "remove-all-issues": remove_all_issues,
    "rename-issue": rename_issue,
    "add-issue-for-all-untracked": add_issue_for_all_untracked,
    "remove-assignee": remove_assignee,
    "remove-all-assignees": remove_all_assignees,
    "rename-assignee": rename_assignee,
    "assign-unassigned": assign_unassigned,
    "assign-issue": assign_issue,
    "remove-all-due-dates": remove_all_due_dates,
    "add-missing-due-dates": add_missing_due_dates,
    "set-issue-due-date": set_issue_due_date,
}


def build_codemod(name: str, **options: str | None) -> CodeMod:
    """Look up a code mod by name and bind its options.

    Parameters
    ----------
    name : str
        One of the keys of ``CODEMODS``.
    **options : str | None
        ``issue``, ``assignee``, ``from_``, ``to`` or ``date``.

    Raises
    ------
    ValueError
        If the name is unknown or an option is missing or invalid.
    """
    try:
        builder = CODEMODS[name]
    except KeyError:
        known = ", ".join(sorted(CODEMODS))
        raise ValueError(f"Unknown code mod {name!r} (expected one of: {known})") from None
    return builder(**options)
