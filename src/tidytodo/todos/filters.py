"""Record filters used by listing and statistics."""
from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Iterable, Sequence

from tidytodo.todos.models import AnnotationRecord


def _matches(value: str | None, selection: Sequence[str] | None, include_unset: bool) -> bool:
    """Match one optional field against a selection.

    With a selection, the value must be in it (or be unset when
    ``include_unset``). Without one, ``include_unset`` alone requires an unset
    value and otherwise anything goes.
    """
    if selection is not None:
        if value is None:
            return include_unset
        return value in selection
    if include_unset:
        return value is None
    return True


@dataclass(frozen=True)
class TodoFilters:
    """Selection criteria for TODO records.

    Attributes
    ----------
    assignee : tuple[str, ...] | None
        Keep TODOs assigned to any of these handles.
    unassigned : bool
        Keep TODOs without an assignee.
    issue : tuple[str, ...] | None
        Keep TODOs citing any of these issues.
    untracked : bool
        Keep TODOs without an issue.
    due : tuple[date, ...] | None
        Keep TODOs due on any of these dates.
    someday : bool
        Keep TODOs without a due date.
    overdue : bool
        Keep only TODOs due before ``today``.
    """

    assignee: tuple[str, ...] | None = None
    unassigned: bool = False
    issue: tuple[str, ...] | None = None
    untracked: bool = False
    due: tuple[date, ...] | None = None
    someday: bool = False
    overdue: bool = False

    def matches(self, record: AnnotationRecord, today: date | None = None) -> bool:
        """Check a single record against every criterion."""
        due_selection = (
            tuple(d.isoformat() for d in self.due) if self.due is not None else None
        )
        due_value = record.due.isoformat() if record.due is not None else None

        if not _matches(record.assignee, self.assignee, self.unassigned):
            return False
        if not _matches(record.issue, self.issue, self.untracked):
            return False
        if not _matches(due_value, due_selection, self.someday):
            return False
        if self.overdue:
            return record.is_overdue(today or date.today())
        return True

    def apply(
        self, records: Iterable[AnnotationRecord], today: date | None = None
    ) -> list[AnnotationRecord]:
        """Return the records that match, in input order."""
        today = today or date.today()
        return [record for record in records if self.matches(record, today)]
