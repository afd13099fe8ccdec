"""Count TODOs per group."""
from __future__ import annotations

from collections import Counter
from datetime import date
from enum import Enum
from typing import Callable, Iterable

from tidytodo.todos.models import AnnotationRecord

UNASSIGNED = "<unassigned>"
UNTRACKED = "<untracked>"
SOMEDAY = "<someday>"
OVERDUE = "overdue"
UPCOMING = "upcoming"
TOTAL = "total"

GroupKey = Callable[[AnnotationRecord], str]


class GroupBy(str, Enum):
    """Supported groupings for ``aggregate``."""

    ASSIGNEE = "assignee"
    ISSUE = "issue"
    DUE = "due"
    OVERDUE = "overdue"
    TOTAL = "total"


def by_assignee(record: AnnotationRecord) -> str:
    return record.assignee if record.assignee is not None else UNASSIGNED


def by_issue(record: AnnotationRecord) -> str:
    return record.issue if record.issue is not None else UNTRACKED


def by_due(record: AnnotationRecord) -> str:
    return record.due.isoformat() if record.due is not None else SOMEDAY


def by_overdue(today: date) -> GroupKey:
    """Build a key putting each record in the overdue, upcoming or someday bucket."""

    def key(record: AnnotationRecord) -> str:
        if record.due is None:
            return SOMEDAY
        return OVERDUE if record.is_overdue(today) else UPCOMING

    return key


def total(record: AnnotationRecord) -> str:
    return TOTAL


def group_key_for(group_by: GroupBy | str, today: date | None = None) -> GroupKey:
    """Resolve a GroupBy value to its key function.

    Parameters
    ----------
    group_by : GroupBy | str
        The grouping to use.
    today : date | None
        Reference date for the overdue grouping. Defaults to today.

    Raises
    ------
    ValueError
        If ``group_by`` names no known grouping.
    """
    group_by = GroupBy(group_by)
    if group_by is GroupBy.ASSIGNEE:
        return by_assignee
    if group_by is GroupBy.ISSUE:
        return by_issue
    if group_by is GroupBy.DUE:
        return by_due
    if group_by is GroupBy.OVERDUE:
        return by_overdue(today or date.today())
    return total


def aggregate(records: Iterable[AnnotationRecord], group_key: GroupKey) -> dict[str, int]:
    """Count records per group.

    Every record lands in exactly one bucket, so the counts always sum to the
    number of records. Buckets are ordered by descending count, then by name.

    Parameters
    ----------
    records : Iterable[AnnotationRecord]
        The records to count.
    group_key : GroupKey
        Maps a record to its bucket name.

    Returns
    -------
    dict[str, int]
        Bucket name to count.
    """
    counts: Counter[str] = Counter(group_key(record) for record in records)
    return dict(sorted(counts.items(), key=lambda item: (-item[1], item[0])))
