"""Canonical formatting of TODO annotations."""
from __future__ import annotations

from tidytodo.todos.models import AnnotationRecord


def format_metadata(record: AnnotationRecord) -> str | None:
    """Render the metadata group contents in canonical order.

    Order is issue, assignee, due date. Returns None when the record has no
    metadata at all.
    """
    parts: list[str] = []
    if record.issue is not None:
        parts.append(record.issue)
    if record.assignee is not None:
        parts.append(f"@{record.assignee}")
    if record.due is not None:
        parts.append(record.due.isoformat())
    return ", ".join(parts) if parts else None


def format_record(record: AnnotationRecord) -> str:
    """Render the canonical annotation text for a record.

    The result covers only the annotation span: indentation and comment
    markers around it are left to the caller.

    Examples
    --------
    >>> format_record(AnnotationRecord("a.py", 1, note="ship it", assignee="chris"))
    'TODO(@chris): ship it'
    """
    meta = format_metadata(record)
    head = f"TODO({meta}):" if meta else "TODO:"
    return f"{head} {record.note.strip()}".rstrip()


def is_canonical(record: AnnotationRecord) -> bool:
    """Check whether the record's source text already is its canonical form."""
    return record.raw_span is not None and record.raw_span.text == format_record(record)
