"""Versioned export schema for TODO records."""
from __future__ import annotations

import json
from typing import Any, Iterable

from tidytodo.todos.models import AnnotationRecord


def record_to_dict(record: AnnotationRecord) -> dict[str, Any]:
    """Map one record to its export entry; unset fields become None."""
    return {
        "assignee": record.assignee,
        "due": record.due.isoformat() if record.due is not None else None,
        "issue": record.issue,
        "line": record.line,
        "note": record.note,
        "path": record.path,
    }


def export(records: Iterable[AnnotationRecord], tool_version: str) -> dict[str, Any]:
    """Build the export document.

    Entries follow the input order; callers sort beforehand for stable output.

    Parameters
    ----------
    records : Iterable[AnnotationRecord]
        The records to export.
    tool_version : str
        Version string written to the ``version`` field.

    Returns
    -------
    dict[str, Any]
        ``{"version": ..., "todos": [...]}``.
    """
    return {
        "version": tool_version,
        "todos": [record_to_dict(record) for record in records],
    }


def to_json(records: Iterable[AnnotationRecord], tool_version: str, indent: int = 2) -> str:
    """Serialize the export document as JSON."""
    return json.dumps(export(records, tool_version), indent=indent)
