"""Plan and apply bulk edits of TODO annotations.

Planning is pure: ``plan_mutation`` turns records into Patch values and
touches no files. ``apply_patch`` rewrites an in-memory snapshot of one file;
writing the result to disk is left to ``tidytodo.core.transaction``.
"""
from __future__ import annotations

import logging
from collections import defaultdict
from typing import Callable, Iterable

from tidytodo.core.errors import InternalConsistencyError
from tidytodo.todos.formatter import format_record
from tidytodo.todos.models import AnnotationRecord, Edit, Patch

logger = logging.getLogger(__name__)

Predicate = Callable[[AnnotationRecord], bool]
RecordEdit = Callable[[AnnotationRecord], AnnotationRecord]


def select_all(record: AnnotationRecord) -> bool:
    return True


def unchanged(record: AnnotationRecord) -> AnnotationRecord:
    return record


def plan_mutation(
    records: Iterable[AnnotationRecord],
    predicate: Predicate,
    edit: RecordEdit,
) -> list[Patch]:
    """Compute the patches that apply ``edit`` to every record ``predicate`` selects.

    Parameters
    ----------
    records : Iterable[AnnotationRecord]
        Parsed records; each must carry its source span.
    predicate : Predicate
        Selects the records to change.
    edit : RecordEdit
        Returns the changed record. It must keep path, line and span.

    Returns
    -------
    list[Patch]
        One patch per file with at least one effective change, ordered by
        path. Records whose canonical text equals their source text produce
        no edit.

    Raises
    ------
    InternalConsistencyError
        If a selected record has no span, the edit moved a record, or two
        edits in one file overlap.
    """
    edits_by_path: dict[str, list[Edit]] = defaultdict(list)

    for record in records:
        if not predicate(record):
            continue

        span = record.raw_span
        if span is None:
            raise InternalConsistencyError(
                f"line {record.line}: record has no source span", record.path
            )

        updated = edit(record)
        if (updated.path, updated.line, updated.raw_span) != (record.path, record.line, span):
            raise InternalConsistencyError(
                f"line {record.line}: edit changed the record's location", record.path
            )

        replacement = format_record(updated)
        if replacement == span.text:
            continue

        edits_by_path[record.path].append(Edit(record.line, span, replacement))

    patches = [build_patch(path, edits) for path, edits in sorted(edits_by_path.items())]
    logger.debug(
        "Planned %d edits across %d files",
        sum(len(p) for p in patches),
        len(patches),
    )
    return patches


def plan_format(records: Iterable[AnnotationRecord]) -> list[Patch]:
    """Plan rewriting every non-canonical annotation into canonical form."""
    return plan_mutation(records, select_all, unchanged)


def build_patch(path: str, edits: Iterable[Edit]) -> Patch:
    """Order edits for descending application and check they are disjoint.

    Raises
    ------
    InternalConsistencyError
        If two edits overlap.
    """
    ordered = sorted(edits, key=lambda e: (e.line, e.span.start, e.span.end), reverse=True)

    # Neighbours in descending order: ``later`` starts at or after ``earlier``.
    for later, earlier in zip(ordered, ordered[1:]):
        if later.line == earlier.line and (
            later.span.overlaps(earlier.span) or later.span.start == earlier.span.start
        ):
            raise InternalConsistencyError(
                f"line {later.line}: overlapping edits at "
                f"[{earlier.span.start}, {earlier.span.end}) and "
                f"[{later.span.start}, {later.span.end})",
                path,
            )

    return Patch(path, tuple(ordered))


def merge_patches(patches: Iterable[Patch]) -> list[Patch]:
    """Merge patches targeting the same file into one patch per file."""
    edits_by_path: dict[str, list[Edit]] = defaultdict(list)
    for patch in patches:
        edits_by_path[patch.path].extend(patch.edits)
    return [build_patch(path, edits) for path, edits in sorted(edits_by_path.items())]


def apply_patch(content: str, patch: Patch) -> str:
    """Apply a patch to a snapshot of its file's content.

    Every character outside the patched spans is preserved, including line
    endings and a missing final newline.

    Parameters
    ----------
    content : str
        The full file content the patch was planned against.
    patch : Patch
        The edits to apply.

    Returns
    -------
    str
        The new content.

    Raises
    ------
    InternalConsistencyError
        If edits overlap or the content no longer matches a recorded span.
    """
    patch = build_patch(patch.path, patch.edits)

    line_starts = [0]
    for index, char in enumerate(content):
        if char == "\n":
            line_starts.append(index + 1)

    for edit in patch.edits:
        if not 1 <= edit.line <= len(line_starts):
            raise InternalConsistencyError(
                f"line {edit.line} is out of range ({len(line_starts)} lines)", patch.path
            )

        offset = line_starts[edit.line - 1]
        start = offset + edit.span.start
        end = offset + edit.span.end
        if content[start:end] != edit.span.text or "\n" in content[start:end]:
            raise InternalConsistencyError(
                f"line {edit.line}: content does not match the scanned text "
                f"{edit.span.text!r}",
                patch.path,
            )

        content = content[:start] + edit.replacement + content[end:]

    return content
