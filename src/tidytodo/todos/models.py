"""Value types shared by the parser, formatter, validator, aggregator and mutator.

All types here are immutable. A scan produces fresh records; "changing" a TODO
means computing a new record with ``dataclasses.replace`` and planning a Patch.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date


@dataclass(frozen=True)
class Span:
    """A slice of a physical line.

    Attributes
    ----------
    start : int
        Offset of the first character of the span (0-based).
    end : int
        Offset one past the last character of the span.
    text : str
        The original text, ``line[start:end]``.
    """

    start: int
    end: int
    text: str

    def overlaps(self, other: Span) -> bool:
        """Check whether two spans on the same line share any character."""
        return self.start < other.end and other.start < self.end


@dataclass(frozen=True)
class CommentLine:
    """One comment line handed over by the file-walking collaborator.

    Attributes
    ----------
    path : str
        Opaque identifier of the source file.
    line_number : int
        1-based physical line number.
    text : str
        The comment body, without the comment marker.
    column : int
        Offset of ``text`` within the physical line.
    """

    path: str
    line_number: int
    text: str
    column: int = 0


@dataclass(frozen=True)
class AnnotationRecord:
    """A parsed TODO annotation.

    Attributes
    ----------
    path : str
        Identifier of the source file.
    line : int
        1-based line number.
    note : str
        Free-text description, possibly empty.
    assignee : str | None
        Handle without the leading ``@``.
    issue : str | None
        Issue reference kept verbatim (``#123`` or ``PROJ-123``).
    due : date | None
        Due date.
    raw_span : Span | None
        Where the annotation sits in its physical line. Records built by hand
        (not by the parser) have no span and cannot be patched.
    """

    path: str
    line: int
    note: str = ""
    assignee: str | None = None
    issue: str | None = None
    due: date | None = None
    raw_span: Span | None = field(default=None, compare=False)

    def __post_init__(self) -> None:
        if self.line < 1:
            raise ValueError(f"line must be a positive integer, got {self.line}")
        if self.assignee is not None and not self.assignee:
            raise ValueError("assignee must be non-empty when present")

    @property
    def location(self) -> str:
        """Get the path:line location string."""
        return f"{self.path}:{self.line}"

    @property
    def has_metadata(self) -> bool:
        return any(v is not None for v in (self.issue, self.assignee, self.due))

    def is_overdue(self, today: date) -> bool:
        """Check whether the due date lies strictly before ``today``."""
        return self.due is not None and self.due < today

    def sort_key(self) -> tuple[str, int]:
        return (self.path, self.line)


@dataclass(frozen=True)
class ParseDiagnostic:
    """A line that looks like a TODO but breaks the grammar."""

    path: str
    line: int
    reason: str

    def __str__(self) -> str:
        return f"{self.path}:{self.line}: {self.reason}"


@dataclass(frozen=True)
class ParseResult:
    """Outcome of parsing one line.

    ``record`` and ``diagnostic`` are both None when the line is not an
    annotation at all. A group with a repeated metadata kind yields a record
    holding the first token of each kind together with a diagnostic.
    """

    record: AnnotationRecord | None = None
    diagnostic: ParseDiagnostic | None = None

    @property
    def is_annotation(self) -> bool:
        return self.record is not None or self.diagnostic is not None


@dataclass(frozen=True)
class ValidationViolation:
    """A record that fails one validation rule."""

    record: AnnotationRecord
    rule: str

    def __str__(self) -> str:
        return f"{self.record.location}: {self.rule}"


@dataclass(frozen=True)
class Edit:
    """Replace ``span`` on physical ``line`` with ``replacement``."""

    line: int
    span: Span
    replacement: str


@dataclass(frozen=True)
class Patch:
    """All edits for one file, ordered by descending position.

    Applying the edits in order keeps the offsets of the edits still to be
    applied valid.
    """

    path: str
    edits: tuple[Edit, ...] = ()

    def __len__(self) -> int:
        return len(self.edits)
