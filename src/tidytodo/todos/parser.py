"""TODO annotation parser.

Recognizes the annotation grammar:

- ``TODO: note``
- ``TODO(#123, @chris, 2023-11-01): note``
- ``TODO(PROJ-42): note``
- ``TODO note`` (legacy form without colon)

The keyword is matched case-insensitively and must start the comment body.
"""
from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from datetime import date
from typing import Iterable, Iterator, Literal

from tidytodo.todos.models import (
    AnnotationRecord,
    CommentLine,
    ParseDiagnostic,
    ParseResult,
    Span,
)

logger = logging.getLogger(__name__)

MetadataKind = Literal["issue", "assignee", "due"]

# Numeric-hash issue form, e.g. #123
NUMBERED_ISSUE_PATTERN = re.compile(r"^#\d+$")

# Project-key issue form, e.g. PROJ-123
PROJECT_KEY_ISSUE_PATTERN = re.compile(r"^[A-Z][A-Z0-9_]*-\d+$")

ASSIGNEE_PATTERN = re.compile(r"^@(?P<handle>[^\s,()]+)$")

DATE_PATTERN = re.compile(r"^\d{4}-\d{2}-\d{2}$")


def parse_issue(value: str) -> str | None:
    """Return ``value`` if it is a valid issue reference, else None."""
    if NUMBERED_ISSUE_PATTERN.match(value) or PROJECT_KEY_ISSUE_PATTERN.match(value):
        return value
    return None


def parse_due_date(value: str) -> date | None:
    """Parse a YYYY-MM-DD date, returning None when it is not a real date."""
    if not DATE_PATTERN.match(value):
        return None
    try:
        return date.fromisoformat(value)
    except ValueError:
        return None


def classify_token(token: str) -> tuple[MetadataKind, str | date]:
    """Classify one metadata token by its shape.

    Parameters
    ----------
    token : str
        A single stripped token from a metadata group.

    Returns
    -------
    tuple[MetadataKind, str | date]
        The metadata kind and its value (handle without ``@``, verbatim
        issue reference, or parsed date).

    Raises
    ------
    ValueError
        If the token is empty, a malformed date, or of no known kind.
    """
    if not token:
        raise ValueError("empty metadata token")

    assignee_match = ASSIGNEE_PATTERN.match(token)
    if assignee_match:
        return "assignee", assignee_match.group("handle")
    if token.startswith("@"):
        raise ValueError(f"invalid assignee {token!r}")

    issue = parse_issue(token)
    if issue is not None:
        return "issue", issue

    if DATE_PATTERN.match(token):
        due = parse_due_date(token)
        if due is None:
            raise ValueError(f"invalid due date {token!r}")
        return "due", due

    raise ValueError(f"unrecognized metadata token {token!r}")


@dataclass
class _Metadata:
    issue: str | None = None
    assignee: str | None = None
    due: date | None = None
    duplicate: str | None = None


class AnnotationParser:
    """Parse TODO annotations from comment text.

    Parsing never raises. Each line yields a ParseResult that is empty
    (not an annotation), holds a record, or holds a diagnostic.

    Examples
    --------
    >>> parser = AnnotationParser()
    >>> result = parser.parse_line("todo(#123, @chris, 2023-11-01): ship it", "a.rs", 10)
    >>> result.record.assignee
    'chris'
    """

    # Keyword at the start of the comment body. One leading comment marker is
    # tolerated so whole physical lines can be passed in as well.
    KEYWORD_PATTERN = re.compile(
        r"^\s*"
        r"(?:(?:/+\**|\*+|#+|-{2,}|;+)\s*)?"
        r"(?P<keyword>todo)"
        r"(?!\w)",
        re.IGNORECASE,
    )

    def parse_line(
        self,
        text: str,
        path: str = "<string>",
        line_number: int = 1,
        column: int = 0,
    ) -> ParseResult:
        """Parse a single comment body.

        Parameters
        ----------
        text : str
            The comment text to parse.
        path : str
            Identifier of the file the text came from.
        line_number : int
            1-based line number.
        column : int
            Offset of ``text`` within its physical line; the record's span is
            shifted by this amount.

        Returns
        -------
        ParseResult
            The parsed record and/or diagnostic.
        """
        match = self.KEYWORD_PATTERN.match(text)
        if not match:
            return ParseResult()

        start = match.start("keyword")
        end = len(text.rstrip())
        rest = text[match.end("keyword"):end]

        def diagnostic(reason: str) -> ParseResult:
            logger.debug("%s:%d: %s", path, line_number, reason)
            return ParseResult(diagnostic=ParseDiagnostic(path, line_number, reason))

        metadata = _Metadata()
        if not rest:
            note = ""
        elif rest[0] == ":":
            note = rest[1:].strip()
        elif rest[0] == "(":
            close = rest.find(")")
            if close == -1:
                return diagnostic("unterminated metadata group")
            after = rest[close + 1:].lstrip()
            if not after.startswith(":"):
                return diagnostic("missing ':' after metadata group")
            note = after[1:].strip()
            try:
                metadata = self._parse_metadata(rest[1:close])
            except ValueError as e:
                return diagnostic(str(e))
        elif rest[0].isspace():
            note = rest.lstrip()
            if note.startswith(":"):
                note = note[1:].strip()
        else:
            # Keyword glued to other punctuation, e.g. "todo.txt"
            return ParseResult()

        record = AnnotationRecord(
            path=path,
            line=line_number,
            note=note,
            assignee=metadata.assignee,
            issue=metadata.issue,
            due=metadata.due,
            raw_span=Span(column + start, column + end, text[start:end]),
        )

        if metadata.duplicate:
            logger.debug("%s:%d: %s", path, line_number, metadata.duplicate)
            return ParseResult(
                record=record,
                diagnostic=ParseDiagnostic(path, line_number, metadata.duplicate),
            )
        return ParseResult(record=record)

    def parse_comment(self, comment: CommentLine) -> ParseResult:
        """Parse a collaborator-supplied comment line."""
        return self.parse_line(
            comment.text, comment.path, comment.line_number, comment.column
        )

    def parse_comments(self, comments: Iterable[CommentLine]) -> Iterator[ParseResult]:
        """Parse many comment lines, skipping those that are not annotations."""
        for comment in comments:
            result = self.parse_comment(comment)
            if result.is_annotation:
                yield result

    def _parse_metadata(self, group: str) -> _Metadata:
        """Classify the comma-separated tokens of a metadata group.

        The first token of each kind wins; later ones are reported as a
        duplicate. Any token that cannot be classified rejects the group.
        """
        metadata = _Metadata()
        if not group.strip():
            return metadata

        for token in (part.strip() for part in group.split(",")):
            kind, value = classify_token(token)
            if getattr(metadata, kind) is not None:
                if metadata.duplicate is None:
                    metadata.duplicate = f"duplicate metadata kind {kind!r}: {token!r}"
                continue
            setattr(metadata, kind, value)

        return metadata


def parse_line(
    text: str, path: str = "<string>", line_number: int = 1, column: int = 0
) -> ParseResult:
    """Parse one comment body with a default parser."""
    return AnnotationParser().parse_line(text, path, line_number, column)
