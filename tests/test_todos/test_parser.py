"""
Tests for tidytodo.todos.parser module.

This module tests parsing of TODO annotations from comment text:
- The colon, metadata-group and legacy bare forms
- Metadata token classification (issue, assignee, due date)
- Diagnostics for malformed annotations
- Span bookkeeping used later by the mutator

AnnotationParser never raises; it returns a ParseResult holding a record,
a diagnostic, both (duplicate metadata kind), or neither (not an annotation).

Coverage targets:
- Case-insensitive keyword with a word boundary
- Metadata in any order, first token of each kind kept
- Every diagnostic reason
- Span offsets relative to the physical line
"""
from __future__ import annotations

from datetime import date

import pytest

from tidytodo.todos.models import CommentLine, Span
from tidytodo.todos.parser import (
    AnnotationParser,
    classify_token,
    parse_due_date,
    parse_issue,
    parse_line,
)


# =============================================================================
# Recognized Forms
# =============================================================================

class TestRecognizedForms:
    """Tests for lines that parse into a record."""

    def test_full_metadata_group(self, parser: AnnotationParser):
        """
        All three metadata kinds in one group are extracted, and the
        path and line number from the caller are kept.
        """
        result = parser.parse_line("todo(#123, @chris, 2023-11-01): ship it", "a.rs", 10)

        record = result.record
        assert record is not None
        assert result.diagnostic is None
        assert record.path == "a.rs"
        assert record.line == 10
        assert record.issue == "#123"
        assert record.assignee == "chris"
        assert record.due == date(2023, 11, 1)
        assert record.note == "ship it"

    def test_colon_form_without_metadata(self, parser: AnnotationParser):
        """TODO: note yields a record with no metadata."""
        record = parser.parse_line("TODO: plain note").record

        assert record is not None
        assert record.note == "plain note"
        assert record.has_metadata is False

    def test_project_key_issue(self, parser: AnnotationParser):
        """KEY-123 issue references are kept verbatim."""
        record = parser.parse_line("TODO(PROJ_X-42): migrate").record

        assert record is not None
        assert record.issue == "PROJ_X-42"

    def test_tokens_in_any_order(self, parser: AnnotationParser):
        """Tokens are classified by shape, not by position."""
        record = parser.parse_line("TODO(2024-01-31, @ana, #5): any order").record

        assert record is not None
        assert record.issue == "#5"
        assert record.assignee == "ana"
        assert record.due == date(2024, 1, 31)

    def test_whitespace_around_tokens(self, parser: AnnotationParser):
        """Whitespace inside the group is ignored."""
        record = parser.parse_line("TODO(  #1 ,   @a  ): spaced").record

        assert record is not None
        assert record.issue == "#1"
        assert record.assignee == "a"

    def test_whitespace_between_group_and_colon(self, parser: AnnotationParser):
        """Optional whitespace is allowed between ')' and ':'."""
        record = parser.parse_line("TODO(@a) : later").record

        assert record is not None
        assert record.assignee == "a"
        assert record.note == "later"

    @pytest.mark.parametrize("text", ["TODO: x", "todo: x", "ToDo: x", "tOdO: x"])
    def test_keyword_is_case_insensitive(self, parser: AnnotationParser, text: str):
        """Any casing of the keyword is recognized."""
        record = parser.parse_line(text).record

        assert record is not None
        assert record.note == "x"

    def test_legacy_form_without_colon(self, parser: AnnotationParser):
        """TODO followed by whitespace and text is the bare legacy form."""
        record = parser.parse_line("TODO example").record

        assert record is not None
        assert record.note == "example"

    def test_legacy_form_with_detached_colon(self, parser: AnnotationParser):
        """A colon separated from the keyword by spaces is still a separator."""
        record = parser.parse_line("TODO   : spaced out").record

        assert record is not None
        assert record.note == "spaced out"

    def test_bare_keyword(self, parser: AnnotationParser):
        """A lone keyword is an annotation with an empty note."""
        record = parser.parse_line("TODO").record

        assert record is not None
        assert record.note == ""

    def test_empty_group(self, parser: AnnotationParser):
        """TODO(): carries no metadata and is not an error."""
        result = parser.parse_line("TODO(): nothing yet")

        assert result.diagnostic is None
        assert result.record is not None
        assert result.record.has_metadata is False
        assert result.record.note == "nothing yet"

    def test_empty_note(self, parser: AnnotationParser):
        """Metadata without a note is allowed."""
        record = parser.parse_line("TODO(@a):").record

        assert record is not None
        assert record.note == ""

    def test_assignee_with_punctuation(self, parser: AnnotationParser):
        """Handles may contain dots and dashes."""
        record = parser.parse_line("TODO(@jane.doe-2): x").record

        assert record is not None
        assert record.assignee == "jane.doe-2"

    @pytest.mark.parametrize("line", [
        "// TODO: x",
        "    # TODO: x",
        "/* TODO: x",
        " * TODO: x",
        "-- TODO: x",
        ";; TODO: x",
    ])
    def test_leading_comment_marker_is_tolerated(self, parser: AnnotationParser, line: str):
        """A whole physical line with one comment marker can be passed in."""
        record = parser.parse_line(line).record

        assert record is not None
        assert record.note == "x"

    def test_trailing_carriage_return(self, parser: AnnotationParser):
        """A CRLF remnant is not part of the note."""
        record = parser.parse_line("TODO: crlf\r").record

        assert record is not None
        assert record.note == "crlf"


# =============================================================================
# Not Annotations
# =============================================================================

class TestNotAnnotations:
    """Tests for lines that are not annotations at all."""

    @pytest.mark.parametrize("text", [
        "just a comment",
        "todos are great",
        "TODO_LIST is global",
        "todo.txt is a file",
        "TODO-list",
        "see TODO: later",
        "mastodon",
        "",
    ])
    def test_empty_result(self, parser: AnnotationParser, text: str):
        """Neither a record nor a diagnostic is produced."""
        result = parser.parse_line(text)

        assert result.record is None
        assert result.diagnostic is None
        assert result.is_annotation is False


# =============================================================================
# Diagnostics
# =============================================================================

class TestDiagnostics:
    """Tests for annotation attempts that break the grammar."""

    @pytest.mark.parametrize("text, reason", [
        ("TODO(#1: unterminated", "unterminated metadata group"),
        ("TODO(#1) no colon", "missing ':' after metadata group"),
        ("TODO(#1, 2024-02-30): bad", "invalid due date '2024-02-30'"),
        ("TODO(whatever): unknown", "unrecognized metadata token 'whatever'"),
        ("TODO(proj-1): lowercase key", "unrecognized metadata token 'proj-1'"),
        ("TODO(#1,): trailing comma", "empty metadata token"),
        ("TODO(@): no handle", "invalid assignee '@'"),
        ("TODO(@a b): space", "invalid assignee '@a b'"),
    ])
    def test_reason(self, parser: AnnotationParser, text: str, reason: str):
        """Each malformation yields one diagnostic and no record."""
        result = parser.parse_line(text, "x.rs", 4)

        assert result.record is None
        assert result.diagnostic is not None
        assert result.diagnostic.reason == reason
        assert result.is_annotation is True

    def test_diagnostic_location(self, parser: AnnotationParser):
        """Diagnostics carry the caller's path and line."""
        diagnostic = parser.parse_line("TODO(#1 broken", "src/x.rs", 7).diagnostic

        assert diagnostic is not None
        assert diagnostic.path == "src/x.rs"
        assert diagnostic.line == 7
        assert str(diagnostic) == "src/x.rs:7: unterminated metadata group"

    def test_duplicate_kind_keeps_first(self, parser: AnnotationParser):
        """
        A repeated metadata kind yields both a record holding the first
        token of each kind and a diagnostic naming the duplicate.
        """
        result = parser.parse_line("TODO(@carol, #9, @dave): dup", "a.rs", 1)

        assert result.record is not None
        assert result.record.assignee == "carol"
        assert result.record.issue == "#9"
        assert result.diagnostic is not None
        assert result.diagnostic.reason == "duplicate metadata kind 'assignee': '@dave'"

    def test_unknown_token_rejects_whole_annotation(self, parser: AnnotationParser):
        """Valid tokens next to an unknown one are not salvaged."""
        result = parser.parse_line("TODO(#1, @a, soon): x")

        assert result.record is None
        assert result.diagnostic is not None


# =============================================================================
# Spans
# =============================================================================

class TestSpans:
    """Tests for the raw span recorded on each record."""

    def test_span_covers_keyword_to_end(self, parser: AnnotationParser):
        """Leading indentation and markers and trailing whitespace are outside the span."""
        record = parser.parse_line("    // TODO: x  ").record

        assert record is not None
        assert record.raw_span == Span(7, 14, "TODO: x")

    def test_span_shifted_by_column(self, parser: AnnotationParser):
        """Offsets are relative to the physical line, not the comment body."""
        line = "    // todo(@a): fix"
        record = parser.parse_line(line[6:], column=6).record

        assert record is not None
        span = record.raw_span
        assert span == Span(7, len(line), "todo(@a): fix")
        assert line[span.start:span.end] == span.text

    def test_span_does_not_affect_equality(self, parser: AnnotationParser):
        """Two records with the same fields compare equal whatever their spans."""
        first = parser.parse_line("TODO: x").record
        second = parser.parse_line("   TODO: x").record

        assert first == second
        assert first.raw_span != second.raw_span


# =============================================================================
# Comment Lines
# =============================================================================

class TestParseComments:
    """Tests for parsing collaborator-supplied comment lines."""

    def test_parse_comment_uses_column(self, parser: AnnotationParser):
        """The comment's column is applied to the span."""
        comment = CommentLine("a.py", 3, " TODO: x", column=5)

        record = parser.parse_comment(comment).record

        assert record is not None
        assert record.line == 3
        assert record.raw_span == Span(6, 13, "TODO: x")

    def test_non_annotations_are_skipped(self, parser: AnnotationParser):
        """parse_comments yields only records and diagnostics."""
        comments = [
            CommentLine("a.rs", 1, " regular comment"),
            CommentLine("a.rs", 2, " TODO: first"),
            CommentLine("a.rs", 3, " TODO(#x): broken"),
        ]

        results = list(parser.parse_comments(comments))

        assert len(results) == 2
        assert results[0].record.note == "first"
        assert results[1].diagnostic.line == 3

    def test_module_level_parse_line(self):
        """The module-level helper uses a default parser."""
        result = parse_line("TODO(@a): x", "b.rs", 2)

        assert result.record is not None
        assert result.record.location == "b.rs:2"


# =============================================================================
# Token Helpers
# =============================================================================

class TestTokenHelpers:
    """Tests for the token classification helpers."""

    @pytest.mark.parametrize("token, expected", [
        ("@alice", ("assignee", "alice")),
        ("#12", ("issue", "#12")),
        ("ABC-1", ("issue", "ABC-1")),
        ("2024-01-31", ("due", date(2024, 1, 31))),
    ])
    def test_classify_token(self, token: str, expected: tuple):
        assert classify_token(token) == expected

    def test_classify_token_rejects_unknown(self):
        with pytest.raises(ValueError, match="unrecognized metadata token"):
            classify_token("next-week")

    @pytest.mark.parametrize("value, expected", [
        ("#1", "#1"),
        ("PROJ-123", "PROJ-123"),
        ("#", None),
        ("proj-1", None),
        ("PROJ-", None),
    ])
    def test_parse_issue(self, value: str, expected: str | None):
        assert parse_issue(value) == expected

    @pytest.mark.parametrize("value, expected", [
        ("2024-02-29", date(2024, 2, 29)),
        ("2023-02-29", None),
        ("2024-13-01", None),
        ("2024-1-1", None),
        ("tomorrow", None),
    ])
    def test_parse_due_date(self, value: str, expected: date | None):
        assert parse_due_date(value) == expected
