"""
TidyTodo - find, lint, and bulk-edit structured TODO comments.

A TODO annotation is a comment of the form::

    // TODO(#123, @alice, 2025-01-31): fix the retry loop

with an optional metadata group holding at most one issue reference, one
assignee, and one due date. TidyTodo scans a source tree for them, reports on
them, checks them against required-metadata rules, and rewrites them in
place without touching anything outside the annotation.

Example
-------
>>> from tidytodo import TodoProject, TodoFilters
>>>
>>> project = TodoProject("src/")
>>> for record in project.find_todos(TodoFilters(overdue=True)):
...     print(record.location, record.note)
>>>
>>> # Count per assignee
>>> project.stat("assignee")
{'<unassigned>': 4, 'alice': 2}
>>>
>>> # Preview a bulk edit without writing
>>> project = TodoProject("src/", dry_run=True)
>>> print(project.modify("rename-assignee", from_="bob", to="carol").diff)

Classes
-------
TodoProject
    Main entry point for all operations over a source tree.

Transaction
    Collect patches, preview them as a diff, and write them atomically.

AnnotationParser
    Turn a single comment line into a record or a diagnostic.

AnnotationRecord
    One parsed TODO annotation.

TodoFilters
    Selection criteria for listing and counting.

RuleSet
    Required-metadata rules for validation.

Result, ErrorResult, BatchResult
    Outcome of rewriting operations. Expected failures never raise.
"""
from __future__ import annotations

__version__ = "0.1.0"

from tidytodo.core.errors import InternalConsistencyError
from tidytodo.core.project import TodoProject
from tidytodo.core.results import BatchResult, ErrorResult, Result
from tidytodo.core.transaction import Transaction
from tidytodo.todos.aggregator import GroupBy
from tidytodo.todos.filters import TodoFilters
from tidytodo.todos.models import (
    AnnotationRecord,
    ParseDiagnostic,
    ParseResult,
    Patch,
    Span,
    ValidationViolation,
)
from tidytodo.todos.parser import AnnotationParser, parse_line
from tidytodo.todos.validator import RuleSet

__all__ = [
    "__version__",
    "TodoProject",
    "Transaction",
    "AnnotationParser",
    "AnnotationRecord",
    "ParseDiagnostic",
    "ParseResult",
    "Patch",
    "Span",
    "ValidationViolation",
    "TodoFilters",
    "GroupBy",
    "RuleSet",
    "Result",
    "ErrorResult",
    "BatchResult",
    "InternalConsistencyError",
    "parse_line",
]
