"""
Shared pytest fixtures for the tidytodo test suite.

This module provides:
- Sample source strings containing TODO annotations
- Temporary project trees built from those samples
- Pre-configured TodoProject instances (normal and dry-run modes)
- Helper fixtures for building and parsing records

Fixture Naming Convention:
- sample_* : Fixtures that provide sample content strings
- tmp_* : Fixtures that create temporary directories/files
- project_* : Fixtures that provide configured TodoProject instances
"""
from __future__ import annotations

import textwrap
from datetime import date
from pathlib import Path
from typing import Callable

import pytest

from tidytodo.config import TidyTodoConfig
from tidytodo.core.project import TodoProject
from tidytodo.todos.models import AnnotationRecord
from tidytodo.todos.parser import AnnotationParser

# Reference date used wherever "today" matters.
TODAY = date(2024, 6, 1)


# =============================================================================
# Sample Source Fixtures
# =============================================================================

@pytest.fixture
def sample_rust_source() -> str:
    """
    Rust file with five annotations.

    Contains:
    - Line 2: canonical, no metadata
    - Line 3: canonical, all three kinds (overdue relative to TODAY)
    - Line 4: lowercase keyword (not canonical)
    - Line 5: legacy form without colon (not canonical)
    - Line 6: canonical, project-key issue and a far-future date
    """
    return textwrap.dedent("""\
        fn main() {
            // TODO: plain note
            // TODO(#12, @alice, 2020-01-01): fix retry loop
            // todo(@bob): lowercase keyword
            // TODO example
            // TODO(PROJ-7, 2999-12-31): far future
        }
    """)


@pytest.fixture
def sample_python_source() -> str:
    """
    Python module with two real comments and a fake one inside a string.

    Contains:
    - Line 3: "#TODO" inside a string literal (not a comment)
    - Line 7: full-line comment annotation
    - Line 8: inline comment annotation
    """
    return textwrap.dedent('''\
        """Utilities."""

        URL = "http://example.com/#TODO: not a comment"


        def helper():
            # TODO(@alice): tidy helper
            return 1  # TODO(#3): inline note
    ''')


@pytest.fixture
def sample_broken_source() -> str:
    """
    Rust file where every annotation has a grammar problem.

    Contains:
    - Line 1: duplicate assignee (record + diagnostic)
    - Line 2: impossible calendar date
    - Line 3: unterminated metadata group
    - Line 4: metadata group without ':'
    - Line 5: unrecognized metadata token
    """
    return textwrap.dedent("""\
        // TODO(@carol, @dave): duplicate assignee
        // TODO(#1, 2024-02-30): bad date
        // TODO(#1: unterminated
        // TODO(#1) no colon
        // TODO(whatever): unknown token
    """)


# =============================================================================
# Temporary Project Fixtures
# =============================================================================

@pytest.fixture
def tmp_todo_project(
    tmp_path: Path,
    sample_rust_source: str,
    sample_python_source: str,
) -> Path:
    """
    Create a small project tree with annotated sources.

    Structure:
        tmp_path/
        ├── pyproject.toml        (no [tool.tidytodo] table)
        ├── src/
        │   ├── main.rs           (5 TODOs)
        │   └── util.py           (2 TODOs)
        ├── node_modules/
        │   └── lib.js            (excluded directory)
        └── data.bin              (not UTF-8, skipped)
    """
    (tmp_path / "pyproject.toml").write_text('[project]\nname = "demo"\n')

    src = tmp_path / "src"
    src.mkdir()
    (src / "main.rs").write_text(sample_rust_source)
    (src / "util.py").write_text(sample_python_source)

    vendored = tmp_path / "node_modules"
    vendored.mkdir()
    (vendored / "lib.js").write_text("// TODO: vendored code\n")

    (tmp_path / "data.bin").write_bytes(b"\xff\xfe// TODO: binary\n")

    return tmp_path


@pytest.fixture
def tmp_broken_file(tmp_path: Path, sample_broken_source: str) -> Path:
    """Create a single Rust file full of malformed annotations."""
    path = tmp_path / "broken.rs"
    path.write_text(sample_broken_source)
    return path


@pytest.fixture
def project(tmp_todo_project: Path) -> TodoProject:
    """TodoProject over the sample tree, with default configuration."""
    return TodoProject(tmp_todo_project, config=TidyTodoConfig(workers=2))


@pytest.fixture
def project_dry_run(tmp_todo_project: Path) -> TodoProject:
    """TodoProject in dry-run mode; no files are written."""
    return TodoProject(tmp_todo_project, dry_run=True, config=TidyTodoConfig())


@pytest.fixture
def parser() -> AnnotationParser:
    return AnnotationParser()


# =============================================================================
# Helper Fixtures
# =============================================================================

@pytest.fixture
def today() -> date:
    """Fixed reference date; records due before it are overdue."""
    return TODAY


@pytest.fixture
def parse_record() -> Callable[..., AnnotationRecord]:
    """
    Return a helper that parses text and returns the record.

    The helper fails the test when the text yields no record.
    """

    def parse(text: str, path: str = "a.rs", line: int = 1) -> AnnotationRecord:
        result = AnnotationParser().parse_line(text, path, line)
        assert result.record is not None, f"expected an annotation in {text!r}: {result}"
        return result.record

    return parse


@pytest.fixture
def make_record() -> Callable[..., AnnotationRecord]:
    """Return a helper building span-less records for pure-function tests."""

    def make(
        path: str = "a.rs",
        line: int = 1,
        note: str = "note",
        assignee: str | None = None,
        issue: str | None = None,
        due: date | None = None,
    ) -> AnnotationRecord:
        return AnnotationRecord(path, line, note, assignee, issue, due)

    return make
