"""Locate comment lines in source files.

This is the file-walking side of a scan: it picks the files, reads them, and
isolates comment bodies so the parser only ever sees comment text. Python
sources are tokenized with LibCST, so a ``#`` inside a string literal is
never taken for a comment. Other files use a line-start marker table keyed
by file extension.
"""
from __future__ import annotations

import logging
import re
from pathlib import Path
from typing import Iterable, Iterator

import libcst as cst
from libcst.metadata import MetadataWrapper, PositionProvider

from tidytodo.todos.models import CommentLine

logger = logging.getLogger(__name__)

# Directories never descended into
DEFAULT_EXCLUDES: frozenset[str] = frozenset({
    ".git",
    ".hg",
    ".svn",
    ".tox",
    ".nox",
    ".venv",
    "venv",
    "node_modules",
    "__pycache__",
    ".mypy_cache",
    ".pytest_cache",
    ".ruff_cache",
})

PYTHON_SUFFIXES = (".py", ".pyi")

_C_STYLE = ("//", "/*", "*")
_HASH = ("#",)

COMMENT_MARKERS: dict[str, tuple[str, ...]] = {
    **dict.fromkeys(
        (".c", ".h", ".cc", ".cpp", ".hpp", ".cs", ".java", ".kt", ".scala",
         ".go", ".rs", ".swift", ".js", ".jsx", ".mjs", ".ts", ".tsx",
         ".php", ".dart", ".css", ".scss", ".less"),
        _C_STYLE,
    ),
    **dict.fromkeys(
        (".py", ".pyi", ".sh", ".bash", ".zsh", ".rb", ".pl", ".r",
         ".yaml", ".yml", ".toml", ".cfg", ".ini", ".conf", ".mk",
         ".dockerfile", ".tf"),
        _HASH,
    ),
    **dict.fromkeys((".sql", ".lua", ".hs", ".elm"), ("--",)),
    **dict.fromkeys((".lisp", ".clj", ".el", ".asm"), (";",)),
}

# Any line break LibCST recognises; only \n starts a new physical line here
_LINE_BREAK = re.compile(r"\r\n|\r|\n")

# Used for files whose extension is unknown
DEFAULT_MARKERS: tuple[str, ...] = ("//", "/*", "#")


class CommentCollector(cst.CSTVisitor):
    """Visitor collecting every comment with its position."""

    METADATA_DEPENDENCIES = (PositionProvider,)

    def __init__(self) -> None:
        self.comments: list[tuple[int, int, str]] = []

    def visit_Comment(self, node: cst.Comment) -> None:
        pos = self.get_metadata(PositionProvider, node)
        self.comments.append((pos.start.line, pos.start.column, node.value))


def split_lines(content: str) -> list[str]:
    """Split on ``\\n`` only, dropping a trailing ``\\r`` from each line.

    Line numbers from here agree with ``mutator.apply_patch``.
    """
    return [line[:-1] if line.endswith("\r") else line for line in content.split("\n")]


def markers_for(path: Path) -> tuple[str, ...]:
    """Comment markers for a file, longest first."""
    markers = COMMENT_MARKERS.get(path.suffix.lower(), DEFAULT_MARKERS)
    return tuple(sorted(markers, key=len, reverse=True))


def find_line_comments(
    key: str, content: str, markers: Iterable[str]
) -> Iterator[CommentLine]:
    """Yield lines that start with a comment marker, after indentation.

    A trailing ``*/`` is left out of the body so a rewrite keeps it in place.
    """
    markers = tuple(markers)
    for line_number, line in enumerate(split_lines(content), 1):
        stripped = line.lstrip()
        for marker in markers:
            if stripped.startswith(marker):
                column = len(line) - len(stripped) + len(marker)
                body = line[column:]
                trimmed = body.rstrip()
                if trimmed.endswith("*/"):
                    body = trimmed[:-2]
                yield CommentLine(key, line_number, body, column)
                break


def logical_line_starts(content: str) -> list[tuple[int, int]]:
    """Map each LibCST line to its physical line and offset.

    LibCST also breaks lines on a bare ``\\r``, which ``split_lines`` keeps
    inside a physical line. Entry ``i`` holds the physical line number and
    the column at which logical line ``i + 1`` starts.
    """
    starts = [(1, 0)]
    line_number, line_start = 1, 0
    for match in _LINE_BREAK.finditer(content):
        if match.group() != "\r":
            line_number += 1
            line_start = match.end()
        starts.append((line_number, match.end() - line_start))
    return starts


def find_python_comments(key: str, content: str) -> Iterator[CommentLine]:
    """Yield every comment of a Python module, inline comments included.

    Line numbers and columns refer to ``split_lines`` lines, so they stay
    valid for rewrites even in files with bare ``\\r`` line endings. Falls
    back to the line-start scan when the module does not parse.
    """
    try:
        module = cst.parse_module(content)
    except cst.ParserSyntaxError as e:
        logger.debug("%s: not parseable as Python (%s), scanning lines", key, e)
        yield from find_line_comments(key, content, _HASH)
        return

    collector = CommentCollector()
    MetadataWrapper(module).visit(collector)
    starts = logical_line_starts(content)
    for line_number, column, value in collector.comments:
        physical_line, offset = starts[line_number - 1]
        # Body starts after the '#'
        yield CommentLine(key, physical_line, value[1:], offset + column + 1)


def find_comments(key: str, path: Path, content: str) -> Iterator[CommentLine]:
    """Yield the comment lines of one file's content."""
    if path.suffix.lower() in PYTHON_SUFFIXES:
        return find_python_comments(key, content)
    return find_line_comments(key, content, markers_for(path))


def split_glob(path: Path) -> tuple[Path, str]:
    """Split a glob into the directory before its first wildcard and the rest.

    ``src/*.rs`` gives ``(src, "*.rs")``; ``*.rs`` gives ``(., "*.rs")``.
    """
    path_str = path.as_posix()
    head = path_str.split("*")[0]
    prefix = head.rsplit("/", 1)[0] if "/" in head else ""
    if not prefix and head.startswith("/"):
        prefix = "/"
    return Path(prefix or "."), path_str[len(prefix):].lstrip("/")


def iter_source_files(
    path: Path, exclude: Iterable[str] = ()
) -> list[Path]:
    """List the files a scan covers.

    Parameters
    ----------
    path : Path
        A file, a directory (searched recursively) or a glob pattern.
    exclude : Iterable[str]
        Extra directory names to skip in addition to DEFAULT_EXCLUDES.

    Returns
    -------
    list[Path]
        Sorted resolved file paths.
    """
    excluded = DEFAULT_EXCLUDES | frozenset(exclude)

    if path.is_file():
        return [path.resolve()]

    if path.is_dir():
        candidates = path.resolve().rglob("*")
        base = path.resolve()
    else:
        base, pattern = split_glob(path)
        base = base.resolve()
        candidates = base.glob(pattern)

    files = []
    for candidate in candidates:
        if not candidate.is_file():
            continue
        relative_parts = candidate.relative_to(base).parts[:-1]
        if any(part in excluded for part in relative_parts):
            continue
        files.append(candidate)
    return sorted(files)


def read_source(path: Path) -> str | None:
    """Read a file as UTF-8 text, or return None so the scan can skip it."""
    try:
        # newline="" keeps \r\n intact so rewrites preserve line endings
        with path.open(encoding="utf-8", newline="") as f:
            return f.read()
    except UnicodeDecodeError:
        logger.debug("Skipping %s: not UTF-8 text", path)
    except OSError as e:
        logger.warning("Skipping %s: %s", path, e)
    return None
