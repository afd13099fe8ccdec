"""Project configuration from the ``[tool.tidytodo]`` table of pyproject.toml.

Example::

    [tool.tidytodo]
    require-assignees = true
    require-issues = true
    require-due-dates = false
    allowed-assignees = ["alice", "bob"]
    exclude = ["vendor", "third_party"]
    workers = 4
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

try:
    import tomllib
except ImportError:  # Python < 3.11
    import tomli as tomllib

from tidytodo.todos.validator import RuleSet

logger = logging.getLogger(__name__)

KNOWN_KEYS = frozenset({
    "require-assignees",
    "require-issues",
    "require-due-dates",
    "allowed-assignees",
    "exclude",
    "workers",
})


@dataclass(frozen=True)
class TidyTodoConfig:
    """Defaults for a project, overridable from the command line.

    Attributes
    ----------
    require_assignees : bool
        Validation requires assignees.
    require_issues : bool
        Validation requires issue references.
    require_due_dates : bool
        Validation requires due dates.
    allowed_assignees : tuple[str, ...] | None
        When set, only these assignees pass validation.
    exclude : tuple[str, ...]
        Extra directory names to skip while scanning.
    workers : int
        Threads used for scanning.
    """

    require_assignees: bool = False
    require_issues: bool = False
    require_due_dates: bool = False
    allowed_assignees: tuple[str, ...] | None = None
    exclude: tuple[str, ...] = field(default_factory=tuple)
    workers: int = 4

    def ruleset(
        self,
        require_assignees: bool = False,
        require_issues: bool = False,
        require_due_dates: bool = False,
    ) -> RuleSet:
        """Build a RuleSet, OR-ing the given flags with the configured ones."""
        return RuleSet(
            require_assignee=self.require_assignees or require_assignees,
            require_due=self.require_due_dates or require_due_dates,
            require_issue=self.require_issues or require_issues,
            allowed_assignees=(
                frozenset(self.allowed_assignees)
                if self.allowed_assignees is not None
                else None
            ),
        )


def _string_list(table: dict[str, Any], key: str) -> tuple[str, ...] | None:
    value = table.get(key)
    if value is None:
        return None
    if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
        raise ValueError(f"[tool.tidytodo] {key} must be a list of strings")
    return tuple(value)


def parse_config(table: dict[str, Any]) -> TidyTodoConfig:
    """Build a config from an already-loaded ``[tool.tidytodo]`` table.

    Raises
    ------
    ValueError
        If a known key has the wrong type.
    """
    for key in sorted(set(table) - KNOWN_KEYS):
        logger.warning("Ignoring unknown [tool.tidytodo] key %r", key)

    flags = {}
    for key in ("require-assignees", "require-issues", "require-due-dates"):
        value = table.get(key, False)
        if not isinstance(value, bool):
            raise ValueError(f"[tool.tidytodo] {key} must be true or false")
        flags[key.replace("-", "_")] = value

    workers = table.get("workers", 4)
    if not isinstance(workers, int) or isinstance(workers, bool) or workers < 1:
        raise ValueError("[tool.tidytodo] workers must be a positive integer")

    return TidyTodoConfig(
        allowed_assignees=_string_list(table, "allowed-assignees"),
        exclude=_string_list(table, "exclude") or (),
        workers=workers,
        **flags,
    )


def find_pyproject(start: Path) -> Path | None:
    """Find the nearest pyproject.toml at or above ``start``."""
    start = start.resolve()
    directory = start if start.is_dir() else start.parent
    for candidate in (directory, *directory.parents):
        pyproject = candidate / "pyproject.toml"
        if pyproject.is_file():
            return pyproject
    return None


def load_config(start: Path) -> TidyTodoConfig:
    """Load the configuration that applies to ``start``.

    Missing files or tables give the defaults.

    Raises
    ------
    ValueError
        If pyproject.toml is not valid TOML or the table is malformed.
    """
    pyproject = find_pyproject(start)
    if pyproject is None:
        return TidyTodoConfig()

    try:
        with pyproject.open("rb") as f:
            data = tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        raise ValueError(f"{pyproject}: {e}") from e

    table = data.get("tool", {}).get("tidytodo")
    if table is None:
        return TidyTodoConfig()

    logger.debug("Loaded configuration from %s", pyproject)
    return parse_config(table)
