"""Unified diffs shown for dry runs and after a rewrite."""
from __future__ import annotations

import difflib
from pathlib import Path


def _terminated_lines(content: str) -> list[str]:
    lines = content.splitlines(keepends=True)
    if lines and not lines[-1].endswith("\n"):
        lines[-1] += "\n"
    return lines


def generate_diff(
    original: str,
    modified: str,
    path: Path | str,
    context_lines: int = 3,
) -> str:
    """Render the change a patch makes to one file.

    Parameters
    ----------
    original : str
        File content at scan time.
    modified : str
        File content with the patch applied.
    path : Path | str
        Path shown in the ``a/`` and ``b/`` headers.
    context_lines : int
        Unchanged lines kept around each hunk.

    Returns
    -------
    str
        The diff, or an empty string for a no-op patch.

    Examples
    --------
    >>> print(generate_diff("// TODO fix\\n", "// TODO: fix\\n", "a.rs"))
    --- a/a.rs
    +++ b/a.rs
    @@ -1 +1 @@
    -// TODO fix
    +// TODO: fix
    """
    if original == modified:
        return ""
    return "".join(difflib.unified_diff(
        _terminated_lines(original),
        _terminated_lines(modified),
        fromfile=f"a/{path}",
        tofile=f"b/{path}",
        n=context_lines,
    ))


def combine_diffs(diffs: dict[Path, str]) -> str:
    """Concatenate per-file diffs in path order, leaving out no-op files."""
    ordered = sorted((str(path), diff) for path, diff in diffs.items() if diff)
    return "\n".join(diff for _, diff in ordered)
