"""Exceptions raised by the core.

Expected failures are reported through Result objects. The one exception
type here signals a broken invariant, where continuing could corrupt files.
"""
from __future__ import annotations


class InternalConsistencyError(RuntimeError):
    """A core invariant was violated, e.g. two edits overlap.

    Mutating operations must abort before writing anything when this is
    raised.
    """

    def __init__(self, message: str, path: str | None = None) -> None:
        super().__init__(f"{path}: {message}" if path else message)
        self.path = path
