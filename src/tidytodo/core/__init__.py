"""
Core module: operation results and the project entry point.

``TodoProject`` and ``Transaction`` live in ``tidytodo.core.project`` and
``tidytodo.core.transaction``; they are re-exported from ``tidytodo``.
"""
from __future__ import annotations

from .errors import InternalConsistencyError
from .results import BatchResult, ErrorResult, Result

__all__ = [
    "Result",
    "ErrorResult",
    "BatchResult",
    "InternalConsistencyError",
]
