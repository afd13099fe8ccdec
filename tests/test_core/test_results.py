"""
Tests for tidytodo.core.results module.

This module tests the Result, ErrorResult, and BatchResult classes through
which project operations report outcomes. Expected failures are returned,
not raised.

Coverage targets:
- Result: success/failure states, boolean evaluation, exit codes
- ErrorResult: error details, raise_if_error behavior
- BatchResult: aggregation, filtering, iteration, diff merging
"""
from __future__ import annotations

from pathlib import Path

import pytest

from tidytodo.core.errors import InternalConsistencyError
from tidytodo.core.results import BatchResult, ErrorResult, Result


# =============================================================================
# Result Tests
# =============================================================================

class TestResult:
    """Tests for the base Result class."""

    def test_successful_result(self):
        """
        A successful Result should have success=True and be truthy.
        Commands map it to exit code 0.
        """
        result = Result(success=True, message="TODOs formatted.")

        assert bool(result) is True
        assert result.is_error() is False
        assert result.exit_code == 0

    def test_failed_result(self):
        """A failed Result is falsy and maps to exit code 1."""
        result = Result(success=False, message="No TODOs untracked")

        assert bool(result) is False
        assert result.is_error() is True
        assert result.exit_code == 1

    def test_default_values(self):
        result = Result(success=True, message="ok")

        assert result.files_changed == []
        assert result.data is None
        assert result.diff is None
        assert result.diffs == {}


# =============================================================================
# ErrorResult Tests
# =============================================================================

class TestErrorResult:
    """Tests for the ErrorResult class - represents failed operations."""

    def test_always_unsuccessful(self):
        """ErrorResult.success is fixed to False and not an init argument."""
        result = ErrorResult(message="failed")

        assert result.success is False
        with pytest.raises(TypeError):
            ErrorResult(success=True, message="nope")

    def test_operation_context(self):
        result = ErrorResult(message="bad option", operation="rename-issue")

        assert result.operation == "rename-issue"
        assert isinstance(result, Result)

    def test_raise_if_error_with_exception(self):
        """The original exception is re-raised."""
        error = InternalConsistencyError("overlapping edits", "a.rs")
        result = ErrorResult(message=str(error), exception=error)

        with pytest.raises(InternalConsistencyError, match="a.rs: overlapping edits"):
            result.raise_if_error()

    def test_raise_if_error_without_exception(self):
        result = ErrorResult(message="No TODOs found")

        with pytest.raises(RuntimeError, match="No TODOs found"):
            result.raise_if_error()


# =============================================================================
# BatchResult Tests
# =============================================================================

class TestBatchResult:
    """Tests for the BatchResult class - per-file outcomes."""

    def test_empty_batch(self):
        """An empty batch counts as success, like all([])."""
        batch = BatchResult()

        assert batch.success is True
        assert len(batch) == 0
        assert batch.diff is None

    def test_partial_success(self):
        ok = Result(success=True, message="ok", files_changed=[Path("a.rs")])
        bad = ErrorResult(message="bad")

        batch = BatchResult([ok, bad])

        assert not batch
        assert batch.failed == [bad]
        assert list(batch) == [ok, bad]

    def test_files_changed_unique_and_ordered(self):
        batch = BatchResult([
            Result(success=True, message="", files_changed=[Path("b.rs"), Path("a.rs")]),
            Result(success=True, message="", files_changed=[Path("a.rs"), Path("c.rs")]),
        ])

        assert batch.files_changed == [Path("b.rs"), Path("a.rs"), Path("c.rs")]

    def test_diffs_are_combined_by_path(self):
        batch = BatchResult([
            Result(success=True, message="", diffs={Path("b.rs"): "diff b\n"}),
            Result(success=True, message="", diffs={Path("a.rs"): "diff a\n"}),
        ])

        assert batch.diffs == {Path("b.rs"): "diff b\n", Path("a.rs"): "diff a\n"}
        assert batch.diff == "diff a\n\ndiff b\n"
