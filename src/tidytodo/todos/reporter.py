"""Text reports over TODO records."""
from __future__ import annotations

import csv
import io
from collections import defaultdict
from datetime import date
from typing import Iterable, Sequence

from tidytodo.todos.aggregator import aggregate, by_assignee, by_issue, by_overdue
from tidytodo.todos.exporter import record_to_dict, to_json
from tidytodo.todos.models import AnnotationRecord, ParseDiagnostic, ValidationViolation

CSV_FIELDS = ("path", "line", "issue", "assignee", "due", "note")


def _escape_cell(text: str) -> str:
    return text.replace("|", "\\|")


def format_listing(record: AnnotationRecord) -> str:
    """One-line listing: ``path:line [#1, @a, due:2024-01-01] note``."""
    info: list[str] = []
    if record.issue is not None:
        info.append(record.issue)
    if record.assignee is not None:
        info.append(f"@{record.assignee}")
    if record.due is not None:
        info.append(f"due:{record.due.isoformat()}")

    if info:
        return f"{record.location} [{', '.join(info)}] {record.note}".rstrip()
    return f"{record.location} {record.note}".rstrip()


def format_counts(counts: dict[str, int]) -> str:
    """Render aggregator output as ``key: count`` lines."""
    return "\n".join(f"{key}: {count}" for key, count in counts.items())


def format_violations(violations: Iterable[ValidationViolation]) -> str:
    return "\n".join(str(v) for v in violations)


def format_diagnostics(diagnostics: Iterable[ParseDiagnostic]) -> str:
    return "\n".join(str(d) for d in diagnostics)


class TodoReporter:
    """Generate reports from TODO records.

    Parameters
    ----------
    records : Sequence[AnnotationRecord]
        The records to report on, already in the desired order.
    today : date | None
        Reference date for overdue counts. Defaults to today.

    Examples
    --------
    >>> reporter = TodoReporter(project.scan().records)
    >>> print(reporter.to_markdown())
    """

    def __init__(self, records: Sequence[AnnotationRecord], today: date | None = None) -> None:
        self._records = list(records)
        self._today = today or date.today()

    def summary(self) -> dict:
        """Generate a summary dictionary of TODO statistics.

        Returns
        -------
        dict
            Dictionary with:
            - total: Total number of TODOs
            - by_assignee: Count by assignee
            - by_issue: Count by issue
            - by_overdue: Count per overdue/upcoming/someday bucket
            - files_affected: Number of files with TODOs
        """
        return {
            "total": len(self._records),
            "by_assignee": aggregate(self._records, by_assignee),
            "by_issue": aggregate(self._records, by_issue),
            "by_overdue": aggregate(self._records, by_overdue(self._today)),
            "files_affected": len({r.path for r in self._records}),
        }

    def to_list(self) -> str:
        """One listing line per record."""
        return "\n".join(format_listing(r) for r in self._records)

    def to_json(self, tool_version: str, indent: int = 2) -> str:
        """The export schema as JSON."""
        return to_json(self._records, tool_version, indent=indent)

    def to_markdown(self) -> str:
        """Render a markdown report: bucket counts, then one table per file.

        Overdue due dates are set in bold. Pipes inside notes are escaped so
        they do not split table cells.
        """
        summary = self.summary()
        lines = [
            "# TODO Report",
            "",
            f"- **Total TODOs:** {summary['total']}",
            f"- **Files affected:** {summary['files_affected']}",
        ]
        for title, key in (("Assignee", "by_assignee"), ("Issue", "by_issue"), ("Due", "by_overdue")):
            lines.extend(["", f"## By {title}", ""])
            lines.extend(f"- {bucket}: {count}" for bucket, count in summary[key].items())

        by_file: dict[str, list[AnnotationRecord]] = defaultdict(list)
        for record in self._records:
            by_file[record.path].append(record)

        for path in sorted(by_file):
            lines.extend(["", f"## {path}", "", "| Line | Issue | Assignee | Due | Note |", "|---|---|---|---|---|"])
            for record in sorted(by_file[path], key=lambda r: r.line):
                due = record.due.isoformat() if record.due else ""
                if record.is_overdue(self._today):
                    due = f"**{due}**"
                lines.append(
                    f"| {record.line} | {record.issue or ''} | {record.assignee or ''} "
                    f"| {due} | {_escape_cell(record.note)} |"
                )

        return "\n".join(lines) + "\n"

    def to_csv(self) -> str:
        """Export entries as CSV with an extra ``overdue`` column; unset fields are empty."""
        output = io.StringIO()
        writer = csv.DictWriter(output, fieldnames=[*CSV_FIELDS, "overdue"])
        writer.writeheader()
        for record in self._records:
            writer.writerow({**record_to_dict(record), "overdue": record.is_overdue(self._today)})
        return output.getvalue()
