"""Report formatting for TODO listings, statistics and lint results."""
from __future__ import annotations

import csv
import io
import json
from collections import Counter
from typing import Iterable, Literal

from todotrack.todos.annotation import Annotation
from todotrack.todos.lint import LintResult
from todotrack.todos.metadata import render_metadata

ReportFormat = Literal["text", "json", "csv"]

REPORT_FORMATS: tuple[ReportFormat, ...] = ("text", "json", "csv")

NO_TODOS = "<no TODOs>"


def format_meta(todo: Annotation) -> str | None:
    """Metadata as shown in listings.

    Recognized fields are shown canonically with the due date as
    ``due:<date>``. If the payload had no recognized token the raw payload
    is shown instead.
    """
    if todo.payload is None:
        return None

    metadata = todo.metadata
    parts: list[str] = []
    if metadata.issue is not None:
        parts.append(metadata.issue.render())
    if metadata.assignee is not None:
        parts.append(f"@{metadata.assignee}")
    if metadata.due is not None:
        parts.append(f"due:{metadata.due}")

    return ", ".join(parts) if parts else todo.payload


def format_line(todo: Annotation) -> str:
    """Format one annotation as ``path:line [meta] note``."""
    meta = format_meta(todo)
    if meta is None:
        return f"{todo.location} {todo.display_note}"
    return f"{todo.location} [{meta}] {todo.display_note}"


class TodoReporter:
    """Generate reports from annotations.

    Parameters
    ----------
    todos : Iterable[Annotation]
        The annotations to report on.

    Examples
    --------
    >>> reporter = TodoReporter(todos)
    >>> print(reporter.to_text())
    >>> print(reporter.to_json())
    """

    def __init__(self, todos: Iterable[Annotation]) -> None:
        self._todos = list(todos)

    def summary(self) -> dict:
        """Generate a summary dictionary of TODO statistics.

        Returns
        -------
        dict
            Dictionary with summary statistics including:
            - total: Total number of TODOs
            - by_assignee: Count by assignee
            - by_issue: Count by cited issue
            - with_issues: Count with issue references
            - without_issues: Count without issue references
            - with_due_dates: Count with due dates
            - files_affected: Number of files with TODOs
        """
        by_assignee: Counter[str] = Counter()
        by_issue: Counter[str] = Counter()
        files: set[str] = set()
        with_due = 0

        for todo in self._todos:
            if todo.assignee is not None:
                by_assignee[todo.assignee] += 1
            if todo.metadata.issue_text is not None:
                by_issue[todo.metadata.issue_text] += 1
            if todo.due is not None:
                with_due += 1
            files.add(str(todo.file_path))

        with_issues = sum(by_issue.values())
        return {
            "total": len(self._todos),
            "by_assignee": dict(by_assignee),
            "by_issue": dict(by_issue),
            "with_issues": with_issues,
            "without_issues": len(self._todos) - with_issues,
            "with_due_dates": with_due,
            "files_affected": len(files),
        }

    def to_text(self) -> str:
        """One ``path:line [meta] note`` line per annotation."""
        if not self._todos:
            return NO_TODOS
        return "\n".join(format_line(todo) for todo in self._todos)

    def to_json(self, indent: int = 2) -> str:
        """Generate a JSON report of TODOs.

        Parameters
        ----------
        indent : int
            Indentation level for JSON output. Default: 2.
        """
        data = {
            "summary": self.summary(),
            "todos": [
                {
                    "file": str(todo.file_path),
                    "line": todo.line_number,
                    "delimiter": todo.delimiter,
                    "note": todo.display_note,
                    "assignee": todo.assignee,
                    "issue": todo.metadata.issue_text,
                    "due": todo.due,
                    "metadata": render_metadata(todo.metadata),
                }
                for todo in self._todos
            ],
        }
        return json.dumps(data, indent=indent)

    def to_csv(self) -> str:
        """Generate a CSV report of TODOs."""
        output = io.StringIO()
        writer = csv.writer(output)

        writer.writerow(["File", "Line", "Assignee", "Issue", "Due", "Note"])
        for todo in self._todos:
            writer.writerow([
                str(todo.file_path),
                todo.line_number,
                todo.assignee or "",
                todo.metadata.issue_text or "",
                todo.due or "",
                todo.display_note,
            ])

        return output.getvalue()

    def render(self, report_format: ReportFormat = "text") -> str:
        if report_format == "json":
            return self.to_json()
        if report_format == "csv":
            return self.to_csv()
        return self.to_text()


def format_counts(counts: Iterable[tuple[str, int]]) -> str:
    """Format grouped counts as ``key: count`` lines."""
    return "\n".join(f"{key}: {count}" for key, count in counts)


def format_lint_report(results: Iterable[LintResult]) -> str:
    """Format lint results, one block per offending annotation."""
    results = list(results)
    lines: list[str] = []
    for result in results:
        lines.append(format_line(result.annotation))
        lines.extend(f"  - {violation}" for violation in result.violations)

    noun = "TODO" if len(results) == 1 else "TODOs"
    lines.append(f"{len(results)} {noun} with lint violations")
    return "\n".join(lines)
