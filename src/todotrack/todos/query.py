"""Filtering and grouping of annotations for the list and stat commands."""
from __future__ import annotations

from collections import Counter
from dataclasses import dataclass
from datetime import date
from enum import Enum
from typing import Iterable, Sequence

from todotrack.errors import ConfigurationError
from todotrack.todos.annotation import Annotation, AnnotationList

UNASSIGNED = "<unassigned>"
UNTRACKED = "<untracked>"
SOMEDAY = "<someday>"


class Grouping(Enum):
    """Keys that ``stat --group-by`` can aggregate on."""

    ASSIGNEE = "assignee"
    DUE = "due"
    ISSUE = "issue"

    @classmethod
    def parse(cls, value: str) -> Grouping:
        """Look up a grouping by name.

        Raises
        ------
        ConfigurationError
            If ``value`` is not a supported grouping.
        """
        try:
            return cls(value)
        except ValueError:
            raise ConfigurationError(f"--group-by={value} not supported") from None


@dataclass(frozen=True)
class TodoFilters:
    """Selection criteria shared by the query commands.

    A list field restricts the matching values; the paired flag selects
    annotations where the field is unset (alone: only unset ones; with a
    list: unset ones in addition to the listed values).
    """

    assignees: tuple[str, ...] | None = None
    unassigned: bool = False
    issues: tuple[str, ...] | None = None
    untracked: bool = False
    due: tuple[str, ...] | None = None
    someday: bool = False
    overdue: bool = False


def filter_by_match(
    value: str | None,
    allowed: Sequence[str] | None,
    include_unset: bool,
) -> bool:
    """Three-way field predicate.

    - With ``allowed``: the value must be listed, or be unset when
      ``include_unset`` is true.
    - Without ``allowed`` but with ``include_unset``: the value must be unset.
    - Otherwise every value passes.
    """
    if allowed is not None:
        if value is not None:
            return value in allowed
        return include_unset
    if include_unset:
        return value is None
    return True


def is_overdue(todo: Annotation, today: date | None = None) -> bool:
    """True if the annotation's due date is valid and strictly before today."""
    due_date = todo.metadata.due_date
    if due_date is None:
        return False
    return due_date < (today or date.today())


def matches_filters(todo: Annotation, filters: TodoFilters, today: date | None = None) -> bool:
    metadata = todo.metadata
    return (
        filter_by_match(metadata.assignee, filters.assignees, filters.unassigned)
        and filter_by_match(metadata.issue_text, filters.issues, filters.untracked)
        and filter_by_match(metadata.due, filters.due, filters.someday)
        and (not filters.overdue or is_overdue(todo, today))
    )


def filter_todos(
    todos: Iterable[Annotation],
    filters: TodoFilters,
    today: date | None = None,
) -> AnnotationList:
    """Select the annotations matching every criterion, keeping their order.

    Parameters
    ----------
    todos : Iterable[Annotation]
        Annotations to filter.
    filters : TodoFilters
        Selection criteria.
    today : date | None
        Reference date for ``overdue``; defaults to the local current date.
    """
    today = today or date.today()
    return AnnotationList([t for t in todos if matches_filters(t, filters, today)])


def group_key(todo: Annotation, grouping: Grouping) -> str:
    """The key ``todo`` is counted under, or the sentinel for unset values."""
    metadata = todo.metadata
    if grouping is Grouping.ASSIGNEE:
        return metadata.assignee if metadata.assignee is not None else UNASSIGNED
    if grouping is Grouping.ISSUE:
        return metadata.issue_text if metadata.issue_text is not None else UNTRACKED
    if grouping is Grouping.DUE:
        return metadata.due if metadata.due is not None else SOMEDAY
    raise ValueError(f"Unhandled grouping: {grouping!r}")


def group_and_count(
    todos: Iterable[Annotation], grouping: Grouping
) -> list[tuple[str, int]]:
    """Count annotations per group key.

    Returns
    -------
    list[tuple[str, int]]
        ``(key, count)`` pairs ordered by count, highest first. The order
        of groups with equal counts is not significant.
    """
    counts = Counter(group_key(todo, grouping) for todo in todos)
    return sorted(counts.items(), key=lambda item: item[1], reverse=True)
