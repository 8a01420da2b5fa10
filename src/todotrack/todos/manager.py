"""Build metadata updates for batches of TODO comments.

Each operation selects annotations by a predicate and returns the
:class:`TodoUpdate` list that the rewrite engine applies. Nothing here
touches the filesystem.
"""
from __future__ import annotations

from dataclasses import replace
from typing import Callable, Iterable

from todotrack.errors import ConfigurationError
from todotrack.todos.annotation import Annotation, AnnotationList
from todotrack.todos.issues import IssueReference, parse_issue
from todotrack.todos.metadata import Metadata, is_date_token
from todotrack.todos.rewriter import TodoUpdate


def validate_issue(text: str) -> IssueReference:
    """Parse a user supplied replacement issue.

    Raises
    ------
    ConfigurationError
        If ``text`` is neither ``#<n>`` nor ``KEY-<n>``.
    """
    issue = parse_issue(text.strip())
    if issue is None:
        raise ConfigurationError(f'Invalid replacement issue "{text}"')
    return issue


def validate_date(text: str) -> str:
    """Check a user supplied due date.

    Raises
    ------
    ConfigurationError
        If ``text`` is not a valid ``YYYY-MM-DD`` calendar date.
    """
    text = text.strip()
    if not is_date_token(text) or Metadata(due=text).due_date is None:
        raise ConfigurationError(f'Invalid due date "{text}", expected YYYY-MM-DD')
    return text


def validate_assignee(text: str) -> str:
    """Check a user supplied assignee name.

    The name must survive a render and re-parse unchanged, so it cannot be
    empty or hold whitespace, commas or a closing parenthesis.

    Raises
    ------
    ConfigurationError
        If ``text`` cannot be written into a metadata block.
    """
    text = text.strip()
    if not text or any(c.isspace() or c in ",)" for c in text):
        raise ConfigurationError(f'Invalid assignee "{text}"')
    return text


class TodoManager:
    """Plan changes to the metadata of scanned TODOs.

    Parameters
    ----------
    todos : Iterable[Annotation]
        Annotations from the current scan.

    Examples
    --------
    >>> manager = TodoManager(finder.find_all())
    >>> updates = manager.rename_assignee("bob", "robert")
    >>> TodoRewriter().apply(updates)
    """

    def __init__(self, todos: Iterable[Annotation]) -> None:
        self._todos = AnnotationList(list(todos))

    @property
    def todos(self) -> AnnotationList:
        return self._todos

    def _plan(
        self,
        select: Callable[[Annotation], bool],
        change: Callable[[Metadata], Metadata],
    ) -> list[TodoUpdate]:
        return [
            TodoUpdate.from_annotation(todo, metadata=change(todo.metadata))
            for todo in self._todos
            if select(todo)
        ]

    def format_all(self) -> list[TodoUpdate]:
        """Rewrite every TODO in canonical form, leaving content unchanged."""
        return self._plan(lambda t: True, lambda m: m)

    # ===== Issues =====

    def remove_issue(self, issue: str) -> list[TodoUpdate]:
        """Drop the citation from TODOs citing ``issue``."""
        return self._plan(
            lambda t: t.metadata.issue_text == issue,
            lambda m: replace(m, issue=None),
        )

    def remove_all_issues(self) -> list[TodoUpdate]:
        return self._plan(
            lambda t: t.issue is not None,
            lambda m: replace(m, issue=None),
        )

    def rename_issue(self, old: str, new: str) -> list[TodoUpdate]:
        """Make TODOs citing ``old`` cite ``new`` instead.

        Raises
        ------
        ConfigurationError
            If ``new`` is not a valid issue reference.
        """
        new_issue = validate_issue(new)
        return self._plan(
            lambda t: t.metadata.issue_text == old,
            lambda m: replace(m, issue=new_issue),
        )

    def add_issue_to_untracked(self, issue: str) -> list[TodoUpdate]:
        """Cite ``issue`` on every TODO without a citation.

        Raises
        ------
        ConfigurationError
            If ``issue`` is not a valid issue reference.
        """
        new_issue = validate_issue(issue)
        return self._plan(
            lambda t: t.issue is None,
            lambda m: replace(m, issue=new_issue),
        )

    # ===== Assignees =====

    def remove_assignee(self, assignee: str) -> list[TodoUpdate]:
        return self._plan(
            lambda t: t.assignee == assignee,
            lambda m: replace(m, assignee=None),
        )

    def remove_all_assignees(self) -> list[TodoUpdate]:
        return self._plan(
            lambda t: t.assignee is not None,
            lambda m: replace(m, assignee=None),
        )

    def rename_assignee(self, old: str, new: str) -> list[TodoUpdate]:
        new = validate_assignee(new)
        return self._plan(
            lambda t: t.assignee == old,
            lambda m: replace(m, assignee=new),
        )

    def assign_unassigned(self, assignee: str) -> list[TodoUpdate]:
        assignee = validate_assignee(assignee)
        return self._plan(
            lambda t: t.assignee is None,
            lambda m: replace(m, assignee=assignee),
        )

    def assign_issue(self, issue: str, assignee: str) -> list[TodoUpdate]:
        """Assign every TODO citing ``issue`` to ``assignee``."""
        assignee = validate_assignee(assignee)
        return self._plan(
            lambda t: t.metadata.issue_text == issue,
            lambda m: replace(m, assignee=assignee),
        )

    # ===== Due dates =====

    def remove_all_due_dates(self) -> list[TodoUpdate]:
        return self._plan(
            lambda t: t.due is not None,
            lambda m: replace(m, due=None),
        )

    def add_missing_due_dates(self, due: str) -> list[TodoUpdate]:
        """Set ``due`` on every TODO without a due date.

        Raises
        ------
        ConfigurationError
            If ``due`` is not a valid date.
        """
        due = validate_date(due)
        return self._plan(
            lambda t: t.due is None,
            lambda m: replace(m, due=due),
        )

    def set_issue_due_date(self, issue: str, due: str) -> list[TodoUpdate]:
        """Set ``due`` on every TODO citing ``issue``.

        Raises
        ------
        ConfigurationError
            If ``due`` is not a valid date.
        """
        due = validate_date(due)
        return self._plan(
            lambda t: t.metadata.issue_text == issue,
            lambda m: replace(m, due=due),
        )
