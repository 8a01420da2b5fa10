"""Lint rules for TODO annotations.

Each annotation is checked against every enabled rule independently, so a
single annotation can collect several violations.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Iterable

from todotrack.todos.annotation import Annotation
from todotrack.todos.issues import IssueFormat, ProjectKeyIssue

logger = logging.getLogger(__name__)


class Violation(str, Enum):
    """Lint violation labels."""

    INVALID_FORMAT = "Invalid format"
    MISSING_ASSIGNEE = "Missing assignee"
    INVALID_ASSIGNEE = "Invalid assignee"
    MISSING_ISSUE = "Missing issue"
    INVALID_ISSUE_FORMAT = "Invalid issue format"
    INVALID_PROJECT_KEY = "Invalid project key"
    MISSING_DUE_DATE = "Missing due date"

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class LintConfig:
    """Which rules are enabled, and their allow-lists.

    Attributes
    ----------
    require_assignee : bool
        Every TODO must name an assignee.
    require_issue : bool
        Every TODO must cite an issue.
    require_due_date : bool
        Every TODO must carry a due date.
    allowed_assignees : tuple[str, ...] | None
        If set, assignees must be one of these.
    required_issue_format : IssueFormat | None
        If set, cited issues must use this format.
    allowed_project_keys : tuple[str, ...] | None
        If set, project-key issues must use one of these keys.
    """

    require_assignee: bool = False
    require_issue: bool = False
    require_due_date: bool = False
    allowed_assignees: tuple[str, ...] | None = None
    required_issue_format: IssueFormat | None = None
    allowed_project_keys: tuple[str, ...] | None = None


@dataclass(frozen=True)
class LintResult:
    """An annotation together with the rules it violates."""

    annotation: Annotation
    violations: tuple[Violation, ...]


def check_annotation(todo: Annotation, config: LintConfig) -> list[Violation]:
    """Return every violation of ``config`` by ``todo``, in rule order."""
    violations: list[Violation] = []
    metadata = todo.metadata

    if not todo.is_canonical:
        violations.append(Violation.INVALID_FORMAT)

    if config.require_assignee and metadata.assignee is None:
        violations.append(Violation.MISSING_ASSIGNEE)

    if (
        config.allowed_assignees is not None
        and metadata.assignee is not None
        and metadata.assignee not in config.allowed_assignees
    ):
        violations.append(Violation.INVALID_ASSIGNEE)

    if config.require_issue and metadata.issue is None:
        violations.append(Violation.MISSING_ISSUE)

    if (
        config.required_issue_format is not None
        and metadata.issue is not None
        and metadata.issue.format != config.required_issue_format
    ):
        violations.append(Violation.INVALID_ISSUE_FORMAT)

    if (
        config.allowed_project_keys is not None
        and isinstance(metadata.issue, ProjectKeyIssue)
        and metadata.issue.key not in config.allowed_project_keys
    ):
        violations.append(Violation.INVALID_PROJECT_KEY)

    if config.require_due_date and metadata.due is None:
        violations.append(Violation.MISSING_DUE_DATE)

    return violations


def lint(todos: Iterable[Annotation], config: LintConfig) -> list[LintResult]:
    """Lint a collection of annotations.

    Returns
    -------
    list[LintResult]
        One entry per annotation with at least one violation, in input
        order. An empty list means the tree is clean.
    """
    results: list[LintResult] = []
    for todo in todos:
        violations = check_annotation(todo, config)
        if violations:
            results.append(LintResult(todo, tuple(violations)))

    logger.info("Lint found %d TODOs with violations", len(results))
    return results
