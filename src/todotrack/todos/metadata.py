"""Parsing and canonical rendering of the ``TODO(...)`` metadata payload.

The payload is a comma separated list of tokens::

    # TODO(#42, @alice, 2024-06-01): note

- ``@name`` sets the assignee
- ``#123`` or ``KEY-123`` sets the issue reference
- ``YYYY-MM-DD`` sets the due date

Each field keeps the first token of its kind; later duplicates and
unrecognized tokens are ignored. Rendering always emits issue, assignee,
due date in that order.
"""
from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import date

from todotrack.todos.issues import IssueReference, parse_issue

DATE_PATTERN = re.compile(r"[0-9]{4}-[0-9]{2}-[0-9]{2}")


@dataclass(frozen=True)
class Metadata:
    """Structured TODO metadata.

    Attributes
    ----------
    assignee : str | None
        Assignee name without the leading ``@``.
    issue : IssueReference | None
        Cited issue.
    due : str | None
        Due date as written (``YYYY-MM-DD``); see :attr:`due_date`.
    """

    assignee: str | None = None
    issue: IssueReference | None = None
    due: str | None = None

    @property
    def is_empty(self) -> bool:
        return self.assignee is None and self.issue is None and self.due is None

    @property
    def issue_text(self) -> str | None:
        """Canonical text of the cited issue, used for citation matching."""
        return self.issue.render() if self.issue is not None else None

    @property
    def due_date(self) -> date | None:
        """The due date as a calendar date, or None if absent or invalid."""
        if self.due is None:
            return None
        try:
            return date.fromisoformat(self.due)
        except ValueError:
            return None


EMPTY_METADATA = Metadata()


def is_date_token(token: str) -> bool:
    """Check whether a token has the ``YYYY-MM-DD`` shape of a due date."""
    return DATE_PATTERN.fullmatch(token) is not None


def parse_metadata(payload: str) -> Metadata:
    """Parse a metadata payload into a :class:`Metadata` record.

    Never fails: unrecognized tokens are skipped.

    Parameters
    ----------
    payload : str
        Text found between the parentheses of ``TODO(...)``.

    Returns
    -------
    Metadata
        The parsed record. An empty payload yields an all-empty record.

    Examples
    --------
    >>> parse_metadata("@alice, @bob").assignee
    'alice'
    >>> parse_metadata("2024-01-01, ABC-7").issue_text
    'ABC-7'
    """
    assignee: str | None = None
    issue: IssueReference | None = None
    due: str | None = None

    for token in (part.strip() for part in payload.strip().split(",")):
        if token.startswith("@"):
            if assignee is None:
                assignee = token[1:]
            continue

        if issue is None:
            issue = parse_issue(token)

        if due is None and is_date_token(token):
            due = token

    return Metadata(assignee=assignee, issue=issue, due=due)


def render_metadata(metadata: Metadata) -> str | None:
    """Render metadata as canonical payload text.

    Returns
    -------
    str | None
        ``"<issue>, @<assignee>, <due>"`` with absent fields left out, or
        None when every field is empty so the caller can omit the
        parenthesized block entirely.
    """
    parts: list[str] = []
    if metadata.issue is not None:
        parts.append(metadata.issue.render())
    if metadata.assignee is not None:
        parts.append(f"@{metadata.assignee}")
    if metadata.due is not None:
        parts.append(metadata.due)

    if not parts:
        return None
    return ", ".join(parts)
