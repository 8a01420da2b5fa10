"""Issue reference parsing for TODO metadata.

Two citation styles are recognized:
- numbered references such as ``#123``
- project-key references such as ``ABC-123`` (key is upper case letters,
  digits and underscores, starting with a letter)
"""
from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Literal, Union

IssueFormat = Literal["numbered", "project-key"]

# All recognized issue formats
ISSUE_FORMATS: tuple[IssueFormat, ...] = ("numbered", "project-key")

NUMBERED_PATTERN = re.compile(r"#[0-9]+")
PROJECT_KEY_PATTERN = re.compile(r"(?P<key>[A-Z][A-Z0-9_]*)-(?P<number>[0-9]+)")


@dataclass(frozen=True)
class NumberedIssue:
    """A bare numbered issue reference, e.g. ``#42``.

    Attributes
    ----------
    text : str
        The reference including the leading ``#``.
    """

    text: str

    format: IssueFormat = field(default="numbered", init=False, repr=False, compare=False)

    def render(self) -> str:
        return self.text

    def __str__(self) -> str:
        return self.render()


@dataclass(frozen=True)
class ProjectKeyIssue:
    """A project-key issue reference, e.g. ``ABC-123``.

    Attributes
    ----------
    key : str
        Project key (``ABC``).
    number : str
        Issue number within the project, kept as text (``123``).
    """

    key: str
    number: str

    format: IssueFormat = field(default="project-key", init=False, repr=False, compare=False)

    def render(self) -> str:
        return f"{self.key}-{self.number}"

    def __str__(self) -> str:
        return self.render()


IssueReference = Union[NumberedIssue, ProjectKeyIssue]


def parse_issue(token: str) -> IssueReference | None:
    """Classify a single token as an issue reference.

    The numbered form is tried first, then the project-key form.

    Parameters
    ----------
    token : str
        Candidate token, already trimmed.

    Returns
    -------
    IssueReference | None
        The parsed reference, or None if the token is not a citation.

    Examples
    --------
    >>> parse_issue("#42")
    NumberedIssue(text='#42')
    >>> parse_issue("ABC-123").key
    'ABC'
    >>> parse_issue("abc-123") is None
    True
    """
    if NUMBERED_PATTERN.fullmatch(token):
        return NumberedIssue(token)

    match = PROJECT_KEY_PATTERN.fullmatch(token)
    if match:
        return ProjectKeyIssue(match.group("key"), match.group("number"))

    return None


def render_issue(issue: IssueReference) -> str:
    """Render an issue reference back to its canonical text."""
    return issue.render()
