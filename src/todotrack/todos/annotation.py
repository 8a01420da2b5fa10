"""Annotation values: one recognized TODO comment occurrence."""
from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Iterator, Literal, Sequence

from todotrack.todos.issues import IssueReference
from todotrack.todos.metadata import EMPTY_METADATA, Metadata, render_metadata

CommentDelimiter = Literal["//", "/*", "#"]

# All recognized comment delimiters
COMMENT_DELIMITERS: tuple[CommentDelimiter, ...] = ("//", "/*", "#")

BLOCK_COMMENT_CLOSER = "*/"


def leading_text(line: str, delimiter: str) -> str:
    """Return the text of ``line`` before the first ``delimiter``."""
    return line.split(delimiter, 1)[0]


def render_line(
    leading: str,
    delimiter: str,
    metadata: Metadata,
    note: str,
) -> str:
    """Render a TODO comment line in canonical form.

    Parameters
    ----------
    leading : str
        Text kept before the delimiter (normally indentation).
    delimiter : str
        Comment opener (``//``, ``/*`` or ``#``).
    metadata : Metadata
        Metadata to render; an empty record omits the parentheses.
    note : str
        Note text, written verbatim.

    Returns
    -------
    str
        The line, without a line terminator.

    Examples
    --------
    >>> render_line("    ", "#", Metadata(assignee="bob"), "fix me")
    '    # TODO(@bob): fix me'
    """
    meta = render_metadata(metadata)
    suffix = f"({meta})" if meta is not None else ""
    return f"{leading}{delimiter} TODO{suffix}: {note}"


@dataclass(frozen=True)
class Annotation:
    """A TODO comment found at a specific line of a file.

    ``line_number`` is a snapshot key for the scan that produced the
    annotation; mutations built from it must be applied in the same run.

    Attributes
    ----------
    file_path : Path
        File containing the comment.
    line_number : int
        1-based line number at scan time.
    delimiter : CommentDelimiter
        Comment opener used by the line.
    raw_line : str
        The full matched line, without its line terminator.
    note : str
        Note text as written, including a block-comment closer if present.
    payload : str | None
        Raw text between the parentheses, if any.
    metadata : Metadata
        Parsed form of ``payload``.
    """

    file_path: Path
    line_number: int
    delimiter: CommentDelimiter
    raw_line: str
    note: str
    payload: str | None = None
    metadata: Metadata = field(default=EMPTY_METADATA)

    @property
    def assignee(self) -> str | None:
        return self.metadata.assignee

    @property
    def issue(self) -> IssueReference | None:
        return self.metadata.issue

    @property
    def due(self) -> str | None:
        return self.metadata.due

    @property
    def location(self) -> str:
        """Get the file:line location string."""
        return f"{self.file_path}:{self.line_number}"

    @property
    def display_note(self) -> str:
        """Note text for display; block comments lose their trailing ``*/``."""
        if self.delimiter == "/*" and self.note.endswith(BLOCK_COMMENT_CLOSER):
            return self.note[: -len(BLOCK_COMMENT_CLOSER)].rstrip()
        return self.note

    @property
    def leading(self) -> str:
        """Text before the comment delimiter on the raw line."""
        return leading_text(self.raw_line, self.delimiter)

    def canonical_line(self) -> str:
        """Render this annotation's line in canonical form."""
        return render_line(self.leading, self.delimiter, self.metadata, self.note)

    @property
    def is_canonical(self) -> bool:
        """True if the raw line is already in canonical form."""
        return self.canonical_line() == self.raw_line

    def __repr__(self) -> str:
        preview = self.note[:30] + "..." if len(self.note) > 30 else self.note
        return f"Annotation({self.location}, {preview!r})"


class AnnotationList(Sequence[Annotation]):
    """An ordered collection of annotations with filtering helpers.

    Examples
    --------
    >>> todos = TodoFinder(config).find_all()
    >>> untracked = todos.without_issues()
    >>> alice = todos.by_assignee("alice")
    """

    def __init__(self, annotations: list[Annotation] | None = None) -> None:
        self._annotations: list[Annotation] = list(annotations or [])

    def __getitem__(self, index):  # type: ignore[override]
        if isinstance(index, slice):
            return AnnotationList(self._annotations[index])
        return self._annotations[index]

    def __len__(self) -> int:
        return len(self._annotations)

    def __iter__(self) -> Iterator[Annotation]:
        return iter(self._annotations)

    def __bool__(self) -> bool:
        return bool(self._annotations)

    def __eq__(self, other: object) -> bool:
        if isinstance(other, AnnotationList):
            return self._annotations == other._annotations
        if isinstance(other, list):
            return self._annotations == other
        return NotImplemented

    def __repr__(self) -> str:
        return f"AnnotationList({len(self._annotations)} todos)"

    def to_list(self) -> list[Annotation]:
        """Return a plain list copy of the annotations."""
        return list(self._annotations)

    @property
    def files(self) -> list[Path]:
        """Distinct files containing annotations, sorted."""
        return sorted({a.file_path for a in self._annotations})

    def filter(self, predicate: Callable[[Annotation], bool]) -> AnnotationList:
        """Filter annotations by a predicate function, preserving order."""
        return AnnotationList([a for a in self._annotations if predicate(a)])

    def by_assignee(self, assignee: str) -> AnnotationList:
        """Filter to annotations assigned to ``assignee`` (exact match)."""
        return self.filter(lambda a: a.assignee == assignee)

    def unassigned(self) -> AnnotationList:
        return self.filter(lambda a: a.assignee is None)

    def assigned(self) -> AnnotationList:
        return self.filter(lambda a: a.assignee is not None)

    def citing(self, issue: str) -> AnnotationList:
        """Filter to annotations citing ``issue`` (compared as canonical text)."""
        return self.filter(lambda a: a.metadata.issue_text == issue)

    def with_issues(self) -> AnnotationList:
        return self.filter(lambda a: a.issue is not None)

    def without_issues(self) -> AnnotationList:
        return self.filter(lambda a: a.issue is None)

    def with_due_dates(self) -> AnnotationList:
        return self.filter(lambda a: a.due is not None)

    def without_due_dates(self) -> AnnotationList:
        return self.filter(lambda a: a.due is None)

    def in_file(self, file_path: Path | str) -> AnnotationList:
        """Filter to annotations in a specific file."""
        path = Path(file_path) if isinstance(file_path, str) else file_path
        return self.filter(lambda a: a.file_path == path)

    def sorted(self) -> AnnotationList:
        """Return a copy ordered by file path, then line number."""
        return AnnotationList(
            sorted(self._annotations, key=lambda a: (str(a.file_path), a.line_number))
        )
