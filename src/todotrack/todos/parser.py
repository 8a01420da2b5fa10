"""TODO comment parser: turns matched comment lines into Annotations."""
from __future__ import annotations

import re
from pathlib import Path

from todotrack.core.text import line_body, split_lines
from todotrack.errors import ConfigurationError
from todotrack.todos.annotation import COMMENT_DELIMITERS, Annotation
from todotrack.todos.metadata import EMPTY_METADATA, parse_metadata

# Matches:
#   # TODO: note
#   // todo(#12, @bob): note
#   /* TODO(ABC-3) note */
DEFAULT_PATTERN = (
    r"^\s*(?P<delimiter>//|/\*|#)\s*(?i:TODO)"
    r"(?:\((?P<meta>[^)]*)\))?"
    r":?"
    r"(?:\s+(?P<note>\S.*?))?\s*$"
)

REQUIRED_GROUPS = ("delimiter", "meta", "note")


def compile_pattern(pattern: str = DEFAULT_PATTERN) -> re.Pattern[str]:
    """Compile a TODO search pattern.

    Raises
    ------
    ConfigurationError
        If the pattern is not a valid regular expression or lacks one of
        the ``delimiter``, ``meta`` and ``note`` named groups.
    """
    try:
        compiled = re.compile(pattern)
    except re.error as e:
        raise ConfigurationError(f"Invalid TODO pattern {pattern!r}: {e}") from e

    missing = [g for g in REQUIRED_GROUPS if g not in compiled.groupindex]
    if missing:
        raise ConfigurationError(
            f"TODO pattern must define the named groups {', '.join(REQUIRED_GROUPS)}"
            f" (missing: {', '.join(missing)})"
        )
    return compiled


class TodoParser:
    """Parse TODO comments into :class:`Annotation` values.

    Recognizes the comment grammar::

        <indent>(//|/*|#) TODO[(<metadata>)][:] <note>

    The ``TODO`` keyword is matched case-insensitively. Lines that match the
    pattern but carry no note are near-matches and are dropped silently.

    Parameters
    ----------
    pattern : re.Pattern[str] | str | None
        Search pattern with ``delimiter``, ``meta`` and ``note`` groups.
        Defaults to :data:`DEFAULT_PATTERN`.

    Examples
    --------
    >>> parser = TodoParser()
    >>> todo = parser.parse_line("# TODO(@john): Fix this", Path("foo.py"), 10)
    >>> todo.assignee
    'john'
    """

    def __init__(self, pattern: re.Pattern[str] | str | None = None) -> None:
        if pattern is None:
            pattern = DEFAULT_PATTERN
        if isinstance(pattern, str):
            pattern = compile_pattern(pattern)
        self.pattern = pattern

    def from_match(
        self,
        match: re.Match[str],
        line: str,
        file_path: Path,
        line_number: int,
    ) -> Annotation | None:
        """Build an Annotation from a pattern match on ``line``.

        Parameters
        ----------
        match : re.Match[str]
            Match of :attr:`pattern` against ``line``.
        line : str
            The matched line, without its terminator.
        file_path : Path
            File the line came from.
        line_number : int
            1-based line number.

        Returns
        -------
        Annotation | None
            The annotation, or None when the match has no note or an
            unrecognized delimiter.
        """
        delimiter = match.group("delimiter")
        note = match.group("note")
        if not note or delimiter not in COMMENT_DELIMITERS:
            return None

        payload = match.group("meta")
        metadata = parse_metadata(payload) if payload is not None else EMPTY_METADATA

        return Annotation(
            file_path=file_path,
            line_number=line_number,
            delimiter=delimiter,
            raw_line=line,
            note=note,
            payload=payload,
            metadata=metadata,
        )

    def parse_line(
        self, line: str, file_path: Path, line_number: int
    ) -> Annotation | None:
        """Parse a single line for a TODO comment.

        Parameters
        ----------
        line : str
            The line to parse; a trailing line terminator is ignored.
        file_path : Path
            Path to the file containing the line.
        line_number : int
            1-based line number.

        Returns
        -------
        Annotation | None
            Parsed annotation or None if the line is not a TODO comment.
        """
        line = line_body(line)
        match = self.pattern.search(line)
        if not match:
            return None
        return self.from_match(match, line, file_path, line_number)

    def parse_content(self, content: str, file_path: Path) -> list[Annotation]:
        """Parse TODO comments from a content string.

        Parameters
        ----------
        content : str
            The text to parse.
        file_path : Path
            Path to associate with the annotations.

        Returns
        -------
        list[Annotation]
            Annotations in line order.
        """
        todos: list[Annotation] = []

        for line_number, line in enumerate(split_lines(content), 1):
            todo = self.parse_line(line, file_path, line_number)
            if todo:
                todos.append(todo)

        return todos
