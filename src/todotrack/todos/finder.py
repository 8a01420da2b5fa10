"""TODO comment finder for searching across source trees."""
from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import TYPE_CHECKING, Iterator

from todotrack.core.text import line_body, split_lines
from todotrack.errors import TraversalError
from todotrack.todos.annotation import Annotation, AnnotationList
from todotrack.todos.parser import TodoParser
from todotrack.todos.walker import walk_files

if TYPE_CHECKING:
    import re

    from todotrack.config import TodoConfig

logger = logging.getLogger(__name__)

# Bytes inspected for a NUL byte when deciding whether a file is binary
BINARY_SNIFF_SIZE = 8192


def read_text_file(file_path: Path) -> str | None:
    """Read a file as UTF-8 text.

    Returns
    -------
    str | None
        The content, or None for binary or non-UTF-8 files.

    Raises
    ------
    TraversalError
        If the file cannot be read.
    """
    try:
        data = file_path.read_bytes()
    except OSError as e:
        raise TraversalError(file_path, e.strerror or str(e)) from e

    if b"\x00" in data[:BINARY_SNIFF_SIZE]:
        logger.debug("Skipping binary file %s", file_path)
        return None

    try:
        # utf-8-sig drops a leading BOM so a TODO on line 1 still matches
        return data.decode("utf-8-sig")
    except UnicodeDecodeError:
        logger.debug("Skipping non UTF-8 file %s", file_path)
        return None


def search_lines(
    pattern: re.Pattern[str], content: str
) -> Iterator[tuple[int, str, re.Match[str]]]:
    """Lazily yield ``(line_number, line, match)`` for each matching line.

    Lines are yielded without their terminators; line numbers are 1-based.
    """
    for line_number, line in enumerate(split_lines(content), 1):
        body = line_body(line)
        match = pattern.search(body)
        if match:
            yield line_number, body, match


class TodoFinder:
    """Find TODO comments across a source tree.

    Walks every configured root, searches each file line by line and turns
    matches into :class:`Annotation` values. Files can be searched in
    parallel; results are always returned ordered by path and line.

    Parameters
    ----------
    config : TodoConfig
        Roots, search pattern and walk settings.

    Examples
    --------
    >>> finder = TodoFinder(config)
    >>> todos = finder.find_all()
    >>> print(f"Found {len(todos)} TODOs")
    """

    def __init__(self, config: TodoConfig) -> None:
        self._config = config
        self._parser = TodoParser(config.pattern)

    @property
    def parser(self) -> TodoParser:
        return self._parser

    def iter_files(self) -> Iterator[Path]:
        """Yield candidate files from the configured roots."""
        for path in walk_files(
            self._config.roots,
            hidden=self._config.hidden,
            respect_ignore_files=self._config.respect_ignore_files,
        ):
            if path.is_file():
                yield path

    def find_in_file(self, file_path: Path) -> list[Annotation]:
        """Find all TODO comments in a specific file.

        Parameters
        ----------
        file_path : Path
            Path to the file to search.

        Returns
        -------
        list[Annotation]
            Annotations found in the file, in line order.

        Raises
        ------
        TraversalError
            If the file cannot be read.
        """
        content = read_text_file(file_path)
        if content is None:
            return []

        todos: list[Annotation] = []
        for line_number, line, match in search_lines(self._parser.pattern, content):
            todo = self._parser.from_match(match, line, file_path, line_number)
            if todo is not None:
                todos.append(todo)
        return todos

    def find_all(self) -> AnnotationList:
        """Find all TODO comments below the configured roots.

        Returns
        -------
        AnnotationList
            Every annotation found, ordered by file path and line number.

        Raises
        ------
        TraversalError
            On the first unreadable directory or file.
        """
        files = list(self.iter_files())
        todos: list[Annotation] = []

        if self._config.workers > 1 and len(files) > 1:
            with ThreadPoolExecutor(max_workers=self._config.workers) as pool:
                for file_todos in pool.map(self.find_in_file, files):
                    todos.extend(file_todos)
        else:
            for file_path in files:
                todos.extend(self.find_in_file(file_path))

        logger.info("Found %d TODOs in %d files", len(todos), len(files))
        return AnnotationList(todos).sorted()
