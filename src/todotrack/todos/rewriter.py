"""Rewrite engine: applies TODO updates to the files they came from.

Updates are grouped per file so each file is read and written exactly once.
Only the targeted lines change; every other line, including its line
terminator, is written back exactly as it was read. A file is replaced via
a temporary sibling and an atomic rename, so it is never left half written.
"""
from __future__ import annotations

import logging
import os
import shutil
import tempfile
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable

from todotrack.core.diff import generate_diff
from todotrack.core.results import BatchResult, ErrorResult, Result
from todotrack.core.text import line_body, split_lines
from todotrack.todos.annotation import Annotation, leading_text, render_line
from todotrack.todos.metadata import Metadata

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TodoUpdate:
    """The desired state of one scanned TODO line.

    Attributes
    ----------
    file_path : Path
        File holding the line.
    line_number : int
        1-based line number from the scan the update was built from.
    delimiter : str
        Comment opener of the line.
    note : str
        Note to write.
    metadata : Metadata
        Metadata to write.
    """

    file_path: Path
    line_number: int
    delimiter: str
    note: str
    metadata: Metadata

    @classmethod
    def from_annotation(
        cls,
        todo: Annotation,
        metadata: Metadata | None = None,
        note: str | None = None,
    ) -> TodoUpdate:
        """Build an update for ``todo``, optionally replacing its metadata or note."""
        return cls(
            file_path=todo.file_path,
            line_number=todo.line_number,
            delimiter=todo.delimiter,
            note=todo.note if note is None else note,
            metadata=todo.metadata if metadata is None else metadata,
        )

    def apply_to(self, line: str) -> str:
        """Render this update over ``line`` (given without its terminator)."""
        return render_line(
            leading_text(line, self.delimiter), self.delimiter, self.metadata, self.note
        )


def group_updates(updates: Iterable[TodoUpdate]) -> dict[Path, dict[int, TodoUpdate]]:
    """Group updates by file, then by zero-based line index.

    If two updates target the same line the later one wins.
    """
    grouped: dict[Path, dict[int, TodoUpdate]] = {}
    for update in updates:
        grouped.setdefault(update.file_path, {})[update.line_number - 1] = update
    return grouped


def write_atomic(path: Path, data: bytes) -> None:
    """Replace ``path`` with ``data`` via a temporary file in the same directory.

    The original file's permission bits are kept. If ``path`` is a symlink the
    file it points to is replaced and the link is left in place.

    Raises
    ------
    OSError
        If the temporary file cannot be created or renamed into place.
    """
    path = Path(os.path.realpath(path))
    fd, tmp_name = tempfile.mkstemp(prefix=f".{path.name}.", suffix=".tmp", dir=path.parent)
    try:
        with os.fdopen(fd, "wb") as f:
            f.write(data)
            f.flush()
            os.fsync(f.fileno())
        shutil.copymode(path, tmp_name)
        os.replace(tmp_name, path)
    except BaseException:
        if os.path.exists(tmp_name):
            os.unlink(tmp_name)
        raise


class TodoRewriter:
    """Apply batches of :class:`TodoUpdate` to files.

    Each file is its own unit of work: a file that cannot be read or
    written yields an :class:`ErrorResult` and the remaining files are
    still processed.

    Parameters
    ----------
    dry_run : bool
        If True, compute diffs but leave every file untouched.

    Examples
    --------
    >>> rewriter = TodoRewriter()
    >>> result = rewriter.apply([TodoUpdate.from_annotation(todo)])
    >>> for failure in result.failed:
    ...     print(failure.message)
    """

    def __init__(self, dry_run: bool = False) -> None:
        self.dry_run = dry_run

    def rewrite_content(self, content: str, line_updates: dict[int, TodoUpdate]) -> str:
        """Return ``content`` with the targeted lines re-rendered.

        Parameters
        ----------
        content : str
            Current file content.
        line_updates : dict[int, TodoUpdate]
            Updates keyed by zero-based line index.
        """
        output: list[str] = []
        for index, line in enumerate(split_lines(content)):
            update = line_updates.get(index)
            if update is None:
                output.append(line)
                continue
            body = line_body(line)
            output.append(update.apply_to(body) + line[len(body):])
        return "".join(output)

    def rewrite_file(self, path: Path, line_updates: dict[int, TodoUpdate]) -> Result:
        """Apply the updates for a single file.

        Returns
        -------
        Result
            Success with the file's diff, or an ErrorResult describing why
            the file was left untouched.
        """
        try:
            original = path.read_bytes().decode("utf-8")
        except (OSError, UnicodeDecodeError) as e:
            logger.error("Cannot read %s: %s", path, e)
            return ErrorResult(
                message=f"Cannot read {path}: {e}",
                path=path,
                exception=e,
            )

        line_count = len(split_lines(original))
        stale = sorted(i + 1 for i in line_updates if i >= line_count)
        if stale:
            logger.warning("%s has no line(s) %s; file changed since scan?", path, stale)

        modified = self.rewrite_content(original, line_updates)
        if modified == original:
            return Result(success=True, message=f"{path} already up to date")

        diff = generate_diff(original, modified, path)

        if self.dry_run:
            return Result(
                success=True,
                message=f"[DRY RUN] Would rewrite {len(line_updates)} TODOs in {path}",
                files_changed=[path],
                diff=diff,
                diffs={path: diff},
            )

        try:
            write_atomic(path, modified.encode("utf-8"))
        except OSError as e:
            logger.error("Cannot write %s: %s", path, e)
            return ErrorResult(
                message=f"Cannot write {path}: {e}",
                path=path,
                exception=e,
            )

        logger.info("Rewrote %d TODOs in %s", len(line_updates), path)
        return Result(
            success=True,
            message=f"Rewrote {len(line_updates)} TODOs in {path}",
            files_changed=[path],
            diff=diff,
            diffs={path: diff},
        )

    def apply(self, updates: Iterable[TodoUpdate]) -> BatchResult:
        """Apply updates, one file at a time.

        Returns
        -------
        BatchResult
            One Result per affected file, ordered by path.
        """
        grouped = group_updates(updates)
        return BatchResult([
            self.rewrite_file(path, grouped[path])
            for path in sorted(grouped, key=str)
        ])
