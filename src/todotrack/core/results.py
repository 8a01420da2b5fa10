"""Result types for file-changing operations.

- Result - outcome of rewriting one file
- ErrorResult - a file that could not be read or written
- BatchResult - the outcomes of one rewrite run, one entry per file
"""
from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterator

from todotrack.core.diff import combine_diffs


@dataclass
class Result:
    """Outcome of rewriting a single file.

    Per-file failures are reported as results rather than raised, so one
    unwritable file does not stop the rest of a batch.

    Attributes:
        success: Whether the file is in the requested state
        message: Human-readable description of what happened
        files_changed: Files that were (or, in dry-run mode, would be) modified
        diff: Unified diff of the change, if any
        diffs: Per-file diffs mapping path to diff string
    """

    success: bool
    message: str
    files_changed: list[Path] = field(default_factory=list)
    diff: str | None = None
    diffs: dict[Path, str] = field(default_factory=dict)

    def __bool__(self) -> bool:
        return self.success


@dataclass
class ErrorResult(Result):
    """A file that was left untouched because it could not be read or written.

    Attributes:
        path: The file concerned
        exception: The I/O error that stopped the rewrite
    """

    success: bool = field(default=False, init=False)
    path: Path | None = None
    exception: Exception | None = None


@dataclass
class BatchResult:
    """All per-file results of one rewrite run, ordered by path."""

    results: list[Result] = field(default_factory=list)

    @property
    def success(self) -> bool:
        """True if every file was handled."""
        return all(r.success for r in self.results)

    @property
    def failed(self) -> list[Result]:
        return [r for r in self.results if not r.success]

    @property
    def files_changed(self) -> list[Path]:
        """Files changed across the batch, sorted."""
        files: set[Path] = set()
        for r in self.results:
            files.update(r.files_changed)
        return sorted(files)

    @property
    def diffs(self) -> dict[Path, str]:
        merged: dict[Path, str] = {}
        for r in self.results:
            merged.update(r.diffs)
        return merged

    @property
    def diff(self) -> str | None:
        """Combined diff of the batch, or None if nothing changed."""
        diffs = self.diffs
        if not diffs:
            return None
        return combine_diffs(diffs)

    def __bool__(self) -> bool:
        return self.success

    def __len__(self) -> int:
        return len(self.results)

    def __iter__(self) -> Iterator[Result]:
        return iter(self.results)
