"""Exception types raised by todotrack.

File-changing operations report per-file failures through Result objects
instead of raising. The exceptions below cover the conditions that must stop
a run before any file is touched, or that abort a scan.
"""
from __future__ import annotations

from pathlib import Path

__all__ = [
    "TodoTrackError",
    "ConfigurationError",
    "TraversalError",
]


class TodoTrackError(Exception):
    """Base exception for todotrack errors."""


class ConfigurationError(TodoTrackError):
    """Raised for invalid user input detected before any file is modified.

    Covers invalid search patterns, unsupported grouping keys, malformed
    replacement issue references or dates, and unreadable config files.
    """


class TraversalError(TodoTrackError):
    """Raised when a directory entry or file cannot be read during a scan."""

    def __init__(self, path: Path | str, reason: str) -> None:
        self.path = Path(path)
        self.reason = reason
        super().__init__(f"{path}: {reason}")
