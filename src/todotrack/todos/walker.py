"""Recursive file discovery honoring ``.gitignore`` / ``.ignore`` files.

Hidden entries (names starting with ``.``) are skipped unless asked for and
symlinked files are never yielded. Ignore files are applied to the directory
that contains them and everything below it. Negated rules (``!pattern``)
re-include paths.
"""
from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from fnmatch import fnmatch
from pathlib import Path
from typing import Iterable, Iterator

from todotrack.errors import TraversalError

logger = logging.getLogger(__name__)

IGNORE_FILE_NAMES = (".gitignore", ".ignore")

# Never descended into, even with hidden entries enabled
ALWAYS_SKIP_DIRS = frozenset({".git", ".hg", ".svn"})


@dataclass(frozen=True)
class IgnoreRule:
    """A single rule from an ignore file."""

    pattern: str
    negation: bool
    directory_only: bool
    anchored: bool  # matched against the path relative to source_dir
    source_dir: Path

    def matches(self, path: Path, is_dir: bool) -> bool:
        if self.directory_only and not is_dir:
            return False

        try:
            rel_str = path.relative_to(self.source_dir).as_posix()
        except ValueError:
            return False

        if self.anchored:
            return fnmatch(rel_str, self.pattern)
        return fnmatch(path.name, self.pattern) or fnmatch(rel_str, self.pattern)


def parse_ignore_file(ignore_path: Path, source_dir: Path) -> list[IgnoreRule]:
    """Parse an ignore file into rules.

    Raises
    ------
    TraversalError
        If the file exists but cannot be read.
    """
    try:
        text = ignore_path.read_text(encoding="utf-8", errors="replace")
    except FileNotFoundError:
        return []
    except OSError as e:
        raise TraversalError(ignore_path, e.strerror or str(e)) from e

    rules: list[IgnoreRule] = []
    for raw in text.splitlines():
        line = raw.rstrip()
        if not line or line.startswith("#"):
            continue

        negation = line.startswith("!")
        if negation:
            line = line[1:]

        directory_only = line.endswith("/")
        if directory_only:
            line = line.rstrip("/")

        anchored = "/" in line
        line = line.lstrip("/")
        if not line:
            continue

        rules.append(IgnoreRule(
            pattern=line,
            negation=negation,
            directory_only=directory_only,
            anchored=anchored,
            source_dir=source_dir,
        ))

    logger.debug("Loaded %d ignore rules from %s", len(rules), ignore_path)
    return rules


def is_ignored(path: Path, is_dir: bool, rules: Iterable[IgnoreRule]) -> bool:
    """Check ``path`` against ``rules``; the last matching rule wins."""
    ignored = False
    for rule in rules:
        if rule.matches(path, is_dir):
            ignored = not rule.negation
    return ignored


def _raise_traversal_error(error: OSError) -> None:
    raise TraversalError(error.filename or "<unknown>", error.strerror or str(error))


def walk_files(
    roots: Iterable[Path],
    hidden: bool = False,
    respect_ignore_files: bool = True,
) -> Iterator[Path]:
    """Yield candidate files below each root, in a stable order.

    Parameters
    ----------
    roots : Iterable[Path]
        Directories to walk, or individual files to yield as-is.
    hidden : bool
        Include entries whose name starts with ``.``.
    respect_ignore_files : bool
        Apply ``.gitignore`` and ``.ignore`` rules.

    Raises
    ------
    TraversalError
        If a root does not exist or a directory cannot be read. The walk
        stops at the first error rather than skipping the entry.
    """
    for root in roots:
        if root.is_file():
            yield root
            continue
        if not root.is_dir():
            raise TraversalError(root, "No such file or directory")

        inherited: dict[Path, list[IgnoreRule]] = {}

        for dirpath, dirnames, filenames in os.walk(root, onerror=_raise_traversal_error):
            current = Path(dirpath)
            rules = list(inherited.pop(current, []))
            if respect_ignore_files:
                for name in IGNORE_FILE_NAMES:
                    if name in filenames:
                        rules.extend(parse_ignore_file(current / name, current))

            kept_dirs = []
            for name in sorted(dirnames):
                if name in ALWAYS_SKIP_DIRS or (not hidden and name.startswith(".")):
                    continue
                child = current / name
                if is_ignored(child, True, rules):
                    logger.debug("Ignoring directory %s", child)
                    continue
                kept_dirs.append(name)
                inherited[child] = rules
            dirnames[:] = kept_dirs

            for name in sorted(filenames):
                if not hidden and name.startswith("."):
                    continue
                child = current / name
                # Symlinked files are not followed; rewriting one would replace the link
                if child.is_symlink():
                    logger.debug("Skipping symlink %s", child)
                    continue
                if is_ignored(child, False, rules):
                    continue
                yield child
