"""
Shared pytest fixtures for the todotrack test suite.

This module provides:
- Sample source trees containing TODO comments in several languages
- Pre-built TodoConfig instances pointed at those trees
- A helper for writing files with exact bytes

Fixture Naming Convention:
- tmp_* : Fixtures that create temporary directories/files
- sample_* : Fixtures that provide sample content strings
- config_* : Fixtures that provide TodoConfig instances
"""
from __future__ import annotations

import textwrap
from pathlib import Path
from typing import Callable

import pytest

from todotrack.config import TodoConfig


# =============================================================================
# Sample Content Fixtures
# =============================================================================

@pytest.fixture
def sample_python_code() -> str:
    """
    Python source with TODOs in several states.

    Contains:
    - A canonical TODO with issue, assignee and due date
    - A bare TODO without metadata
    - A lower case, non-canonical TODO
    - A line that mentions TODO outside a comment
    """
    return textwrap.dedent('''\
        import os

        # TODO(#12, @alice, 2024-06-01): handle missing files
        def load(path):
            # TODO: validate the path
            return open(path).read()


        class Cache:
            #   todo(@bob) evict old entries
            pass

        message = "TODO: not a comment"
    ''')


@pytest.fixture
def sample_c_code() -> str:
    """
    C source using both line and block comments.

    Contains:
    - A line comment TODO with a project-key issue
    - A block comment TODO with its closer on the same line
    """
    return textwrap.dedent('''\
        #include <stdio.h>

        int main(void) {
            // TODO(ABC-7): return a real status
            /* TODO(@carol): print usage */
            return 0;
        }
    ''')


# =============================================================================
# Temporary Tree Fixtures
# =============================================================================

@pytest.fixture
def write_file(tmp_path: Path) -> Callable[[str, str | bytes], Path]:
    """
    Return a helper that writes a file below ``tmp_path``.

    Strings are written as UTF-8 without newline translation, so tests
    control line terminators exactly.
    """

    def _write(relative: str, content: str | bytes) -> Path:
        path = tmp_path / relative
        path.parent.mkdir(parents=True, exist_ok=True)
        data = content.encode("utf-8") if isinstance(content, str) else content
        path.write_bytes(data)
        return path

    return _write


@pytest.fixture
def tmp_tree(
    tmp_path: Path,
    write_file: Callable[[str, str | bytes], Path],
    sample_python_code: str,
    sample_c_code: str,
) -> Path:
    """
    A small project tree.

    Structure:
        tmp_path/
        ├── app.py          (3 TODOs)
        ├── src/main.c      (2 TODOs)
        ├── build/out.py    (ignored via .gitignore)
        ├── .hidden.py      (hidden)
        └── .gitignore
    """
    write_file("app.py", sample_python_code)
    write_file("src/main.c", sample_c_code)
    write_file("build/out.py", "# TODO: generated\n")
    write_file(".hidden.py", "# TODO: secret\n")
    write_file(".gitignore", "build/\n")
    return tmp_path


@pytest.fixture
def config_tree(tmp_tree: Path) -> TodoConfig:
    """TodoConfig scanning ``tmp_tree`` with default settings."""
    return TodoConfig(roots=(tmp_tree,))
