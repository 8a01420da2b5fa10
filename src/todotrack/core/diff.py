"""Diff generation utilities.

Used by dry-run rewrites to show what would change without writing.
"""
from __future__ import annotations

import difflib
from pathlib import Path

from todotrack.core.text import split_lines


def generate_diff(
    original: str,
    modified: str,
    path: Path,
    context_lines: int = 3,
) -> str:
    """Generate unified diff between original and modified content.

    Parameters
    ----------
    original : str
        Original file content.
    modified : str
        Modified file content.
    path : Path
        Path to the file (used in diff header).
    context_lines : int
        Number of context lines to include around changes.

    Returns
    -------
    str
        Unified diff string, or empty string if no changes.

    Examples
    --------
    >>> diff = generate_diff("# todo: x\\n", "# TODO: x\\n", Path("a.py"))
    >>> print(diff)
    --- a/a.py
    +++ b/a.py
    @@ -1 +1 @@
    -# todo: x
    +# TODO: x
    """
    if original == modified:
        return ""

    original_lines = split_lines(original)
    modified_lines = split_lines(modified)

    # Diff lines must end with a newline to render correctly
    if original_lines and not original_lines[-1].endswith("\n"):
        original_lines[-1] += "\n"
    if modified_lines and not modified_lines[-1].endswith("\n"):
        modified_lines[-1] += "\n"

    diff = difflib.unified_diff(
        original_lines,
        modified_lines,
        fromfile=f"a/{path}",
        tofile=f"b/{path}",
        n=context_lines,
    )
    return "".join(diff)


def combine_diffs(diffs: dict[Path, str]) -> str:
    """Combine multiple file diffs into a single diff string.

    Parameters
    ----------
    diffs : dict[Path, str]
        Dictionary mapping file paths to their individual diffs.

    Returns
    -------
    str
        Combined diff string, ordered by path.
    """
    non_empty = {p: d for p, d in diffs.items() if d}
    if not non_empty:
        return ""

    sorted_diffs = sorted(non_empty.items(), key=lambda x: str(x[0]))
    return "\n".join(d for _, d in sorted_diffs)
