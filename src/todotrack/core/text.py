"""Line splitting shared by the scanner, the rewriter and diffs.

Files are split at ``\\n`` only. Each line keeps its own terminator so a
rewrite can put back exactly the bytes it read.
"""
from __future__ import annotations


def split_lines(content: str) -> list[str]:
    """Split content at ``\\n`` only, keeping each line's terminator.

    Unlike ``str.splitlines`` this never breaks on form feeds or other
    Unicode separators, so line numbers agree with line-oriented tools.
    """
    parts = content.split("\n")
    lines = [part + "\n" for part in parts[:-1]]
    if parts[-1]:
        lines.append(parts[-1])
    return lines


def line_body(line: str) -> str:
    """Strip a single ``\\n`` or ``\\r\\n`` terminator from ``line``."""
    if line.endswith("\n"):
        line = line[:-1]
        if line.endswith("\r"):
            line = line[:-1]
    return line
