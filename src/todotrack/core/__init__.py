"""
Core module.

Result types, line splitting and diff helpers shared by the rewrite engine and the CLI.
"""
from __future__ import annotations

from .diff import combine_diffs, generate_diff
from .results import BatchResult, ErrorResult, Result
from .text import line_body, split_lines

__all__ = [
    "Result",
    "ErrorResult",
    "BatchResult",
    "generate_diff",
    "combine_diffs",
    "split_lines",
    "line_body",
]
