"""TODO comment management for source trees.

This package parses, finds, queries, lints and rewrites TODO comments of
the form ``// TODO(#12, @alice, 2024-06-01): note`` in any language that
uses ``//``, ``/*`` or ``#`` comments.

Classes
-------
Annotation
    One TODO comment found at a file and line.

AnnotationList
    Ordered collection of annotations with filtering helpers.

Metadata
    Parsed assignee, issue reference and due date.

TodoParser
    Turn matched comment lines into annotations.

TodoFinder
    Find TODO comments across a source tree.

TodoManager
    Plan metadata changes for batches of TODOs.

TodoRewriter
    Apply planned changes to files.

TodoReporter
    Generate text, JSON and CSV reports.

Examples
--------
>>> from todotrack import TodoConfig, TodoFinder, TodoManager, TodoRewriter
>>> todos = TodoFinder(TodoConfig()).find_all()
>>>
>>> # Filter helpers
>>> untracked = todos.without_issues()
>>> alice = todos.by_assignee("alice")
>>>
>>> # Batch edits
>>> updates = TodoManager(todos).rename_assignee("bob", "robert")
>>> result = TodoRewriter().apply(updates)
"""

from todotrack.todos.annotation import Annotation, AnnotationList, CommentDelimiter
from todotrack.todos.finder import TodoFinder
from todotrack.todos.issues import IssueFormat, IssueReference, NumberedIssue, ProjectKeyIssue, parse_issue
from todotrack.todos.lint import LintConfig, LintResult, Violation, lint
from todotrack.todos.manager import TodoManager
from todotrack.todos.metadata import Metadata, parse_metadata, render_metadata
from todotrack.todos.parser import TodoParser
from todotrack.todos.query import Grouping, TodoFilters, filter_todos, group_and_count
from todotrack.todos.reporter import TodoReporter
from todotrack.todos.rewriter import TodoRewriter, TodoUpdate

__all__ = [
    "Annotation",
    "AnnotationList",
    "CommentDelimiter",
    "Metadata",
    "parse_metadata",
    "render_metadata",
    "IssueFormat",
    "IssueReference",
    "NumberedIssue",
    "ProjectKeyIssue",
    "parse_issue",
    "TodoParser",
    "TodoFinder",
    "TodoFilters",
    "Grouping",
    "filter_todos",
    "group_and_count",
    "LintConfig",
    "LintResult",
    "Violation",
    "lint",
    "TodoManager",
    "TodoRewriter",
    "TodoUpdate",
    "TodoReporter",
]
