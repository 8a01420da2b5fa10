"""
todotrack - treat TODO comments as a queryable issue tracker.

Scans a source tree for TODO comments, parses the metadata embedded in
them, and supports querying, linting and batch rewriting of those comments.

Example
-------
>>> from todotrack import TodoConfig, TodoFinder, TodoFilters, filter_todos
>>>
>>> todos = TodoFinder(TodoConfig()).find_all()
>>> overdue = filter_todos(todos, TodoFilters(overdue=True))
>>> for todo in overdue:
...     print(todo.location, todo.display_note)

Classes
-------
TodoConfig
    Settings for a run: roots, search pattern, walk and lint options.

Annotation
    One TODO comment found at a file and line.

TodoFinder
    Find TODO comments below the configured roots.

TodoManager
    Plan metadata changes (assign, cite, schedule) for batches of TODOs.

TodoRewriter
    Apply planned changes, one atomic write per file.

Result
    Result of a file operation. Contains success status, message, and
    list of changed files.

BatchResult
    Aggregate result for operations applied to multiple files.
"""

__version__ = "0.1.0"

from todotrack.config import TodoConfig, load_config
from todotrack.core.results import BatchResult, ErrorResult, Result
from todotrack.errors import ConfigurationError, TodoTrackError, TraversalError
from todotrack.todos import (
    Annotation,
    AnnotationList,
    Grouping,
    LintConfig,
    Metadata,
    TodoFilters,
    TodoFinder,
    TodoManager,
    TodoParser,
    TodoReporter,
    TodoRewriter,
    TodoUpdate,
    filter_todos,
    group_and_count,
    lint,
)

__all__ = [
    "__version__",
    "TodoConfig",
    "load_config",
    "Result",
    "ErrorResult",
    "BatchResult",
    "TodoTrackError",
    "ConfigurationError",
    "TraversalError",
    "Annotation",
    "AnnotationList",
    "Metadata",
    "TodoParser",
    "TodoFinder",
    "TodoFilters",
    "Grouping",
    "filter_todos",
    "group_and_count",
    "LintConfig",
    "lint",
    "TodoManager",
    "TodoRewriter",
    "TodoUpdate",
    "TodoReporter",
]
