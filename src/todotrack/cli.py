"""
Command-line interface for todotrack.

Usage:
    todotrack [--path DIR]... list [--assignee NAME]... [--overdue]
    todotrack stat --group-by assignee
    todotrack lint --require-assignees --issue-format project-key
    todotrack fmt --dry-run
    todotrack mod rename-assignee --from bob --to robert
"""

from __future__ import annotations

import functools
import logging
from dataclasses import replace
from pathlib import Path
from typing import Any, Callable

import click

from todotrack import __version__
from todotrack.config import TodoConfig, load_config
from todotrack.core.results import ErrorResult
from todotrack.errors import TodoTrackError
from todotrack.todos.annotation import AnnotationList
from todotrack.todos.finder import TodoFinder
from todotrack.todos.issues import ISSUE_FORMATS
from todotrack.todos.lint import LintConfig, lint
from todotrack.todos.manager import TodoManager
from todotrack.todos.query import Grouping, TodoFilters, filter_todos, group_and_count
from todotrack.todos.reporter import NO_TODOS, REPORT_FORMATS, TodoReporter, format_counts, format_lint_report
from todotrack.todos.rewriter import TodoRewriter, TodoUpdate

logger = logging.getLogger(__name__)


def handle_errors(func: Callable[..., Any]) -> Callable[..., Any]:
    """Report todotrack errors as a single ``Error:`` line with exit code 1."""

    @functools.wraps(func)
    def wrapper(*args: Any, **kwargs: Any) -> Any:
        try:
            return func(*args, **kwargs)
        except TodoTrackError as e:
            raise click.ClickException(str(e)) from e

    return wrapper


def scan(config: TodoConfig) -> AnnotationList:
    """Scan the configured roots for TODOs."""
    return TodoFinder(config).find_all()


def query_options(func: Callable[..., Any]) -> Callable[..., Any]:
    """Attach the shared filter options to a query command."""
    options = [
        click.option("--assignee", "assignees", multiple=True, help="Only TODOs assigned to NAME (repeatable)."),
        click.option("--unassigned", is_flag=True, help="Only TODOs without an assignee (or also them, with --assignee)."),
        click.option("--issue", "issues", multiple=True, help="Only TODOs citing ISSUE (repeatable)."),
        click.option("--untracked", is_flag=True, help="Only TODOs without an issue (or also them, with --issue)."),
        click.option("--due", "due", multiple=True, help="Only TODOs due on DATE (repeatable)."),
        click.option("--someday", is_flag=True, help="Only TODOs without a due date (or also them, with --due)."),
        click.option("--overdue", is_flag=True, help="Only TODOs whose due date has passed."),
    ]
    for option in reversed(options):
        func = option(func)
    return func


def build_filters(
    assignees: tuple[str, ...],
    unassigned: bool,
    issues: tuple[str, ...],
    untracked: bool,
    due: tuple[str, ...],
    someday: bool,
    overdue: bool,
) -> TodoFilters:
    return TodoFilters(
        assignees=assignees or None,
        unassigned=unassigned,
        issues=issues or None,
        untracked=untracked,
        due=due or None,
        someday=someday,
        overdue=overdue,
    )


dry_run_option = click.option(
    "--dry-run", is_flag=True, help="Show a diff of the changes instead of writing files."
)


@click.group(invoke_without_command=True)
@click.option(
    "--path", "paths", multiple=True, type=click.Path(path_type=Path),
    help="Directory or file to scan (repeatable, default: current directory).",
)
@click.option(
    "--config", "config_path", type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="Config file (.toml or .yaml).",
)
@click.option("-j", "--workers", type=click.IntRange(min=1), help="Threads used to scan files.")
@click.option("--hidden", is_flag=True, help="Also scan hidden files and directories.")
@click.option("--no-ignore", is_flag=True, help="Do not apply .gitignore / .ignore rules.")
@click.option("-v", "--verbose", is_flag=True, help="Enable debug logging.")
@click.version_option(version=__version__, prog_name="todotrack")
@click.pass_context
@handle_errors
def main(
    ctx: click.Context,
    paths: tuple[Path, ...],
    config_path: Path | None,
    workers: int | None,
    hidden: bool,
    no_ignore: bool,
    verbose: bool,
) -> None:
    """Query, lint and rewrite TODO comments across a source tree."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    config = load_config(config_path)
    config = replace(
        config,
        roots=paths or config.roots,
        workers=workers or config.workers,
        hidden=hidden or config.hidden,
        respect_ignore_files=config.respect_ignore_files and not no_ignore,
    )
    logger.debug("Scanning %s", ", ".join(str(p) for p in config.roots))
    ctx.obj = config

    if ctx.invoked_subcommand is None:
        ctx.invoke(list_command)


@main.command("list")
@query_options
@click.option(
    "--format", "report_format", type=click.Choice(REPORT_FORMATS), default="text",
    show_default=True, help="Output format.",
)
@click.pass_obj
@handle_errors
def list_command(config: TodoConfig, report_format: str, **filter_args: Any) -> None:
    """List TODOs matching the given filters."""
    results = filter_todos(scan(config), build_filters(**filter_args))

    click.echo(TodoReporter(results).render(report_format))  # type: ignore[arg-type]
    if not results:
        raise click.exceptions.Exit(1)


@main.command("stat")
@query_options
@click.option(
    "--group-by", "group_by", metavar="[assignee|due|issue]",
    help="Count TODOs per assignee, due date or issue.",
)
@click.pass_obj
@handle_errors
def stat_command(config: TodoConfig, group_by: str | None, **filter_args: Any) -> None:
    """Count TODOs matching the given filters."""
    grouping = Grouping.parse(group_by) if group_by is not None else None
    results = filter_todos(scan(config), build_filters(**filter_args))

    if grouping is None:
        click.echo(len(results))
    elif results:
        click.echo(format_counts(group_and_count(results, grouping)))
    else:
        click.echo(NO_TODOS)
    if not results:
        raise click.exceptions.Exit(1)


@main.command("lint")
@click.option("--require-assignees", is_flag=True, help="Every TODO must have an assignee.")
@click.option("--require-issues", is_flag=True, help="Every TODO must cite an issue.")
@click.option("--require-due-dates", is_flag=True, help="Every TODO must have a due date.")
@click.option("--allowed-assignees", multiple=True, help="Permitted assignee (repeatable).")
@click.option("--issue-format", type=click.Choice(ISSUE_FORMATS), help="Required issue reference format.")
@click.option("--issue-project-keys", multiple=True, help="Permitted project key (repeatable).")
@click.pass_obj
@handle_errors
def lint_command(
    config: TodoConfig,
    require_assignees: bool,
    require_issues: bool,
    require_due_dates: bool,
    allowed_assignees: tuple[str, ...],
    issue_format: str | None,
    issue_project_keys: tuple[str, ...],
) -> None:
    """Check TODOs for canonical formatting and required metadata."""
    base = config.lint
    rules = LintConfig(
        require_assignee=require_assignees or base.require_assignee,
        require_issue=require_issues or base.require_issue,
        require_due_date=require_due_dates or base.require_due_date,
        allowed_assignees=allowed_assignees or base.allowed_assignees,
        required_issue_format=issue_format or base.required_issue_format,  # type: ignore[arg-type]
        allowed_project_keys=issue_project_keys or base.allowed_project_keys,
    )

    results = lint(scan(config), rules)
    if not results:
        click.echo("No TODO formatting errors found. Great job!")
        return

    click.echo(format_lint_report(results), err=True)
    raise click.exceptions.Exit(1)


def apply_updates(
    updates: list[TodoUpdate],
    dry_run: bool,
    done_message: str,
    empty_message: str,
) -> None:
    """Apply ``updates`` and report the outcome.

    An empty update list is not an error: ``empty_message`` is printed and
    no file is opened.
    """
    if not updates:
        click.echo(empty_message)
        return

    result = TodoRewriter(dry_run=dry_run).apply(updates)
    for failure in result.failed:
        if isinstance(failure, ErrorResult):
            logger.debug("Rewrite of %s failed", failure.path, exc_info=failure.exception)
        click.echo(f"Error: {failure.message}", err=True)

    changed = len(result.files_changed)
    if dry_run:
        if result.diff:
            click.echo(result.diff, nl=False)
        click.echo(f"[DRY RUN] Would update {len(updates)} TODOs in {changed} files")
    else:
        click.echo(f"{done_message} ({len(updates)} TODOs, {changed} files changed)")

    if result.failed:
        raise click.exceptions.Exit(1)


@main.command("fmt")
@dry_run_option
@click.pass_obj
@handle_errors
def fmt_command(config: TodoConfig, dry_run: bool) -> None:
    """Rewrite every TODO in canonical form."""
    updates = TodoManager(scan(config)).format_all()
    apply_updates(updates, dry_run, "TODOs formatted.", "No TODOs found")


@main.group("mod")
def mod_group() -> None:
    """Batch edit TODO metadata."""


@mod_group.command("remove-issue")
@click.option("--issue", required=True)
@dry_run_option
@click.pass_obj
@handle_errors
def remove_issue(config: TodoConfig, issue: str, dry_run: bool) -> None:
    """Remove citations of ISSUE."""
    updates = TodoManager(scan(config)).remove_issue(issue)
    apply_updates(
        updates, dry_run,
        f'All citations of issue "{issue}" were removed.',
        f'No TODOs citing issue "{issue}"',
    )


@mod_group.command("remove-all-issues")
@dry_run_option
@click.pass_obj
@handle_errors
def remove_all_issues(config: TodoConfig, dry_run: bool) -> None:
    """Remove every issue citation."""
    updates = TodoManager(scan(config)).remove_all_issues()
    apply_updates(updates, dry_run, "All citations of issues were removed.", "No TODOs citing any issues")


@mod_group.command("rename-issue")
@click.option("--from", "old", required=True)
@click.option("--to", "new", required=True)
@dry_run_option
@click.pass_obj
@handle_errors
def rename_issue(config: TodoConfig, old: str, new: str, dry_run: bool) -> None:
    """Make TODOs citing one issue cite another."""
    updates = TodoManager(scan(config)).rename_issue(old, new)
    apply_updates(
        updates, dry_run,
        f'All TODOs citing issue "{old}" now cite "{new}".',
        f'No TODOs citing issue "{old}"',
    )


@mod_group.command("add-issue-for-all-untracked")
@click.option("--issue", required=True)
@dry_run_option
@click.pass_obj
@handle_errors
def add_issue_for_all_untracked(config: TodoConfig, issue: str, dry_run: bool) -> None:
    """Cite ISSUE on every TODO without a citation."""
    updates = TodoManager(scan(config)).add_issue_to_untracked(issue)
    apply_updates(
        updates, dry_run,
        f'All untracked TODOs now cite issue "{issue}".',
        "No TODOs untracked",
    )


@mod_group.command("remove-assignee")
@click.option("--assignee", required=True)
@dry_run_option
@click.pass_obj
@handle_errors
def remove_assignee(config: TodoConfig, assignee: str, dry_run: bool) -> None:
    """Unassign TODOs assigned to ASSIGNEE."""
    updates = TodoManager(scan(config)).remove_assignee(assignee)
    apply_updates(
        updates, dry_run,
        f'All TODOs assigned to "{assignee}" were unassigned.',
        f'No TODOs assigned to "{assignee}"',
    )


@mod_group.command("remove-all-assignees")
@dry_run_option
@click.pass_obj
@handle_errors
def remove_all_assignees(config: TodoConfig, dry_run: bool) -> None:
    """Unassign every TODO."""
    updates = TodoManager(scan(config)).remove_all_assignees()
    apply_updates(updates, dry_run, "All TODOs were unassigned.", "No TODOs assigned")


@mod_group.command("rename-assignee")
@click.option("--from", "old", required=True)
@click.option("--to", "new", required=True)
@dry_run_option
@click.pass_obj
@handle_errors
def rename_assignee(config: TodoConfig, old: str, new: str, dry_run: bool) -> None:
    """Reassign TODOs from one assignee to another."""
    updates = TodoManager(scan(config)).rename_assignee(old, new)
    apply_updates(
        updates, dry_run,
        f'All TODOs assigned to "{old}" were reassigned to "{new}".',
        f'No TODOs assigned to "{old}"',
    )


@mod_group.command("assign-unassigned")
@click.option("--assignee", required=True)
@dry_run_option
@click.pass_obj
@handle_errors
def assign_unassigned(config: TodoConfig, assignee: str, dry_run: bool) -> None:
    """Assign every unassigned TODO to ASSIGNEE."""
    updates = TodoManager(scan(config)).assign_unassigned(assignee)
    apply_updates(
        updates, dry_run,
        f'All unassigned TODOs assigned to "{assignee}".',
        "No TODOs unassigned",
    )


@mod_group.command("assign-issue")
@click.option("--issue", required=True)
@click.option("--assignee", required=True)
@dry_run_option
@click.pass_obj
@handle_errors
def assign_issue(config: TodoConfig, issue: str, assignee: str, dry_run: bool) -> None:
    """Assign every TODO citing ISSUE to ASSIGNEE."""
    updates = TodoManager(scan(config)).assign_issue(issue, assignee)
    apply_updates(
        updates, dry_run,
        f'All TODOs citing issue "{issue}" assigned to "{assignee}".',
        f'No TODOs citing issue "{issue}"',
    )


@mod_group.command("remove-all-due-dates")
@dry_run_option
@click.pass_obj
@handle_errors
def remove_all_due_dates(config: TodoConfig, dry_run: bool) -> None:
    """Remove every due date."""
    updates = TodoManager(scan(config)).remove_all_due_dates()
    apply_updates(updates, dry_run, "All TODO due dates were removed.", "No TODOs with due dates")


@mod_group.command("add-missing-due-dates")
@click.option("--date", "due", required=True, help="Due date, YYYY-MM-DD.")
@dry_run_option
@click.pass_obj
@handle_errors
def add_missing_due_dates(config: TodoConfig, due: str, dry_run: bool) -> None:
    """Set a due date on every TODO without one."""
    updates = TodoManager(scan(config)).add_missing_due_dates(due)
    apply_updates(
        updates, dry_run,
        f'All TODOs without due dates are now due "{due}".',
        "No TODOs without due dates",
    )


@mod_group.command("set-issue-due-date")
@click.option("--issue", required=True)
@click.option("--date", "due", required=True, help="Due date, YYYY-MM-DD.")
@dry_run_option
@click.pass_obj
@handle_errors
def set_issue_due_date(config: TodoConfig, issue: str, due: str, dry_run: bool) -> None:
    """Set the due date of every TODO citing ISSUE."""
    updates = TodoManager(scan(config)).set_issue_due_date(issue, due)
    apply_updates(
        updates, dry_run,
        f'All TODOs citing issue "{issue}" are now due "{due}".',
        f'No TODOs citing issue "{issue}"',
    )


if __name__ == "__main__":
    main()
