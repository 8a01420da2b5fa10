"""
Tests for todotrack.todos.manager module.

TodoManager turns a scan into TodoUpdate lists; it never touches files.

Coverage targets:
- Selection predicates of every mutation
- Metadata changes carried by the updates
- Validation of replacement issues and dates before anything is planned
"""
from __future__ import annotations

from pathlib import Path

import pytest

from todotrack.errors import ConfigurationError
from todotrack.todos.annotation import Annotation
from todotrack.todos.issues import NumberedIssue, ProjectKeyIssue
from todotrack.todos.manager import TodoManager, validate_assignee, validate_date, validate_issue
from todotrack.todos.parser import TodoParser
from todotrack.todos.rewriter import TodoUpdate


def make(payload: str | None, line_number: int) -> Annotation:
    meta = f"({payload})" if payload is not None else ""
    todo = TodoParser().parse_line(f"# TODO{meta}: n{line_number}", Path("a.py"), line_number)
    assert todo is not None
    return todo


def lines(updates: list[TodoUpdate]) -> list[int]:
    return [u.line_number for u in updates]


@pytest.fixture
def manager() -> TodoManager:
    return TodoManager([
        make("#1, @alice, 2024-01-01", 1),
        make(None, 2),
        make("ABC-2, @bob", 3),
        make("#1", 4),
    ])


# =============================================================================
# Validation
# =============================================================================

class TestValidation:
    """Tests for user supplied issue, date and assignee arguments."""

    def test_validate_issue(self):
        assert validate_issue("#9") == NumberedIssue("#9")
        assert validate_issue(" XY-1 ") == ProjectKeyIssue("XY", "1")

    def test_invalid_issue(self):
        with pytest.raises(ConfigurationError, match='Invalid replacement issue "xy-1"'):
            validate_issue("xy-1")

    def test_validate_date(self):
        assert validate_date("2024-02-29") == "2024-02-29"

    @pytest.mark.parametrize("text", ["2023-02-29", "tomorrow", "2024-1-1"])
    def test_invalid_date(self, text: str):
        with pytest.raises(ConfigurationError, match="Invalid due date"):
            validate_date(text)

    def test_validate_assignee(self):
        assert validate_assignee(" robert ") == "robert"
        assert validate_assignee("j.doe@example.com") == "j.doe@example.com"

    @pytest.mark.parametrize("text", ["", "   ", "al, #9)", "a b", "x)", "a,b"])
    def test_invalid_assignee(self, text: str):
        with pytest.raises(ConfigurationError, match="Invalid assignee"):
            validate_assignee(text)


# =============================================================================
# Issue mutations
# =============================================================================

class TestIssueMutations:
    """Tests for issue related mutations."""

    def test_remove_issue(self, manager: TodoManager):
        updates = manager.remove_issue("#1")

        assert lines(updates) == [1, 4]
        assert all(u.metadata.issue is None for u in updates)
        assert updates[0].metadata.assignee == "alice"

    def test_remove_all_issues(self, manager: TodoManager):
        assert lines(manager.remove_all_issues()) == [1, 3, 4]

    def test_rename_issue(self, manager: TodoManager):
        updates = manager.rename_issue("#1", "PROJ-10")

        assert lines(updates) == [1, 4]
        assert {u.metadata.issue for u in updates} == {ProjectKeyIssue("PROJ", "10")}

    def test_rename_issue_rejects_invalid_target(self, manager: TodoManager):
        """Validation happens even if nothing cites the old issue."""
        with pytest.raises(ConfigurationError):
            manager.rename_issue("#404", "bogus")

    def test_add_issue_to_untracked(self, manager: TodoManager):
        updates = manager.add_issue_to_untracked("#5")

        assert lines(updates) == [2]
        assert updates[0].metadata.issue_text == "#5"


# =============================================================================
# Assignee mutations
# =============================================================================

class TestAssigneeMutations:
    """Tests for assignee related mutations."""

    def test_remove_assignee(self, manager: TodoManager):
        updates = manager.remove_assignee("bob")

        assert lines(updates) == [3]
        assert updates[0].metadata.assignee is None
        assert updates[0].metadata.issue_text == "ABC-2"

    def test_remove_all_assignees(self, manager: TodoManager):
        assert lines(manager.remove_all_assignees()) == [1, 3]

    def test_rename_assignee(self, manager: TodoManager):
        updates = manager.rename_assignee("alice", "carol")

        assert lines(updates) == [1]
        assert updates[0].metadata.assignee == "carol"

    def test_assign_unassigned(self, manager: TodoManager):
        assert lines(manager.assign_unassigned("dan")) == [2, 4]

    def test_assign_issue(self, manager: TodoManager):
        """Every TODO citing the issue gets the assignee, replacing any other."""
        updates = manager.assign_issue("#1", "erin")

        assert lines(updates) == [1, 4]
        assert {u.metadata.assignee for u in updates} == {"erin"}

    @pytest.mark.parametrize(
        "plan",
        [
            lambda m: m.rename_assignee("alice", "al, #9)"),
            lambda m: m.assign_unassigned("a b"),
            lambda m: m.assign_issue("#1", ""),
        ],
    )
    def test_unrenderable_assignee_is_rejected(self, manager: TodoManager, plan):
        """A name that would break the metadata block is refused up front."""
        with pytest.raises(ConfigurationError, match="Invalid assignee"):
            plan(manager)


# =============================================================================
# Due date mutations
# =============================================================================

class TestDueDateMutations:
    """Tests for due date related mutations."""

    def test_remove_all_due_dates(self, manager: TodoManager):
        assert lines(manager.remove_all_due_dates()) == [1]

    def test_add_missing_due_dates(self, manager: TodoManager):
        updates = manager.add_missing_due_dates("2025-01-01")

        assert lines(updates) == [2, 3, 4]
        assert {u.metadata.due for u in updates} == {"2025-01-01"}

    def test_set_issue_due_date(self, manager: TodoManager):
        updates = manager.set_issue_due_date("#1", "2025-03-01")

        assert lines(updates) == [1, 4]
        assert updates[0].metadata.assignee == "alice"

    def test_add_missing_due_dates_rejects_invalid_date(self, manager: TodoManager):
        with pytest.raises(ConfigurationError):
            manager.add_missing_due_dates("2025-13-01")


class TestFormatAll:
    """Tests for format_all."""

    def test_every_todo_is_planned_unchanged(self, manager: TodoManager):
        updates = manager.format_all()

        assert lines(updates) == [1, 2, 3, 4]
        assert [u.metadata for u in updates] == [t.metadata for t in manager.todos]
        assert [u.note for u in updates] == ["n1", "n2", "n3", "n4"]

    def test_no_match_plans_nothing(self):
        assert TodoManager([]).remove_all_issues() == []
